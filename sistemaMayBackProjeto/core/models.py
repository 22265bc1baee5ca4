from django.db import models


class ConfiguracaoSistema(models.Model):
    """Configurações globais do sistema"""
    chave = models.CharField(max_length=100, unique=True)
    valor = models.TextField()
    descricao = models.TextField(blank=True)
    ultima_atualizacao = models.DateTimeField(auto_now=True)
    tipo = models.CharField(max_length=20, choices=[
        ('TEXTO', 'Texto'),
        ('NUMERO', 'Número'),
        ('BOOLEANO', 'Booleano'),
        ('JSON', 'JSON'),
    ], default='TEXTO')

    def __str__(self):
        return f"{self.chave} = {self.valor}"

    class Meta:
        verbose_name = "Configuração do Sistema"
        verbose_name_plural = "Configurações do Sistema"


class LogSistema(models.Model):
    """Logs de atividades do sistema"""
    NIVEL_CHOICES = [
        ('INFO', 'Informação'),
        ('WARNING', 'Aviso'),
        ('ERROR', 'Erro'),
        ('DEBUG', 'Debug'),
    ]

    # Nome de quem executou a ação (equipe, cliente via link público ou 'Sistema')
    usuario = models.CharField(max_length=150, blank=True, default='Sistema')
    nivel = models.CharField(max_length=10, choices=NIVEL_CHOICES, default='INFO')
    mensagem = models.TextField()
    modulo = models.CharField(max_length=100)  # Ex: 'contratos', 'vendas'
    acao = models.CharField(max_length=100)    # Ex: 'assinar', 'criar_contrato_venda'
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    data_criacao = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.modulo}.{self.acao} - {self.nivel}"

    class Meta:
        verbose_name = "Log do Sistema"
        verbose_name_plural = "Logs do Sistema"
        ordering = ['-data_criacao']
        indexes = [
            models.Index(fields=['modulo', 'acao']),
            models.Index(fields=['data_criacao']),
        ]


class Loja(models.Model):
    """
    Dados cadastrais da loja (vendedora/consignatária nos contratos).
    O sistema trabalha com um único cadastro ativo.
    """
    razao_social = models.CharField('Razão Social', max_length=200)
    nome_fantasia = models.CharField('Nome Fantasia', max_length=200, blank=True)
    cnpj = models.CharField('CNPJ', max_length=18)
    email = models.EmailField(blank=True)
    telefone = models.CharField(max_length=20, blank=True)

    # Endereço
    cep = models.CharField(max_length=9, blank=True)
    rua = models.CharField(max_length=200, blank=True)
    numero = models.CharField(max_length=20, blank=True)
    complemento = models.CharField(max_length=100, blank=True)
    bairro = models.CharField(max_length=100, blank=True)
    cidade = models.CharField(max_length=100, blank=True)
    estado = models.CharField(max_length=2, blank=True)

    # Representante legal que assina pela loja
    representante_legal = models.CharField(max_length=200, blank=True)
    cpf_representante = models.CharField(max_length=14, blank=True)

    logo_url = models.URLField(blank=True)
    ativa = models.BooleanField(default=True)

    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Loja"
        verbose_name_plural = "Lojas"

    def __str__(self):
        return self.nome_fantasia or self.razao_social

    @classmethod
    def atual(cls):
        """Retorna o cadastro ativo da loja (ou None se ainda não configurado)"""
        return cls.objects.filter(ativa=True).order_by('id').first()

    @property
    def endereco_completo(self):
        partes = [p for p in [self.rua, self.numero, self.complemento, self.bairro] if p]
        endereco = ', '.join(partes)
        if self.cidade:
            endereco += f", {self.cidade}"
            if self.estado:
                endereco += f" - {self.estado}"
        if self.cep:
            endereco += f", CEP: {self.cep}"
        return endereco
