from django.db import models
from core.utils import Validadores


class Cliente(models.Model):
    nome = models.CharField(max_length=200)
    cpf_cnpj = models.CharField('CPF/CNPJ', max_length=18, unique=True)
    rg = models.CharField(max_length=20, blank=True)
    cnh = models.CharField('CNH', max_length=20, blank=True)
    email = models.EmailField(blank=True)
    telefone = models.CharField(max_length=20, blank=True)

    # Endereço
    cep = models.CharField(max_length=10, blank=True)
    rua = models.CharField(max_length=255, blank=True)
    numero = models.CharField(max_length=10, blank=True)
    complemento = models.CharField(max_length=100, blank=True)
    bairro = models.CharField(max_length=100, blank=True)
    cidade = models.CharField(max_length=100, blank=True)
    estado = models.CharField(max_length=2, blank=True)

    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"
        ordering = ['nome']

    def __str__(self):
        return self.nome

    @property
    def documento_digitos(self):
        return Validadores.apenas_digitos(self.cpf_cnpj)

    @property
    def tipo_documento(self):
        """'CPF' para 11 dígitos, 'CNPJ' para 14, None para documento inválido"""
        tamanho = len(self.documento_digitos)
        if tamanho == 11:
            return 'CPF'
        if tamanho == 14:
            return 'CNPJ'
        return None

    def get_cpf_cnpj_display(self):
        return Validadores.formatar_cpf_cnpj(self.cpf_cnpj)

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
