from datetime import timedelta
from decimal import Decimal
import secrets

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.services import nome_usuario
from .exceptions import ConflitoError, TransicaoInvalidaError


class TipoContrato(models.TextChoices):
    COMPLEMENTO_ENTRADA = 'entry_complement', 'Complemento de Entrada'
    COMPRA_VENDA = 'purchase_sale', 'Compra e Venda'
    AQUISICAO_VEICULO = 'vehicle_purchase', 'Aquisição de Veículo'
    CONSIGNACAO = 'consignment', 'Consignação'
    PROTOCOLO_ENTREGA = 'delivery_protocol', 'Protocolo de Entrega'
    RETIRADA_CONSIGNACAO = 'consignment_withdrawal', 'Retirada em Consignação'


class StatusContrato(models.TextChoices):
    RASCUNHO = 'draft', 'Rascunho'
    GERADO = 'generated', 'Gerado - Aguardando Assinatura'
    ASSINADO = 'signed', 'Assinado pelo Cliente'
    CANCELADO = 'cancelled', 'Cancelado'


# Arestas permitidas da máquina de estados; signed e cancelled são finais
TRANSICOES_PERMITIDAS = {
    StatusContrato.RASCUNHO: {StatusContrato.GERADO, StatusContrato.CANCELADO},
    StatusContrato.GERADO: {StatusContrato.ASSINADO, StatusContrato.CANCELADO},
    StatusContrato.ASSINADO: set(),
    StatusContrato.CANCELADO: set(),
}


class Contrato(models.Model):
    FORMA_PAGAMENTO_RESTANTE_CHOICES = [
        ('avista', 'À Vista'),
        ('parcelado', 'Parcelado'),
    ]

    FORMA_PAGAMENTO_PARCELAS_CHOICES = [
        ('pix', 'PIX'),
        ('boleto', 'Boleto Bancário'),
        ('transferencia', 'Transferência Bancária'),
    ]

    # Relacionamentos
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.PROTECT, related_name='contratos')
    veiculo = models.ForeignKey('veiculos.Veiculo', on_delete=models.PROTECT, related_name='contratos')
    venda = models.ForeignKey(
        'vendas.Venda',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contratos'
    )
    contrato_relacionado = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contratos_vinculados',
        help_text='Contrato principal (ex.: compra e venda ao qual o complemento de entrada se vincula)'
    )

    # Informações do Contrato
    numero_contrato = models.CharField(max_length=50, unique=True, null=True, blank=True)
    tipo_contrato = models.CharField(max_length=30, choices=TipoContrato.choices)
    status = models.CharField(max_length=20, choices=StatusContrato.choices, default=StatusContrato.RASCUNHO)

    # Valores
    valor_venda = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    entrada_total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    entrada_paga = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    entrada_restante = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, editable=False)

    # Pagamento do restante da entrada
    forma_pagamento_restante = models.CharField(
        max_length=20, choices=FORMA_PAGAMENTO_RESTANTE_CHOICES, blank=True
    )
    data_vencimento_avista = models.DateField(null=True, blank=True)
    quantidade_parcelas = models.PositiveIntegerField(null=True, blank=True)
    valor_parcela = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    dia_vencimento = models.PositiveSmallIntegerField(null=True, blank=True)
    forma_pagamento_parcelas = models.CharField(
        max_length=20, choices=FORMA_PAGAMENTO_PARCELAS_CHOICES, blank=True
    )

    # Penalidades
    multa_atraso = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('2.00'))
    juros_atraso = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'))
    clausula_vencimento_antecipado = models.BooleanField(default=True)
    penalidades_adicionais = models.TextField(blank=True)

    # Financiamento
    valor_financiado = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    banco_financiamento = models.CharField(max_length=100, blank=True)
    numero_contrato_financiamento = models.CharField(max_length=100, blank=True)
    parcelas_financiamento = models.PositiveIntegerField(null=True, blank=True)
    valor_parcela_financiamento = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    # Veículo dado na troca
    veiculo_troca = models.ForeignKey(
        'veiculos.Veiculo',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contratos_como_troca'
    )
    valor_troca = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    observacoes_troca = models.TextField(blank=True)

    # Consignação
    valor_minimo_venda = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    comissao_loja = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    prazo_consignacao = models.PositiveIntegerField(null=True, blank=True, help_text='Prazo em dias')
    multa_retirada_antecipada = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    # Protocolo de entrega
    data_hora_entrega = models.DateTimeField(null=True, blank=True)
    chave_principal = models.BooleanField(default=False)
    chave_reserva = models.BooleanField(default=False)
    manual = models.BooleanField(default=False)
    condicao_geral = models.TextField(blank=True)

    # Retirada de consignação
    data_hora_retirada = models.DateTimeField(null=True, blank=True)
    motivo_retirada = models.TextField(blank=True)
    condicao_veiculo = models.TextField(blank=True)

    # Observações
    observacoes = models.TextField(blank=True)

    # Timeline de status (JSON)
    historico_status = models.JSONField(
        default=list,
        blank=True,
        help_text='Histórico de mudanças de status com timestamps'
    )

    # Datas do ciclo de vida
    data_geracao = models.DateTimeField(null=True, blank=True)
    data_assinatura = models.DateTimeField(null=True, blank=True)
    data_cancelamento = models.DateTimeField(null=True, blank=True)

    # Controle
    criado_por = models.CharField(max_length=150, blank=True)

    # Timestamps
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Contrato"
        verbose_name_plural = "Contratos"
        ordering = ['-data_criacao']
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['tipo_contrato']),
        ]

    def __str__(self):
        return f"Contrato {self.numero_contrato or self.id} - {self.get_tipo_contrato_display()} - {self.cliente}"

    def calcular_entrada_restante(self):
        if self.entrada_total is None or self.entrada_paga is None:
            return None
        return max(Decimal('0'), Decimal(self.entrada_total) - Decimal(self.entrada_paga))

    def save(self, *args, **kwargs):
        self.entrada_restante = self.calcular_entrada_restante()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and {'entrada_total', 'entrada_paga'} & set(update_fields):
            kwargs['update_fields'] = set(update_fields) | {'entrada_restante'}
        super().save(*args, **kwargs)
        if not self.numero_contrato:
            self.gerar_numero_contrato()

    def gerar_numero_contrato(self):
        """Gera número único do contrato baseado na data e ID"""
        ano = (self.data_criacao or timezone.now()).year
        self.numero_contrato = f"CONT-{ano}-{self.id:05d}"
        Contrato.objects.filter(pk=self.pk).update(numero_contrato=self.numero_contrato)

    @property
    def editavel(self):
        return self.status not in (StatusContrato.ASSINADO, StatusContrato.CANCELADO)

    def pode_transicionar(self, novo_status):
        return novo_status in TRANSICOES_PERMITIDAS.get(self.status, set())

    def adicionar_historico_status(self, novo_status, usuario=None, observacao=''):
        """Adiciona entrada no histórico de status (não salva)"""
        if not self.historico_status:
            self.historico_status = []

        self.historico_status.append({
            'status': novo_status,
            'data': timezone.now().isoformat(),
            'usuario': nome_usuario(usuario),
            'observacao': observacao,
        })

    def mudar_status(self, novo_status, usuario=None, observacao=''):
        """Muda status do contrato e registra no histórico"""
        status_antigo = self.status
        if not self.pode_transicionar(novo_status):
            raise TransicaoInvalidaError(status_antigo, novo_status)

        self.status = novo_status

        agora = timezone.now()
        if novo_status == StatusContrato.GERADO:
            self.data_geracao = agora
        elif novo_status == StatusContrato.ASSINADO:
            self.data_assinatura = agora
        elif novo_status == StatusContrato.CANCELADO:
            self.data_cancelamento = agora

        obs_completa = f"Status alterado de {status_antigo} para {novo_status}"
        if observacao:
            obs_completa += f" - {observacao}"
        self.adicionar_historico_status(novo_status, usuario, obs_completa)

        self.save(update_fields=[
            'status', 'data_geracao', 'data_assinatura', 'data_cancelamento',
            'historico_status', 'data_atualizacao',
        ])


class ParcelaContrato(models.Model):
    contrato = models.ForeignKey(Contrato, on_delete=models.CASCADE, related_name='parcelas')
    numero_parcela = models.PositiveIntegerField()
    valor = models.DecimalField(max_digits=12, decimal_places=2)
    data_vencimento = models.DateField()
    paga = models.BooleanField(default=False)
    data_pagamento = models.DateField(null=True, blank=True)
    valor_pago = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    class Meta:
        verbose_name = "Parcela do Contrato"
        verbose_name_plural = "Parcelas do Contrato"
        ordering = ['contrato', 'numero_parcela']
        constraints = [
            models.UniqueConstraint(fields=['contrato', 'numero_parcela'], name='parcela_unica_por_contrato'),
        ]

    def __str__(self):
        return f"Parcela {self.numero_parcela}/{self.contrato.quantidade_parcelas} - {self.contrato}"


class ArquivoContrato(models.Model):
    """Registro imutável de uma exportação do texto do contrato"""
    GERADO_POR_CHOICES = [
        ('signature_request', 'Envio para Assinatura'),
        ('digital_signature', 'Assinatura Digital'),
        ('staff_export', 'Exportação pela Equipe'),
    ]

    contrato = models.ForeignKey(Contrato, on_delete=models.CASCADE, related_name='arquivos')
    nome_arquivo = models.CharField(max_length=255)
    url_arquivo = models.CharField(max_length=500)
    hash_arquivo = models.CharField(max_length=64)
    conteudo = models.TextField(help_text='Texto exportado nesta versão')
    versao = models.PositiveIntegerField(default=1)
    gerado_por = models.CharField(max_length=30, choices=GERADO_POR_CHOICES)
    data_criacao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Arquivo do Contrato"
        verbose_name_plural = "Arquivos do Contrato"
        ordering = ['contrato', 'versao']

    def __str__(self):
        return f"{self.nome_arquivo} (v{self.versao})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ConflitoError('Arquivos de contrato não podem ser alterados após o registro.')
        super().save(*args, **kwargs)


class StatusAssinatura(models.TextChoices):
    PENDENTE = 'pending', 'Aguardando Validação'
    VALIDADA = 'validated', 'Identidade Validada'
    ASSINADA = 'signed', 'Assinada'
    INVALIDADA = 'invalidated', 'Invalidada'


def gerar_token_assinatura():
    return secrets.token_hex(32)


def calcular_expiracao():
    return timezone.now() + timedelta(hours=settings.CONTRATO_ASSINATURA_VALIDADE_HORAS)


class AssinaturaContrato(models.Model):
    contrato = models.ForeignKey(Contrato, on_delete=models.CASCADE, related_name='assinaturas')
    token = models.CharField(max_length=64, unique=True, default=gerar_token_assinatura, editable=False)
    status = models.CharField(max_length=20, choices=StatusAssinatura.choices, default=StatusAssinatura.PENDENTE)
    tentativas_validacao = models.PositiveIntegerField(default=0)
    email_cliente = models.EmailField(blank=True)
    expira_em = models.DateTimeField(default=calcular_expiracao)

    data_envio_email = models.DateTimeField(null=True, blank=True)
    data_validacao = models.DateTimeField(null=True, blank=True)
    ip_validacao = models.GenericIPAddressField(null=True, blank=True)
    data_assinatura = models.DateTimeField(null=True, blank=True)
    ip_assinatura = models.GenericIPAddressField(null=True, blank=True)

    data_criacao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Assinatura Digital"
        verbose_name_plural = "Assinaturas Digitais"
        ordering = ['-data_criacao']
        constraints = [
            models.UniqueConstraint(
                fields=['contrato'],
                condition=Q(status__in=['pending', 'validated']),
                name='uma_assinatura_ativa_por_contrato',
            ),
        ]

    def __str__(self):
        return f"Assinatura {self.token[:8]}… - {self.contrato} ({self.get_status_display()})"

    @property
    def expirada(self):
        return self.status != StatusAssinatura.ASSINADA and timezone.now() >= self.expira_em

    @property
    def link(self):
        return f"{settings.SITE_URL.rstrip('/')}/assinar/{self.token}"
