from django.db import models


class VendaQuerySet(models.QuerySet):

    def sem_contrato(self):
        """Vendas que não possuem nenhum contrato vinculado"""
        return self.filter(contratos__isnull=True)

    def com_erro_contrato(self):
        return self.exclude(erro_contrato='')


class Venda(models.Model):
    TIPO_PAGAMENTO_CHOICES = [
        ('cash', 'À Vista'),
        ('financed', 'Financiado'),
        ('credit_card', 'Cartão de Crédito'),
    ]

    # Relacionamentos
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.PROTECT, related_name='vendas')
    veiculo = models.ForeignKey('veiculos.Veiculo', on_delete=models.PROTECT, related_name='vendas')

    # Valores da Venda
    data_venda = models.DateField()
    valor_total = models.DecimalField(max_digits=12, decimal_places=2)
    tipo_pagamento = models.CharField(max_length=20, choices=TIPO_PAGAMENTO_CHOICES, default='cash')
    entrada = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    # Financiamento / parcelamento
    valor_financiado = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    parcelas = models.PositiveIntegerField(null=True, blank=True)
    valor_parcela = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    banco_financiamento = models.CharField(max_length=100, blank=True)

    # Veículo dado na troca
    veiculo_troca = models.ForeignKey(
        'veiculos.Veiculo',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vendas_como_troca'
    )
    valor_troca = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    observacoes = models.TextField(blank=True)
    criado_por = models.CharField(max_length=150, blank=True)

    # Auditoria da geração automática do contrato
    erro_contrato = models.TextField(
        blank=True,
        help_text='Último erro ao gerar o contrato de compra e venda automaticamente'
    )
    data_erro_contrato = models.DateTimeField(null=True, blank=True)

    # Timestamps
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    objects = VendaQuerySet.as_manager()

    def __str__(self):
        return f"Venda {self.id} - {self.cliente} - R$ {self.valor_total}"

    class Meta:
        verbose_name = "Venda"
        verbose_name_plural = "Vendas"
        ordering = ['-data_criacao']
