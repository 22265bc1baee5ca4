from django.contrib import admin
from .models import ArquivoContrato, AssinaturaContrato, Contrato, ParcelaContrato


class ParcelaContratoInline(admin.TabularInline):
    model = ParcelaContrato
    extra = 0
    readonly_fields = ['numero_parcela', 'valor', 'data_vencimento']


class ArquivoContratoInline(admin.TabularInline):
    model = ArquivoContrato
    extra = 0
    can_delete = False
    fields = ['nome_arquivo', 'url_arquivo', 'hash_arquivo', 'versao', 'gerado_por', 'data_criacao']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Contrato)
class ContratoAdmin(admin.ModelAdmin):
    list_display = ['numero_contrato', 'tipo_contrato', 'status', 'cliente', 'veiculo', 'data_criacao']
    list_filter = ['tipo_contrato', 'status', 'data_criacao']
    search_fields = ['numero_contrato', 'cliente__nome', 'cliente__cpf_cnpj', 'veiculo__placa']
    readonly_fields = ['numero_contrato', 'status', 'entrada_restante', 'historico_status',
                       'data_geracao', 'data_assinatura', 'data_cancelamento',
                       'data_criacao', 'data_atualizacao']
    raw_id_fields = ['cliente', 'veiculo', 'venda', 'contrato_relacionado', 'veiculo_troca']
    inlines = [ParcelaContratoInline, ArquivoContratoInline]

    fieldsets = (
        ('Contrato', {
            'fields': ('numero_contrato', 'tipo_contrato', 'status', 'cliente', 'veiculo', 'venda',
                       'contrato_relacionado')
        }),
        ('Valores', {
            'fields': ('valor_venda', 'entrada_total', 'entrada_paga', 'entrada_restante',
                       'valor_financiado', 'banco_financiamento', 'parcelas_financiamento',
                       'valor_parcela_financiamento')
        }),
        ('Pagamento do Restante', {
            'fields': ('forma_pagamento_restante', 'data_vencimento_avista', 'quantidade_parcelas',
                       'valor_parcela', 'dia_vencimento', 'forma_pagamento_parcelas')
        }),
        ('Penalidades', {
            'fields': ('multa_atraso', 'juros_atraso', 'clausula_vencimento_antecipado',
                       'penalidades_adicionais')
        }),
        ('Histórico', {
            'fields': ('historico_status', 'data_geracao', 'data_assinatura', 'data_cancelamento',
                       'data_criacao', 'data_atualizacao')
        }),
    )


@admin.register(AssinaturaContrato)
class AssinaturaContratoAdmin(admin.ModelAdmin):
    list_display = ['id', 'contrato', 'status', 'tentativas_validacao', 'expira_em', 'data_assinatura']
    list_filter = ['status']
    search_fields = ['contrato__numero_contrato', 'contrato__cliente__nome', 'email_cliente']
    readonly_fields = ['token', 'data_criacao', 'data_envio_email', 'data_validacao', 'ip_validacao',
                       'data_assinatura', 'ip_assinatura']
    raw_id_fields = ['contrato']
