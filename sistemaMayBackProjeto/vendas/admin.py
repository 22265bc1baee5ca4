from django.contrib import admin
from .models import Venda


@admin.register(Venda)
class VendaAdmin(admin.ModelAdmin):
    list_display = ['id', 'cliente', 'veiculo', 'valor_total', 'tipo_pagamento', 'data_venda', 'data_erro_contrato']
    list_filter = ['tipo_pagamento', 'data_venda']
    search_fields = ['cliente__nome', 'cliente__cpf_cnpj', 'veiculo__placa']
    readonly_fields = ['erro_contrato', 'data_erro_contrato', 'data_criacao', 'data_atualizacao']
    raw_id_fields = ['cliente', 'veiculo', 'veiculo_troca']
