from django.contrib import admin
from .models import Cliente


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ['nome', 'cpf_cnpj', 'email', 'telefone', 'cidade', 'data_criacao']
    search_fields = ['nome', 'cpf_cnpj', 'email']
    list_filter = ['estado']
    readonly_fields = ['data_criacao', 'data_atualizacao']
