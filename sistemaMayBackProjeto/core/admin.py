from django.contrib import admin
from .models import ConfiguracaoSistema, LogSistema, Loja


@admin.register(ConfiguracaoSistema)
class ConfiguracaoSistemaAdmin(admin.ModelAdmin):
    list_display = ('chave', 'valor', 'tipo', 'ultima_atualizacao', 'descricao')
    search_fields = ('chave', 'descricao')
    list_filter = ('tipo',)
    readonly_fields = ('ultima_atualizacao',)
    fieldsets = (
        (None, {
            'fields': ('chave', 'valor', 'tipo')
        }),
        ('Informações Adicionais', {
            'fields': ('descricao', 'ultima_atualizacao'),
        }),
    )


@admin.register(LogSistema)
class LogSistemaAdmin(admin.ModelAdmin):
    list_display = ['modulo', 'acao', 'nivel', 'usuario', 'data_criacao']
    list_filter = ['nivel', 'modulo', 'data_criacao']
    search_fields = ['mensagem', 'modulo', 'acao']
    readonly_fields = ['data_criacao']


@admin.register(Loja)
class LojaAdmin(admin.ModelAdmin):
    list_display = ['razao_social', 'nome_fantasia', 'cnpj', 'representante_legal', 'ativa']
    list_filter = ['ativa']
    search_fields = ['razao_social', 'nome_fantasia', 'cnpj']
    readonly_fields = ['data_criacao', 'data_atualizacao']

    fieldsets = (
        ('Identificação', {
            'fields': ('razao_social', 'nome_fantasia', 'cnpj', 'email', 'telefone', 'logo_url', 'ativa')
        }),
        ('Endereço', {
            'fields': ('cep', 'rua', 'numero', 'complemento', 'bairro', 'cidade', 'estado')
        }),
        ('Representante Legal', {
            'fields': ('representante_legal', 'cpf_representante')
        }),
        ('Controle', {
            'fields': ('data_criacao', 'data_atualizacao')
        }),
    )
