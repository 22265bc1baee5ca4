from django.contrib import admin
from .models import Marca, Veiculo


@admin.register(Marca)
class MarcaAdmin(admin.ModelAdmin):
    list_display = ['nome']
    search_fields = ['nome']


@admin.register(Veiculo)
class VeiculoAdmin(admin.ModelAdmin):
    list_display = ['marca', 'modelo', 'ano', 'placa', 'preco', 'status']
    list_filter = ['status', 'marca']
    search_fields = ['modelo', 'placa', 'chassi', 'renavam']
    readonly_fields = ['data_criacao', 'data_atualizacao']
