from rest_framework import serializers

from .models import Venda


class VendaSemContratoSerializer(serializers.ModelSerializer):
    cliente_nome = serializers.CharField(source='cliente.nome', read_only=True)
    veiculo_resumo = serializers.CharField(source='veiculo.resumo', read_only=True)
    tipo_pagamento_display = serializers.CharField(source='get_tipo_pagamento_display', read_only=True)

    class Meta:
        model = Venda
        fields = ['id', 'data_venda', 'cliente', 'cliente_nome', 'veiculo', 'veiculo_resumo',
                  'valor_total', 'tipo_pagamento', 'tipo_pagamento_display',
                  'erro_contrato', 'data_erro_contrato', 'data_criacao']
        read_only_fields = fields
