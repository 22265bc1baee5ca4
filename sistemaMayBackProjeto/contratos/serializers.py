from rest_framework import serializers

from .models import (
    ArquivoContrato,
    AssinaturaContrato,
    Contrato,
    StatusContrato,
    ParcelaContrato,
    TipoContrato,
)

CAMPOS_EDITAVEIS = [
    'tipo_contrato', 'cliente', 'veiculo', 'venda', 'contrato_relacionado',
    'valor_venda', 'entrada_total', 'entrada_paga',
    'forma_pagamento_restante', 'data_vencimento_avista', 'quantidade_parcelas',
    'valor_parcela', 'dia_vencimento', 'forma_pagamento_parcelas',
    'multa_atraso', 'juros_atraso', 'clausula_vencimento_antecipado', 'penalidades_adicionais',
    'valor_financiado', 'banco_financiamento', 'numero_contrato_financiamento',
    'parcelas_financiamento', 'valor_parcela_financiamento',
    'veiculo_troca', 'valor_troca', 'observacoes_troca',
    'valor_minimo_venda', 'comissao_loja', 'prazo_consignacao', 'multa_retirada_antecipada',
    'data_hora_entrega', 'chave_principal', 'chave_reserva', 'manual', 'condicao_geral',
    'data_hora_retirada', 'motivo_retirada', 'condicao_veiculo',
    'observacoes',
]

CAMPOS_NAO_NEGATIVOS = [
    'valor_venda', 'entrada_total', 'entrada_paga', 'valor_parcela', 'multa_atraso',
    'juros_atraso', 'valor_financiado', 'valor_parcela_financiamento', 'valor_troca',
    'valor_minimo_venda', 'comissao_loja', 'multa_retirada_antecipada',
]


class ContratoTipoSerializer(serializers.ModelSerializer):
    """
    Base dos serializers de entrada: cada tipo de contrato define os campos
    que exige além de cliente e veículo.
    """
    tipo = None
    campos_obrigatorios = ()

    class Meta:
        model = Contrato
        fields = CAMPOS_EDITAVEIS

    def get_campos_obrigatorios(self, valores):
        return list(self.campos_obrigatorios)

    def validate_dia_vencimento(self, value):
        if value is not None and not 1 <= value <= 31:
            raise serializers.ValidationError('O dia de vencimento deve estar entre 1 e 31.')
        return value

    def validate_tipo_contrato(self, value):
        if self.instance is not None and value != self.instance.tipo_contrato:
            raise serializers.ValidationError('O tipo do contrato não pode ser alterado.')
        if self.tipo and value != self.tipo:
            raise serializers.ValidationError(f'Tipo esperado: {self.tipo}.')
        return value

    def validate(self, attrs):
        # No update parcial, os obrigatórios são conferidos contra o estado final
        valores = {}
        if self.instance is not None:
            valores = {campo: getattr(self.instance, campo) for campo in CAMPOS_EDITAVEIS}
        valores.update(attrs)

        erros = {}
        for campo in self.get_campos_obrigatorios(valores):
            if valores.get(campo) in (None, ''):
                erros[campo] = [f'Campo obrigatório para contratos do tipo '
                                f'{TipoContrato(self.tipo).label}.']

        for campo in CAMPOS_NAO_NEGATIVOS:
            valor = valores.get(campo)
            if valor is not None and valor < 0:
                erros[campo] = ['O valor não pode ser negativo.']

        relacionado = valores.get('contrato_relacionado')
        if relacionado is not None and self.instance is not None and relacionado.pk == self.instance.pk:
            erros['contrato_relacionado'] = ['O contrato não pode ser vinculado a ele mesmo.']

        if erros:
            raise serializers.ValidationError(erros)
        return attrs


class ComplementoEntradaSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.COMPLEMENTO_ENTRADA
    campos_obrigatorios = ('entrada_total', 'entrada_paga', 'forma_pagamento_restante')

    def get_campos_obrigatorios(self, valores):
        campos = list(self.campos_obrigatorios)
        forma = valores.get('forma_pagamento_restante')
        if forma == 'parcelado':
            campos += ['quantidade_parcelas', 'valor_parcela', 'dia_vencimento', 'forma_pagamento_parcelas']
        elif forma == 'avista':
            campos.append('data_vencimento_avista')
        return campos


class CompraVendaSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.COMPRA_VENDA
    campos_obrigatorios = ('valor_venda',)


class AquisicaoVeiculoSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.AQUISICAO_VEICULO
    campos_obrigatorios = ('valor_venda',)


class ConsignacaoSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.CONSIGNACAO
    campos_obrigatorios = ('valor_minimo_venda', 'comissao_loja', 'prazo_consignacao')


class ProtocoloEntregaSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.PROTOCOLO_ENTREGA
    campos_obrigatorios = ('data_hora_entrega',)


class RetiradaConsignacaoSerializer(ContratoTipoSerializer):
    tipo = TipoContrato.RETIRADA_CONSIGNACAO
    campos_obrigatorios = ('data_hora_retirada', 'motivo_retirada')


SERIALIZERS_POR_TIPO = {
    TipoContrato.COMPLEMENTO_ENTRADA: ComplementoEntradaSerializer,
    TipoContrato.COMPRA_VENDA: CompraVendaSerializer,
    TipoContrato.AQUISICAO_VEICULO: AquisicaoVeiculoSerializer,
    TipoContrato.CONSIGNACAO: ConsignacaoSerializer,
    TipoContrato.PROTOCOLO_ENTREGA: ProtocoloEntregaSerializer,
    TipoContrato.RETIRADA_CONSIGNACAO: RetiradaConsignacaoSerializer,
}


class ParcelaContratoSerializer(serializers.ModelSerializer):
    class Meta:
        model = ParcelaContrato
        fields = ['id', 'numero_parcela', 'valor', 'data_vencimento', 'paga', 'data_pagamento', 'valor_pago']
        read_only_fields = fields


class PagamentoParcelaSerializer(serializers.Serializer):
    valor_pago = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    data_pagamento = serializers.DateField(required=False)


class ArquivoContratoSerializer(serializers.ModelSerializer):
    gerado_por_display = serializers.CharField(source='get_gerado_por_display', read_only=True)

    class Meta:
        model = ArquivoContrato
        fields = ['id', 'nome_arquivo', 'url_arquivo', 'hash_arquivo', 'versao', 'gerado_por',
                  'gerado_por_display', 'data_criacao']
        read_only_fields = fields


class AssinaturaContratoSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    link = serializers.CharField(read_only=True)

    class Meta:
        model = AssinaturaContrato
        fields = ['id', 'token', 'link', 'status', 'status_display', 'tentativas_validacao',
                  'email_cliente', 'expira_em', 'data_envio_email', 'data_validacao',
                  'data_assinatura', 'data_criacao']
        read_only_fields = fields


class ContratoSerializer(serializers.ModelSerializer):
    """Representação de saída (listagem e detalhe)"""
    tipo_contrato_display = serializers.CharField(source='get_tipo_contrato_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    cliente_nome = serializers.CharField(source='cliente.nome', read_only=True)
    veiculo_resumo = serializers.CharField(source='veiculo.resumo', read_only=True)
    parcelas = ParcelaContratoSerializer(many=True, read_only=True)

    class Meta:
        model = Contrato
        fields = ['id', 'numero_contrato', 'status', 'status_display', 'tipo_contrato_display',
                  'cliente_nome', 'veiculo_resumo', 'entrada_restante', 'historico_status',
                  'data_geracao', 'data_assinatura', 'data_cancelamento', 'criado_por',
                  'data_criacao', 'data_atualizacao', 'parcelas'] + CAMPOS_EDITAVEIS
        read_only_fields = fields


class TransicaoStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=StatusContrato.choices)
    observacao = serializers.CharField(required=False, allow_blank=True, default='')


class ValidacaoCodigoSerializer(serializers.Serializer):
    codigo = serializers.CharField(allow_blank=True, trim_whitespace=True)
