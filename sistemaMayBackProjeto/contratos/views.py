from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.utils import get_client_ip
from .exceptions import DadosInvalidosError, NaoEncontradoError
from .serializers import (
    ArquivoContratoSerializer,
    AssinaturaContratoSerializer,
    ContratoSerializer,
    PagamentoParcelaSerializer,
    ParcelaContratoSerializer,
    TransicaoStatusSerializer,
    ValidacaoCodigoSerializer,
)
from .services import (
    AssinaturaService,
    ContratoService,
    DocumentoService,
    ParcelaService,
    obter_contrato,
)


def _resposta_pdf(contrato, pdf_bytes):
    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{contrato.numero_contrato}.pdf"'
    return response


def _validar(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise DadosInvalidosError('Dados inválidos.', campos=serializer.errors)
    return serializer.validated_data


# ==================== API DA EQUIPE ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contratos(request):
    """Lista contratos (filtros: status, tipo, busca) ou cria um novo rascunho"""
    if request.method == 'POST':
        contrato = ContratoService.criar(request.data, request.user, get_client_ip(request))
        return Response(ContratoSerializer(contrato).data, status=status.HTTP_201_CREATED)

    queryset = ContratoService.listar(
        status=request.query_params.get('status'),
        tipo=request.query_params.get('tipo'),
        busca=request.query_params.get('busca'),
    )
    return Response(ContratoSerializer(queryset, many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contrato_detalhe(request, contrato_id):
    ip = get_client_ip(request)
    if request.method == 'PATCH':
        contrato = ContratoService.atualizar(contrato_id, request.data, request.user, ip)
        return Response(ContratoSerializer(contrato).data)

    if request.method == 'DELETE':
        ContratoService.excluir(contrato_id, request.user, ip)
        return Response(status=status.HTTP_204_NO_CONTENT)

    return Response(ContratoSerializer(obter_contrato(contrato_id)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def contrato_status(request, contrato_id):
    """Transição de status (draft -> generated -> signed; cancelamento)"""
    dados = _validar(TransicaoStatusSerializer, request.data)
    contrato = ContratoService.transicionar(
        contrato_id, dados['status'], request.user, dados['observacao'], get_client_ip(request)
    )
    return Response(ContratoSerializer(contrato).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contrato_texto(request, contrato_id):
    contrato = obter_contrato(contrato_id)
    return Response({
        'numero_contrato': contrato.numero_contrato,
        'tipo_contrato': contrato.tipo_contrato,
        'texto': DocumentoService.renderizar(contrato),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contrato_pdf(request, contrato_id):
    """
    Gera o PDF atual do contrato e registra a exportação.
    Com ?versao=N devolve o texto gravado naquela versão, sem criar
    novo registro.
    """
    versao = request.query_params.get('versao')
    if versao:
        contrato, arquivo = DocumentoService.arquivo_da_versao(contrato_id, versao)
        texto = arquivo.conteudo
    else:
        contrato, _, texto = DocumentoService.exportar(contrato_id, request.user, get_client_ip(request))

    return _resposta_pdf(contrato, DocumentoService.gerar_pdf(contrato, texto))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contrato_parcelas(request, contrato_id):
    contrato = obter_contrato(contrato_id)
    return Response(ParcelaContratoSerializer(contrato.parcelas.all(), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pagar_parcela(request, parcela_id):
    dados = _validar(PagamentoParcelaSerializer, request.data)
    parcela = ParcelaService.registrar_pagamento(
        parcela_id,
        valor_pago=dados.get('valor_pago'),
        data_pagamento=dados.get('data_pagamento'),
        usuario=request.user,
        ip=get_client_ip(request),
    )
    return Response(ParcelaContratoSerializer(parcela).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contrato_arquivos(request, contrato_id):
    """Versões exportadas do contrato; POST registra uma nova exportação"""
    if request.method == 'POST':
        _, arquivo, _ = DocumentoService.exportar(contrato_id, request.user, get_client_ip(request))
        return Response(ArquivoContratoSerializer(arquivo).data, status=status.HTTP_201_CREATED)

    contrato = obter_contrato(contrato_id)
    return Response(ArquivoContratoSerializer(contrato.arquivos.all(), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def enviar_assinatura(request, contrato_id):
    """Gera (se necessário), emite novo link e envia ao e-mail do cliente"""
    assinatura = AssinaturaService.enviar_para_assinatura(contrato_id, request.user, get_client_ip(request))
    return Response(AssinaturaContratoSerializer(assinatura).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contrato_assinatura(request, contrato_id):
    assinatura = AssinaturaService.assinatura_atual(contrato_id)
    if assinatura is None:
        raise NaoEncontradoError('Nenhum link de assinatura emitido para este contrato.')
    return Response(AssinaturaContratoSerializer(assinatura).data)


# ==================== ASSINATURA PÚBLICA (CLIENTE) ====================

@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def assinatura_publica(request, token):
    return Response(AssinaturaService.consultar(token))


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def assinatura_validar(request, token):
    """Valida a identidade do cliente (3 dígitos do CPF/CNPJ)"""
    dados = _validar(ValidacaoCodigoSerializer, request.data)
    assinatura = AssinaturaService.validar(token, dados['codigo'], get_client_ip(request))
    return Response({'validado': True, 'status': assinatura.status})


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def assinatura_contrato(request, token):
    assinatura, texto = AssinaturaService.documento(token)
    return Response({
        'numero_contrato': assinatura.contrato.numero_contrato,
        'tipo_contrato': assinatura.contrato.tipo_contrato,
        'texto': texto,
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def assinatura_pdf(request, token):
    assinatura, texto = AssinaturaService.documento(token)
    pdf_bytes = DocumentoService.gerar_pdf(assinatura.contrato, texto, assinatura)
    return _resposta_pdf(assinatura.contrato, pdf_bytes)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def assinatura_assinar(request, token):
    assinatura = AssinaturaService.assinar(token, get_client_ip(request))
    return Response({
        'assinado': True,
        'numero_contrato': assinatura.contrato.numero_contrato,
        'data_assinatura': assinatura.data_assinatura,
    })
