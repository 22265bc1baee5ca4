from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Venda
from .serializers import VendaSemContratoSerializer
from .services import ContratoVendaService


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def vendas_sem_contrato(request):
    """
    Vendas que ficaram sem contrato (falha na geração automática).
    POST tenta gerar novamente os contratos pendentes.
    """
    if request.method == 'POST':
        gerados, falhas = ContratoVendaService.reprocessar_sem_contrato()
        return Response({'gerados': gerados, 'falhas': falhas})

    vendas = Venda.objects.sem_contrato().select_related('cliente', 'veiculo', 'veiculo__marca')
    return Response(VendaSemContratoSerializer(vendas, many=True).data)
