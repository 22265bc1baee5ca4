import logging
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErroNegocio(Exception):
    """
    Erro de regra de negócio com tipo (codigo) e status HTTP associados.

    As subclasses definem `codigo` e `status_http`; `detalhes` carrega o
    contexto que a interface precisa para explicar o problema (campos,
    transição, tentativas restantes).
    """
    codigo = 'erro'
    status_http = status.HTTP_400_BAD_REQUEST
    mensagem_padrao = 'Erro ao processar a solicitação.'

    def __init__(self, mensagem=None, detalhes=None):
        self.mensagem = mensagem or self.mensagem_padrao
        self.detalhes = detalhes or {}
        super().__init__(self.mensagem)

    def como_dict(self):
        return {
            'message': self.mensagem,
            'code': self.codigo,
            'details': self.detalhes,
        }


def tratar_excecao(exc, context):
    """Exception handler do DRF: converte ErroNegocio em resposta JSON"""
    if isinstance(exc, ErroNegocio):
        logger.info(f"{exc.codigo}: {exc.mensagem}")
        return Response(exc.como_dict(), status=exc.status_http)
    return exception_handler(exc, context)
