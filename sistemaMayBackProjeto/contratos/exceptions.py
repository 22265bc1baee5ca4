"""
Erros do módulo de contratos.

Cada classe corresponde a um tipo de falha visível ao chamador; o
exception handler do DRF (core.exceptions.tratar_excecao) preserva o
tipo em `code` e o contexto em `details`.
"""
from rest_framework import status

from core.exceptions import ErroNegocio


class ErroContrato(ErroNegocio):
    pass


class DadosInvalidosError(ErroContrato):
    """Campos obrigatórios ausentes ou inválidos para o tipo de contrato"""
    codigo = 'validation_error'
    status_http = status.HTTP_400_BAD_REQUEST
    mensagem_padrao = 'Dados inválidos para o contrato.'

    def __init__(self, mensagem=None, campos=None, detalhes=None):
        detalhes = dict(detalhes or {})
        if campos:
            detalhes['campos'] = campos
        super().__init__(mensagem, detalhes)
        self.campos = campos or {}


class TransicaoInvalidaError(ErroContrato):
    codigo = 'invalid_transition'
    status_http = status.HTTP_409_CONFLICT

    def __init__(self, de, para, mensagem=None):
        self.de = de
        self.para = para
        super().__init__(
            mensagem or f"Transição de status não permitida: {de} → {para}",
            {'de': de, 'para': para},
        )


class NaoEncontradoError(ErroContrato):
    codigo = 'not_found'
    status_http = status.HTTP_404_NOT_FOUND
    mensagem_padrao = 'Registro não encontrado.'


class LinkExpiradoError(NaoEncontradoError):
    """Token expirado ou substituído por um link mais recente"""
    status_http = status.HTTP_410_GONE
    mensagem_padrao = 'Este link de assinatura expirou ou foi substituído por um mais recente.'


class CodigoInvalidoError(ErroContrato):
    codigo = 'invalid_code'
    status_http = status.HTTP_400_BAD_REQUEST
    mensagem_padrao = 'Código de verificação incorreto.'

    def __init__(self, tentativas_restantes, mensagem=None):
        self.tentativas_restantes = tentativas_restantes
        super().__init__(mensagem, {'tentativas_restantes': tentativas_restantes})


class TentativasExcedidasError(ErroContrato):
    codigo = 'too_many_attempts'
    status_http = status.HTTP_429_TOO_MANY_REQUESTS
    mensagem_padrao = 'Número máximo de tentativas excedido. Solicite um novo link à loja.'


class ConflitoError(ErroContrato):
    codigo = 'conflict'
    status_http = status.HTTP_409_CONFLICT
    mensagem_padrao = 'Operação conflita com o estado atual do contrato.'


class FalhaExternaError(ErroContrato):
    """Falha ao obter dados de um colaborador (cliente, veículo, loja)"""
    codigo = 'upstream_failure'
    status_http = status.HTTP_502_BAD_GATEWAY
    mensagem_padrao = 'Não foi possível obter os dados necessários para o contrato.'
