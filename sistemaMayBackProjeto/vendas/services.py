import logging

from django.db import transaction
from django.utils import timezone

from contratos.models import TipoContrato
from contratos.services import ContratoService
from core.services import LogService
from .models import Venda

logger = logging.getLogger(__name__)


class ContratoVendaService:
    """Geração automática do contrato de compra e venda a partir da venda"""

    @staticmethod
    def montar_dados_contrato(venda):
        entrada = venda.entrada or 0
        dados = {
            'tipo_contrato': TipoContrato.COMPRA_VENDA,
            'cliente': venda.cliente_id,
            'veiculo': venda.veiculo_id,
            'venda': venda.id,
            'valor_venda': venda.valor_total,
            'entrada_total': entrada,
            'entrada_paga': entrada,
            'observacoes': venda.observacoes,
        }
        if venda.tipo_pagamento == 'financed':
            dados.update({
                'valor_financiado': venda.valor_financiado,
                'banco_financiamento': venda.banco_financiamento,
                'parcelas_financiamento': venda.parcelas,
                'valor_parcela_financiamento': venda.valor_parcela,
            })
        if venda.veiculo_troca_id:
            dados.update({
                'veiculo_troca': venda.veiculo_troca_id,
                'valor_troca': venda.valor_troca,
            })
        return dados

    @staticmethod
    def criar_contrato_da_venda(venda, usuario=None):
        """
        Cria o contrato (rascunho) da venda. Falhas nunca desfazem a venda:
        são registradas em log e no próprio registro da venda.

        Returns:
            Contrato ou None em caso de falha
        """
        try:
            with transaction.atomic():
                contrato = ContratoService.criar(
                    ContratoVendaService.montar_dados_contrato(venda),
                    usuario or venda.criado_por or None,
                )
        except Exception as e:
            logger.exception(f"Erro ao gerar contrato da venda {venda.id}")
            LogService.registrar(
                usuario=usuario or venda.criado_por or None,
                nivel='ERROR',
                mensagem=f'Erro ao gerar contrato da venda {venda.id}: {e}',
                modulo='vendas',
                acao='criar_contrato_venda',
            )
            Venda.objects.filter(pk=venda.pk).update(erro_contrato=str(e), data_erro_contrato=timezone.now())
            venda.erro_contrato = str(e)
            return None

        if venda.erro_contrato:
            Venda.objects.filter(pk=venda.pk).update(erro_contrato='', data_erro_contrato=None)
            venda.erro_contrato = ''

        logger.info(f"Contrato {contrato.numero_contrato} gerado para a venda {venda.id}")
        return contrato

    @staticmethod
    def reprocessar_sem_contrato():
        """Tenta gerar o contrato das vendas que ainda não possuem nenhum"""
        gerados = 0
        falhas = 0
        for venda in Venda.objects.sem_contrato().select_related('cliente', 'veiculo'):
            if ContratoVendaService.criar_contrato_da_venda(venda):
                gerados += 1
            else:
                falhas += 1
        return gerados, falhas
