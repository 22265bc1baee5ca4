import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Venda
from .services import ContratoVendaService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Venda)
def gerar_contrato_da_venda(sender, instance, created, **kwargs):
    """
    Toda venda nova ganha automaticamente um contrato de compra e venda
    em rascunho. Erros ficam registrados na venda e não a desfazem.
    """
    if not created or kwargs.get('raw'):
        return
    ContratoVendaService.criar_contrato_da_venda(instance)


@receiver(post_save, sender=Venda)
def marcar_veiculo_vendido(sender, instance, created, **kwargs):
    if not created or kwargs.get('raw'):
        return
    veiculo = instance.veiculo
    if veiculo.status != 'vendido':
        veiculo.status = 'vendido'
        veiculo.save(update_fields=['status', 'data_atualizacao'])
        logger.info(f"Veículo {veiculo.id} marcado como vendido (venda {instance.id})")
