from django.core.management.base import BaseCommand

from vendas.models import Venda
from vendas.services import ContratoVendaService


class Command(BaseCommand):
    help = 'Lista as vendas sem contrato e, opcionalmente, tenta gerar os contratos'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reprocessar',
            action='store_true',
            help='Tenta gerar novamente o contrato de compra e venda das vendas listadas',
        )

    def handle(self, *args, **options):
        vendas = Venda.objects.sem_contrato().select_related('cliente', 'veiculo', 'veiculo__marca')
        total = vendas.count()

        if not total:
            self.stdout.write(self.style.SUCCESS('Todas as vendas possuem contrato.'))
            return

        self.stdout.write(self.style.WARNING(f'{total} venda(s) sem contrato:\n'))
        for venda in vendas:
            linha = f'  Venda {venda.id} - {venda.cliente.nome} - {venda.veiculo.resumo} - {venda.data_venda:%d/%m/%Y}'
            if venda.erro_contrato:
                linha += f'\n      Erro: {venda.erro_contrato}'
            self.stdout.write(linha)

        if options['reprocessar']:
            gerados, falhas = ContratoVendaService.reprocessar_sem_contrato()
            self.stdout.write('\n' + '=' * 60)
            self.stdout.write(self.style.SUCCESS(f'Contratos gerados: {gerados}'))
            if falhas:
                self.stdout.write(self.style.ERROR(f'Falhas: {falhas}'))
