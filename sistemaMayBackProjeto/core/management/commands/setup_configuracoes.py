from django.core.management.base import BaseCommand
from core.models import Loja
from core.services import ConfiguracaoService

class Command(BaseCommand):
    help = 'Configurações iniciais do sistema (parâmetros de log e cadastro da loja)'

    def add_arguments(self, parser):
        parser.add_argument('--razao-social', help='Razão social da loja (cria o cadastro se não existir)')
        parser.add_argument('--cnpj', default='', help='CNPJ da loja')

    def handle(self, *args, **options):
        self.stdout.write(self.style.HTTP_INFO('Inicializando configurações do sistema...'))

        criadas = ConfiguracaoService.inicializar_configs()
        self.stdout.write(self.style.SUCCESS(f'{criadas} configuração(ões) criada(s)'))

        razao_social = options.get('razao_social')
        if Loja.atual():
            self.stdout.write(f'Loja já cadastrada: {Loja.atual()}')
        elif razao_social:
            loja = Loja.objects.create(razao_social=razao_social, cnpj=options.get('cnpj') or '')
            self.stdout.write(self.style.SUCCESS(f'Loja cadastrada: {loja}'))
        else:
            self.stdout.write(self.style.WARNING(
                'Nenhuma loja cadastrada. Contratos não poderão ser gerados até que o cadastro seja feito.'
            ))

        self.stdout.write(self.style.SUCCESS('Configurações inicializadas com sucesso!'))
