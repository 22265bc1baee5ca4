import json
import logging
from .models import ConfiguracaoSistema, LogSistema

logger = logging.getLogger(__name__)


def nome_usuario(usuario):
    """Nome legível para históricos e logs (aceita User, texto ou None)"""
    if usuario is None:
        return 'Sistema'
    if isinstance(usuario, str):
        return usuario or 'Sistema'
    nome = ''
    if hasattr(usuario, 'get_full_name'):
        nome = usuario.get_full_name()
    return nome or getattr(usuario, 'username', '') or str(usuario)


class LogService:
    """Serviço centralizado de logging"""

    NIVEIS_ORDEM = {'DEBUG': 10, 'INFO': 20, 'WARNING': 30, 'ERROR': 40}

    @staticmethod
    def _logar_console(nivel, modulo, acao, mensagem):
        log_message = f"[{modulo}.{acao}] {mensagem}"
        if nivel == 'ERROR':
            logger.error(log_message)
        elif nivel == 'WARNING':
            logger.warning(log_message)
        else:
            logger.info(log_message)

    @staticmethod
    def registrar(usuario=None, nivel='INFO', mensagem='', modulo='', acao='', ip=None):
        """Registra log no banco de dados"""
        nivel = str(nivel).upper()
        try:
            # Respeita configuração de logs
            ativo = ConfiguracaoService.obter_config('LOG_ATIVO', True)
            nivel_min = str(ConfiguracaoService.obter_config('LOG_NIVEL_MINIMO', 'INFO') or 'INFO').upper()
            ordem = LogService.NIVEIS_ORDEM
            if not ativo or ordem.get(nivel, 20) < ordem.get(nivel_min, 20):
                LogService._logar_console(nivel, modulo, acao, mensagem)
                return None
            log = LogSistema.objects.create(
                usuario=nome_usuario(usuario),
                nivel=nivel,
                mensagem=mensagem,
                modulo=modulo,
                acao=acao,
                ip_address=ip or None,
            )
            LogService._logar_console(nivel, modulo, acao, mensagem)
            return log
        except Exception as e:
            logger.error(f"Erro ao registrar log: {e}")
            return None


class ConfiguracaoService:
    """Serviço de configurações do sistema"""

    @staticmethod
    def obter_config(chave, valor_padrao=None):
        """Obtém valor de configuração"""
        try:
            config = ConfiguracaoSistema.objects.get(chave=chave)
            # Converte o valor baseado no tipo
            if config.tipo == 'NUMERO':
                return float(config.valor) if '.' in config.valor else int(config.valor)
            elif config.tipo == 'BOOLEANO':
                return config.valor.lower() in ('true', '1', 'yes')
            elif config.tipo == 'JSON':
                return json.loads(config.valor)
            else:
                return config.valor
        except ConfiguracaoSistema.DoesNotExist:
            return valor_padrao
        except (ValueError, TypeError) as e:
            logger.error(f"Erro ao obter configuração {chave}: {e}")
            return valor_padrao

    @staticmethod
    def definir_config(chave, valor, descricao='', tipo='TEXTO'):
        """Define ou atualiza configuração"""
        config, created = ConfiguracaoSistema.objects.get_or_create(
            chave=chave,
            defaults={'valor': str(valor), 'descricao': descricao, 'tipo': tipo}
        )
        if not created:
            config.valor = str(valor)
            if descricao:
                config.descricao = descricao
            config.tipo = tipo
            config.save()
        return config

    @staticmethod
    def inicializar_configs():
        """Inicializa as configurações padrão do sistema (não sobrescreve existentes)"""
        configs = [
            {
                'chave': 'LOG_ATIVO',
                'valor': 'true',
                'tipo': 'BOOLEANO',
                'descricao': 'Grava logs de atividades no banco de dados'
            },
            {
                'chave': 'LOG_NIVEL_MINIMO',
                'valor': 'INFO',
                'tipo': 'TEXTO',
                'descricao': 'Nível mínimo gravado no banco (DEBUG, INFO, WARNING, ERROR)'
            },
        ]
        criadas = 0
        for item in configs:
            _, created = ConfiguracaoSistema.objects.get_or_create(
                chave=item['chave'],
                defaults={'valor': item['valor'], 'tipo': item['tipo'], 'descricao': item['descricao']}
            )
            if created:
                criadas += 1
        return criadas
