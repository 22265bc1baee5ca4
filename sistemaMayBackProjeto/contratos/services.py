import hashlib
import logging
import re
from datetime import timedelta

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import transaction
from django.db.models import F, Max, Q
from django.urls import reverse
from django.utils import timezone
from num2words import num2words
from workalendar.america import Brazil

from core.models import Loja
from core.services import LogService, nome_usuario
from core.utils import Validadores
from .documentos import DadosContrato, renderizar_contrato
from .emails import enviar_contrato_assinado, enviar_link_assinatura
from .exceptions import (
    CodigoInvalidoError,
    ConflitoError,
    DadosInvalidosError,
    FalhaExternaError,
    LinkExpiradoError,
    NaoEncontradoError,
    TentativasExcedidasError,
)
from .models import (
    ArquivoContrato,
    AssinaturaContrato,
    Contrato,
    ParcelaContrato,
    StatusAssinatura,
    StatusContrato,
    TipoContrato,
)
from .serializers import SERIALIZERS_POR_TIPO

logger = logging.getLogger(__name__)

STATUS_ASSINATURA_ATIVOS = [StatusAssinatura.PENDENTE, StatusAssinatura.VALIDADA]

STATUS_CONTRATO_FINAIS = [StatusContrato.ASSINADO, StatusContrato.CANCELADO]

CAMPOS_PAGAMENTO = {
    'forma_pagamento_restante', 'quantidade_parcelas', 'valor_parcela', 'dia_vencimento',
}

MESES = [
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
]


def _erros_para_dict(erros):
    """Converte os erros do serializer em dict simples (campo -> lista de mensagens)"""
    if isinstance(erros, dict):
        return {campo: _erros_para_dict(valor) for campo, valor in erros.items()}
    if isinstance(erros, list):
        return [str(e) if not isinstance(e, (dict, list)) else _erros_para_dict(e) for e in erros]
    return str(erros)


def obter_contrato(contrato_id, para_atualizar=False):
    queryset = Contrato.objects.select_related('cliente', 'veiculo', 'veiculo__marca')
    if para_atualizar:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(pk=contrato_id)
    except (Contrato.DoesNotExist, ValueError, TypeError):
        raise NaoEncontradoError(f"Contrato {contrato_id} não encontrado.", {'contrato_id': contrato_id})


class ContratoService:
    """Criação, edição e ciclo de vida dos contratos"""

    @staticmethod
    def _serializer(tipo, **kwargs):
        if tipo not in TipoContrato.values:
            raise DadosInvalidosError(
                'Tipo de contrato inválido.',
                campos={'tipo_contrato': [f'Valores aceitos: {", ".join(TipoContrato.values)}.']},
            )
        return SERIALIZERS_POR_TIPO[tipo](**kwargs)

    @staticmethod
    def criar(dados, usuario=None, ip=None):
        """
        Cria um contrato em rascunho.

        Args:
            dados: dict com tipo_contrato, cliente, veiculo e os campos do tipo
            usuario: quem criou (User, nome ou None para 'Sistema')
            ip: IP de origem, para o log

        Returns:
            Contrato: contrato criado (status draft)

        Raises:
            DadosInvalidosError: campo obrigatório ausente ou inválido
        """
        serializer = ContratoService._serializer(dados.get('tipo_contrato'), data=dados)
        if not serializer.is_valid():
            raise DadosInvalidosError(
                'Dados obrigatórios ausentes ou inválidos.',
                campos=_erros_para_dict(serializer.errors),
            )

        with transaction.atomic():
            contrato = serializer.save(status=StatusContrato.RASCUNHO, criado_por=nome_usuario(usuario))
            contrato.adicionar_historico_status(StatusContrato.RASCUNHO, usuario, 'Contrato criado')
            contrato.save(update_fields=['historico_status'])
            ParcelaService.gerar_parcelas(contrato)

        LogService.registrar(
            usuario=usuario,
            nivel='INFO',
            mensagem=f'Contrato {contrato.numero_contrato} ({contrato.tipo_contrato}) criado',
            modulo='contratos',
            acao='criar',
            ip=ip,
        )
        return contrato

    @staticmethod
    def atualizar(contrato_id, dados, usuario=None, ip=None):
        """Atualização parcial; contratos assinados ou cancelados não podem ser alterados"""
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            if not contrato.editavel:
                raise ConflitoError(
                    f'Contrato {contrato.get_status_display().lower()} não pode ser alterado. '
                    'Crie um novo contrato.',
                    {'status': contrato.status},
                )

            serializer = ContratoService._serializer(
                contrato.tipo_contrato, instance=contrato, data=dados, partial=True
            )
            if not serializer.is_valid():
                raise DadosInvalidosError(
                    'Dados obrigatórios ausentes ou inválidos.',
                    campos=_erros_para_dict(serializer.errors),
                )
            contrato = serializer.save()

            if CAMPOS_PAGAMENTO & set(serializer.validated_data):
                ParcelaService.gerar_parcelas(contrato)

        LogService.registrar(
            usuario=usuario,
            mensagem=f'Contrato {contrato.numero_contrato} atualizado ({", ".join(sorted(dados))})',
            modulo='contratos',
            acao='atualizar',
            ip=ip,
        )
        return contrato

    @staticmethod
    def transicionar(contrato_id, novo_status, usuario=None, observacao='', ip=None):
        """
        Aplica uma transição de status. Ao entrar em estado final (assinado
        ou cancelado) os links de assinatura ativos são invalidados; na
        assinatura o cronograma de parcelas passa a contar da data assinada.
        """
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            contrato.mudar_status(novo_status, usuario, observacao)
            if novo_status in STATUS_CONTRATO_FINAIS:
                AssinaturaContrato.objects.filter(
                    contrato=contrato, status__in=STATUS_ASSINATURA_ATIVOS
                ).update(status=StatusAssinatura.INVALIDADA)
            if novo_status == StatusContrato.ASSINADO:
                ParcelaService.gerar_parcelas(contrato, timezone.localdate(contrato.data_assinatura))

        LogService.registrar(
            usuario=usuario,
            mensagem=f'Contrato {contrato.numero_contrato} alterado para {novo_status}',
            modulo='contratos',
            acao='transicionar',
            ip=ip,
        )
        return contrato

    @staticmethod
    def excluir(contrato_id, usuario=None, ip=None):
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            if contrato.status == StatusContrato.ASSINADO:
                raise ConflitoError(
                    'Contratos assinados não podem ser excluídos.',
                    {'status': contrato.status},
                )
            numero = contrato.numero_contrato
            contrato.delete()

        LogService.registrar(
            usuario=usuario,
            nivel='WARNING',
            mensagem=f'Contrato {numero} excluído',
            modulo='contratos',
            acao='excluir',
            ip=ip,
        )

    @staticmethod
    def listar(status=None, tipo=None, busca=None):
        contratos = Contrato.objects.select_related('cliente', 'veiculo', 'veiculo__marca')
        if status:
            contratos = contratos.filter(status=status)
        if tipo:
            contratos = contratos.filter(tipo_contrato=tipo)
        if busca:
            contratos = contratos.filter(
                Q(numero_contrato__icontains=busca) |
                Q(cliente__nome__icontains=busca) |
                Q(cliente__cpf_cnpj__icontains=busca) |
                Q(veiculo__placa__icontains=busca) |
                Q(veiculo__modelo__icontains=busca)
            )
        return contratos


class ParcelaService:
    """Cronograma de parcelas do restante da entrada"""

    @staticmethod
    def calcular_vencimentos(quantidade, dia_vencimento, data_referencia):
        """
        A primeira parcela vence no primeiro `dia_vencimento` a partir de 30
        dias após a data de referência; as seguintes, mês a mês. Vencimentos
        em feriado ou fim de semana passam para o próximo dia útil.
        """
        cal = Brazil()
        inicio = data_referencia + timedelta(days=30)
        primeira = inicio + relativedelta(day=dia_vencimento)
        if primeira < inicio:
            primeira = inicio + relativedelta(months=1, day=dia_vencimento)

        vencimentos = []
        for i in range(quantidade):
            data_venc = primeira + relativedelta(months=i, day=dia_vencimento)
            vencimentos.append(cal.find_following_working_day(data_venc))
        return vencimentos

    @staticmethod
    def gerar_parcelas(contrato, data_referencia=None):
        """
        (Re)gera as parcelas de um contrato parcelado; não altera cronogramas
        com parcela paga. Antes da assinatura o cronograma é provisório e é
        recalculado a partir da data assinada.
        """
        if contrato.parcelas.filter(paga=True).exists():
            logger.info(f"Contrato {contrato.numero_contrato} possui parcelas pagas; cronograma mantido")
            return list(contrato.parcelas.all())

        contrato.parcelas.all().delete()
        completo = (
            contrato.forma_pagamento_restante == 'parcelado'
            and contrato.quantidade_parcelas
            and contrato.valor_parcela is not None
            and contrato.dia_vencimento
        )
        if not completo:
            return []

        data_referencia = data_referencia or timezone.localdate()
        vencimentos = ParcelaService.calcular_vencimentos(
            contrato.quantidade_parcelas, contrato.dia_vencimento, data_referencia
        )
        return ParcelaContrato.objects.bulk_create([
            ParcelaContrato(
                contrato=contrato,
                numero_parcela=numero,
                valor=contrato.valor_parcela,
                data_vencimento=vencimento,
            )
            for numero, vencimento in enumerate(vencimentos, start=1)
        ])

    @staticmethod
    def registrar_pagamento(parcela_id, valor_pago=None, data_pagamento=None, usuario=None, ip=None):
        with transaction.atomic():
            try:
                parcela = ParcelaContrato.objects.select_for_update().select_related('contrato').get(pk=parcela_id)
            except ParcelaContrato.DoesNotExist:
                raise NaoEncontradoError(f"Parcela {parcela_id} não encontrada.", {'parcela_id': parcela_id})
            if parcela.contrato.status == StatusContrato.CANCELADO:
                raise ConflitoError('Não é possível registrar pagamento em contrato cancelado.',
                                    {'status': parcela.contrato.status})
            if parcela.paga:
                raise ConflitoError(f'A parcela {parcela.numero_parcela} já está paga.',
                                    {'parcela_id': parcela.id})

            parcela.paga = True
            parcela.valor_pago = valor_pago if valor_pago is not None else parcela.valor
            parcela.data_pagamento = data_pagamento or timezone.localdate()
            parcela.save(update_fields=['paga', 'valor_pago', 'data_pagamento'])

        LogService.registrar(
            usuario=usuario,
            mensagem=f'Pagamento da parcela {parcela.numero_parcela} do contrato '
                     f'{parcela.contrato.numero_contrato} registrado',
            modulo='contratos',
            acao='registrar_pagamento',
            ip=ip,
        )
        return parcela


def _moeda(valor):
    return Validadores.formatar_moeda(valor) if valor is not None else ''


def _data(valor):
    return valor.strftime('%d/%m/%Y') if valor else ''


def _data_hora(valor):
    if not valor:
        return ''
    return timezone.localtime(valor).strftime('%d/%m/%Y às %H:%M')


def _data_extenso(data):
    return f"{data.day:02d} de {MESES[data.month - 1]} de {data.year}"


class DocumentoService:
    """Montagem dos dados, texto, PDF e registros de arquivo dos contratos"""

    @staticmethod
    def montar_dados(contrato, loja, data_emissao):
        """Achata contrato, cliente, veículo e loja em DadosContrato (valores já formatados)"""
        if loja is None:
            raise FalhaExternaError(
                'Cadastro da loja não configurado. Cadastre os dados da loja antes de gerar contratos.',
                {'colaborador': 'loja'},
            )

        cliente = contrato.cliente
        veiculo = contrato.veiculo
        troca = contrato.veiculo_troca
        valor_veiculo = contrato.valor_venda if contrato.valor_venda is not None else veiculo.preco

        campos_troca = {}
        if troca is not None:
            campos_troca = {
                'marca_troca': troca.marca.nome,
                'modelo_troca': troca.modelo,
                'ano_troca': troca.ano,
                'cor_troca': troca.cor,
                'placa_troca': troca.placa,
                'chassi_troca': troca.chassi,
                'renavam_troca': troca.renavam,
                'km_troca': f"{troca.km:,}".replace(',', '.'),
            }

        return DadosContrato(
            razao_social_loja=loja.razao_social,
            cnpj_loja=Validadores.formatar_cpf_cnpj(loja.cnpj),
            endereco_loja=loja.endereco_completo or 'Não informado',
            representante_loja=loja.representante_legal or 'Não informado',
            cpf_representante_loja=Validadores.formatar_cpf_cnpj(loja.cpf_representante) or 'Não informado',
            telefone_loja=Validadores.formatar_telefone(loja.telefone),

            nome_cliente=cliente.nome,
            cpf_cnpj_cliente=cliente.get_cpf_cnpj_display(),
            tipo_documento_cliente=cliente.tipo_documento or 'CPF',
            rg_cliente=cliente.rg or 'Não informado',
            cnh_cliente=cliente.cnh or 'Não informado',
            endereco_cliente=cliente.endereco_completo or 'Não informado',
            telefone_cliente=Validadores.formatar_telefone(cliente.telefone) or 'Não informado',
            email_cliente=cliente.email or 'Não informado',

            marca=veiculo.marca.nome,
            modelo=veiculo.modelo,
            ano=veiculo.ano,
            cor=veiculo.cor or 'Não informado',
            placa=veiculo.placa or 'Não informado',
            chassi=veiculo.chassi or 'Não informado',
            renavam=veiculo.renavam or 'Não informado',
            km=f"{veiculo.km:,}".replace(',', '.'),

            valor_veiculo=_moeda(valor_veiculo),
            valor_veiculo_extenso=(
                num2words(float(valor_veiculo), lang='pt_BR', to='currency') if valor_veiculo else ''
            ),
            entrada_total=_moeda(contrato.entrada_total),
            entrada_paga=_moeda(contrato.entrada_paga),
            entrada_restante=_moeda(contrato.entrada_restante),
            valor_financiado=_moeda(contrato.valor_financiado),
            banco_financiador=contrato.banco_financiamento or 'a definir',
            parcelas_financiamento=contrato.parcelas_financiamento or 0,
            valor_parcela_financiamento=_moeda(contrato.valor_parcela_financiamento),

            forma_pagamento=contrato.forma_pagamento_restante,
            data_vencimento_avista=_data(contrato.data_vencimento_avista),
            quantidade_parcelas=contrato.quantidade_parcelas or 0,
            valor_parcela=_moeda(contrato.valor_parcela),
            dia_vencimento=contrato.dia_vencimento or 0,
            forma_pagamento_parcelas=contrato.forma_pagamento_parcelas,

            multa_percentual=Validadores.formatar_percentual(contrato.multa_atraso),
            juros_mensal=Validadores.formatar_percentual(contrato.juros_atraso),
            clausula_vencimento_antecipado=contrato.clausula_vencimento_antecipado,
            penalidades_adicionais=contrato.penalidades_adicionais,

            cidade_foro=settings.CONTRATO_CIDADE_FORO or loja.cidade,
            data_emissao=_data_extenso(data_emissao),

            valor_minimo_venda=_moeda(contrato.valor_minimo_venda),
            comissao_loja=Validadores.formatar_percentual(contrato.comissao_loja),
            prazo_consignacao=contrato.prazo_consignacao or 0,
            multa_retirada_antecipada=_moeda(contrato.multa_retirada_antecipada),

            data_hora_entrega=_data_hora(contrato.data_hora_entrega),
            chave_principal=contrato.chave_principal,
            chave_reserva=contrato.chave_reserva,
            manual=contrato.manual,
            condicao_geral=contrato.condicao_geral,

            data_hora_retirada=_data_hora(contrato.data_hora_retirada),
            motivo_retirada=contrato.motivo_retirada,
            condicao_veiculo=contrato.condicao_veiculo,

            valor_troca=_moeda(contrato.valor_troca),
            observacoes_troca=contrato.observacoes_troca,
            observacoes=contrato.observacoes,
            **campos_troca,
        )

    @staticmethod
    def data_emissao(contrato):
        """Data impressa no contrato: a da geração (estável entre visualizações) ou hoje"""
        if contrato.data_geracao:
            return timezone.localdate(contrato.data_geracao)
        return timezone.localdate()

    @staticmethod
    def renderizar(contrato):
        dados = DocumentoService.montar_dados(contrato, Loja.atual(), DocumentoService.data_emissao(contrato))
        return renderizar_contrato(contrato.tipo_contrato, dados)

    @staticmethod
    def gerar_pdf(contrato, texto=None, assinatura=None):
        """Com uma assinatura concluída o PDF recebe o certificado de assinatura digital"""
        from .pdf import gerar_pdf_contrato

        texto = texto or DocumentoService.renderizar(contrato)
        return gerar_pdf_contrato(contrato, texto, Loja.atual(), assinatura)

    @staticmethod
    def arquivo_da_versao(contrato_id, versao):
        """Versão registrada do contrato; o texto servido é o gravado na exportação"""
        contrato = obter_contrato(contrato_id)
        arquivo = None
        if str(versao).isdigit():
            arquivo = contrato.arquivos.filter(versao=int(versao)).first()
        if arquivo is None:
            raise NaoEncontradoError(f'Versão {versao} não encontrada para o contrato.', {'versao': versao})
        return contrato, arquivo

    @staticmethod
    def registrar_arquivo(contrato, gerado_por, texto=None):
        """
        Registra uma nova versão exportada do contrato (append-only).
        Deve ser chamado com a linha do contrato bloqueada.
        """
        texto = texto or DocumentoService.renderizar(contrato)
        ultima_versao = contrato.arquivos.aggregate(ultima=Max('versao'))['ultima'] or 0
        versao = ultima_versao + 1
        url = reverse('contratos:contrato_pdf', args=[contrato.id])
        return ArquivoContrato.objects.create(
            contrato=contrato,
            nome_arquivo=f"{contrato.numero_contrato}_v{versao}.pdf",
            url_arquivo=f"{url}?versao={versao}",
            hash_arquivo=hashlib.sha256(texto.encode('utf-8')).hexdigest(),
            conteudo=texto,
            versao=versao,
            gerado_por=gerado_por,
        )

    @staticmethod
    def exportar(contrato_id, usuario=None, ip=None):
        """Exportação pela equipe: registra nova versão do texto atual"""
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            texto = DocumentoService.renderizar(contrato)
            arquivo = DocumentoService.registrar_arquivo(contrato, 'staff_export', texto)

        LogService.registrar(
            usuario=usuario,
            mensagem=f'Contrato {contrato.numero_contrato} exportado (versão {arquivo.versao})',
            modulo='contratos',
            acao='exportar',
            ip=ip,
        )
        return contrato, arquivo, texto


class AssinaturaService:
    """
    Links públicos de assinatura: emissão, consulta, validação de
    identidade (fragmento de 3 dígitos do CPF/CNPJ) e assinatura.
    """

    @staticmethod
    def fragmento_identidade(cliente):
        """Últimos 3 dígitos do CPF ou primeiros 3 do CNPJ"""
        digitos = cliente.documento_digitos
        if len(digitos) == 11:
            return digitos[-3:]
        if len(digitos) == 14:
            return digitos[:3]
        raise DadosInvalidosError(
            'Documento do cliente inválido para validação de identidade.',
            campos={'cpf_cnpj': ['O CPF/CNPJ do cliente deve ter 11 ou 14 dígitos.']},
        )

    @staticmethod
    def _obter(token, para_atualizar=False):
        queryset = AssinaturaContrato.objects.select_related(
            'contrato', 'contrato__cliente', 'contrato__veiculo', 'contrato__veiculo__marca'
        )
        if para_atualizar:
            queryset = queryset.select_for_update(of=('self',))
        try:
            assinatura = queryset.get(token=token)
        except AssinaturaContrato.DoesNotExist:
            raise NaoEncontradoError('Link de assinatura não encontrado.')

        if assinatura.status == StatusAssinatura.INVALIDADA:
            raise LinkExpiradoError('Este link foi substituído por um mais recente ou cancelado.')
        if assinatura.expirada:
            raise LinkExpiradoError('Este link de assinatura expirou. Solicite um novo link à loja.')
        return assinatura

    @staticmethod
    def emitir(contrato_id, usuario=None, ip=None):
        """
        Invalida os links ativos do contrato e cria um novo (pending).
        Apenas contratos gerados podem receber link de assinatura.
        """
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            if contrato.status != StatusContrato.GERADO:
                raise ConflitoError(
                    'Apenas contratos gerados podem ser enviados para assinatura.',
                    {'status': contrato.status},
                )
            AssinaturaService.fragmento_identidade(contrato.cliente)

            invalidadas = AssinaturaContrato.objects.filter(
                contrato=contrato, status__in=STATUS_ASSINATURA_ATIVOS
            ).update(status=StatusAssinatura.INVALIDADA)
            assinatura = AssinaturaContrato.objects.create(
                contrato=contrato,
                email_cliente=contrato.cliente.email,
            )

        LogService.registrar(
            usuario=usuario,
            mensagem=f'Link de assinatura emitido para o contrato {contrato.numero_contrato} '
                     f'({invalidadas} link(s) anterior(es) invalidado(s))',
            modulo='contratos',
            acao='emitir_assinatura',
            ip=ip,
        )
        return assinatura

    @staticmethod
    def enviar_para_assinatura(contrato_id, usuario=None, ip=None):
        """
        Fluxo da equipe: gera o contrato (se rascunho), emite o link,
        registra o arquivo enviado e dispara o e-mail ao cliente após o commit.
        """
        with transaction.atomic():
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            if not contrato.cliente.email:
                raise DadosInvalidosError(
                    'O cliente não possui e-mail cadastrado.',
                    campos={'email': ['Cadastre o e-mail do cliente para enviar o contrato.']},
                )
            if contrato.status == StatusContrato.RASCUNHO:
                contrato.mudar_status(StatusContrato.GERADO, usuario, 'Gerado para envio de assinatura')

            assinatura = AssinaturaService.emitir(contrato.id, usuario, ip)
            DocumentoService.registrar_arquivo(contrato, 'signature_request')

            def enviar_email():
                if enviar_link_assinatura(assinatura):
                    AssinaturaContrato.objects.filter(pk=assinatura.pk).update(data_envio_email=timezone.now())

            transaction.on_commit(enviar_email)

        return assinatura

    @staticmethod
    def consultar(token):
        assinatura = AssinaturaService._obter(token)
        contrato = assinatura.contrato
        cliente = contrato.cliente
        return {
            'status': assinatura.status,
            'validado': assinatura.status in (StatusAssinatura.VALIDADA, StatusAssinatura.ASSINADA),
            'assinado': assinatura.status == StatusAssinatura.ASSINADA,
            'contrato_id': contrato.id,
            'numero_contrato': contrato.numero_contrato,
            'tipo_contrato': contrato.tipo_contrato,
            'tipo_contrato_display': contrato.get_tipo_contrato_display(),
            'nome_cliente': cliente.nome,
            'veiculo': contrato.veiculo.resumo,
            'tipo_documento': cliente.tipo_documento,
            'tamanho_codigo': 3,
            'expira_em': assinatura.expira_em,
        }

    @staticmethod
    def validar(token, codigo, ip=None):
        """
        Confere o fragmento de identidade. Erro incrementa o contador de
        tentativas (update atômico); acima do limite o link fica bloqueado.
        """
        codigo = (codigo or '').strip()
        limite = settings.CONTRATO_ASSINATURA_MAX_TENTATIVAS
        restantes = None

        with transaction.atomic():
            assinatura = AssinaturaService._obter(token, para_atualizar=True)

            if assinatura.status == StatusAssinatura.ASSINADA:
                raise ConflitoError('Este contrato já foi assinado.', {'status': assinatura.status})
            if assinatura.status == StatusAssinatura.VALIDADA:
                return assinatura
            if assinatura.tentativas_validacao >= limite:
                raise TentativasExcedidasError(detalhes={'limite': limite})
            if not re.fullmatch(r'\d{3}', codigo):
                raise DadosInvalidosError(
                    'Código inválido.',
                    campos={'codigo': ['Informe exatamente 3 dígitos numéricos.']},
                )

            fragmento = AssinaturaService.fragmento_identidade(assinatura.contrato.cliente)
            if codigo == fragmento:
                assinatura.status = StatusAssinatura.VALIDADA
                assinatura.data_validacao = timezone.now()
                assinatura.ip_validacao = ip or None
                assinatura.save(update_fields=['status', 'data_validacao', 'ip_validacao'])
            else:
                AssinaturaContrato.objects.filter(pk=assinatura.pk).update(
                    tentativas_validacao=F('tentativas_validacao') + 1
                )
                assinatura.refresh_from_db(fields=['tentativas_validacao'])
                restantes = max(0, limite - assinatura.tentativas_validacao)

        # O incremento precisa ser persistido antes de sinalizar o erro
        if restantes is not None:
            LogService.registrar(
                usuario=assinatura.contrato.cliente.nome,
                nivel='WARNING',
                mensagem=f'Código de verificação incorreto para o contrato '
                         f'{assinatura.contrato.numero_contrato} '
                         f'(tentativa {assinatura.tentativas_validacao} de {limite})',
                modulo='contratos',
                acao='validar_assinatura',
                ip=ip,
            )
            raise CodigoInvalidoError(restantes)

        LogService.registrar(
            usuario=assinatura.contrato.cliente.nome,
            mensagem=f'Identidade validada para o contrato {assinatura.contrato.numero_contrato}',
            modulo='contratos',
            acao='validar_assinatura',
            ip=ip,
        )
        return assinatura

    @staticmethod
    def documento(token):
        """Texto do contrato para revisão, liberado após a validação de identidade"""
        assinatura = AssinaturaService._obter(token)
        if assinatura.status == StatusAssinatura.PENDENTE:
            raise ConflitoError('Valide sua identidade antes de visualizar o contrato.',
                                {'status': assinatura.status})
        return assinatura, DocumentoService.renderizar(assinatura.contrato)

    @staticmethod
    def assinar(token, ip=None):
        """
        Assina o contrato. Assinatura e contrato mudam juntos (mesma
        transação); uma segunda chamada devolve o resultado anterior sem
        registrar novo arquivo.
        """
        contrato_id = AssinaturaContrato.objects.filter(token=token).values_list('contrato_id', flat=True).first()
        if contrato_id is None:
            raise NaoEncontradoError('Link de assinatura não encontrado.')

        with transaction.atomic():
            # Ordem de bloqueio: contrato, depois assinatura (a mesma da emissão)
            contrato = obter_contrato(contrato_id, para_atualizar=True)
            assinatura = AssinaturaService._obter(token, para_atualizar=True)

            if assinatura.status == StatusAssinatura.ASSINADA:
                return assinatura
            if assinatura.status != StatusAssinatura.VALIDADA:
                raise ConflitoError('Valide sua identidade antes de assinar o contrato.',
                                    {'status': assinatura.status})
            if contrato.status != StatusContrato.GERADO:
                raise ConflitoError(
                    'O contrato não está disponível para assinatura.',
                    {'status': contrato.status},
                )

            assinatura.status = StatusAssinatura.ASSINADA
            assinatura.data_assinatura = timezone.now()
            assinatura.ip_assinatura = ip or None
            assinatura.save(update_fields=['status', 'data_assinatura', 'ip_assinatura'])

            contrato.mudar_status(
                StatusContrato.ASSINADO,
                f"{contrato.cliente.nome} (assinatura digital)",
                f"Assinado digitalmente via link. IP: {ip or 'não informado'}",
            )
            ParcelaService.gerar_parcelas(contrato, timezone.localdate(contrato.data_assinatura))
            texto = DocumentoService.renderizar(contrato)
            DocumentoService.registrar_arquivo(contrato, 'digital_signature', texto)

            def enviar_email():
                try:
                    pdf_bytes = DocumentoService.gerar_pdf(contrato, texto, assinatura)
                except Exception:
                    logger.exception(f"Falha ao gerar PDF do contrato assinado {contrato.numero_contrato}")
                    pdf_bytes = None
                enviar_contrato_assinado(assinatura, pdf_bytes)

            transaction.on_commit(enviar_email)

        LogService.registrar(
            usuario=contrato.cliente.nome,
            mensagem=f'Contrato {contrato.numero_contrato} assinado digitalmente',
            modulo='contratos',
            acao='assinar',
            ip=ip,
        )
        return assinatura

    @staticmethod
    def assinatura_atual(contrato_id):
        contrato = obter_contrato(contrato_id)
        return contrato.assinaturas.order_by('-data_criacao', '-id').first()
