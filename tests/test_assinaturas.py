from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from contratos.exceptions import (
    CodigoInvalidoError,
    ConflitoError,
    DadosInvalidosError,
    FalhaExternaError,
    LinkExpiradoError,
    NaoEncontradoError,
    TentativasExcedidasError,
)
from contratos.models import AssinaturaContrato, StatusAssinatura, StatusContrato
from contratos.pdf import linhas_certificado
from contratos.services import AssinaturaService, ContratoService, DocumentoService

pytestmark = pytest.mark.django_db


def test_emitir_cria_link_pendente(assinatura, contrato_gerado) -> None:
    assert assinatura.status == StatusAssinatura.PENDENTE
    assert assinatura.tentativas_validacao == 0
    assert len(assinatura.token) == 64
    assert assinatura.email_cliente == 'ana.ferreira@example.com'
    assert assinatura.link.endswith(f'/assinar/{assinatura.token}')
    assert assinatura.expira_em > timezone.now() + timedelta(hours=47)


def test_emitir_exige_contrato_gerado(criar_contrato) -> None:
    contrato = criar_contrato()

    with pytest.raises(ConflitoError):
        AssinaturaService.emitir(contrato.id)


def test_emitir_exige_documento_valido(criar_contrato, cliente_cpf) -> None:
    contrato = criar_contrato()
    ContratoService.transicionar(contrato.id, StatusContrato.GERADO)
    cliente_cpf.cpf_cnpj = '1234'
    cliente_cpf.save()

    with pytest.raises(DadosInvalidosError):
        AssinaturaService.emitir(contrato.id)


def test_segundo_link_invalida_o_primeiro(contrato_gerado) -> None:
    primeiro = AssinaturaService.emitir(contrato_gerado.id)
    segundo = AssinaturaService.emitir(contrato_gerado.id)
    primeiro.refresh_from_db()

    assert primeiro.status == StatusAssinatura.INVALIDADA
    assert segundo.status == StatusAssinatura.PENDENTE
    assert AssinaturaContrato.objects.filter(
        contrato=contrato_gerado, status__in=['pending', 'validated']
    ).count() == 1

    with pytest.raises(NaoEncontradoError):
        AssinaturaService.validar(primeiro.token, '123')
    with pytest.raises(NaoEncontradoError):
        AssinaturaService.assinar(primeiro.token)
    with pytest.raises(LinkExpiradoError):
        AssinaturaService.consultar(primeiro.token)


def test_consultar_nao_revela_documento(assinatura) -> None:
    dados = AssinaturaService.consultar(assinatura.token)

    assert dados['status'] == StatusAssinatura.PENDENTE
    assert dados['nome_cliente'] == 'Ana Paula Ferreira'
    assert dados['veiculo'] == 'Toyota Corolla XEi 2020/2021'
    assert dados['tipo_contrato'] == 'purchase_sale'
    assert dados['tipo_documento'] == 'CPF'
    assert dados['tamanho_codigo'] == 3
    assert '11144477123' not in str(dados)
    assert '111.444.771-23' not in str(dados)


def test_token_desconhecido() -> None:
    with pytest.raises(NaoEncontradoError):
        AssinaturaService.consultar('0' * 64)


def test_validar_cpf_usa_ultimos_tres_digitos(assinatura) -> None:
    with pytest.raises(CodigoInvalidoError) as exc_info:
        AssinaturaService.validar(assinatura.token, '456')

    assinatura.refresh_from_db()
    assert assinatura.tentativas_validacao == 1
    assert assinatura.status == StatusAssinatura.PENDENTE
    assert exc_info.value.detalhes == {'tentativas_restantes': 4}
    assert '123' not in exc_info.value.mensagem

    validada = AssinaturaService.validar(assinatura.token, '123')

    assert validada.status == StatusAssinatura.VALIDADA
    assert validada.data_validacao is not None


def test_validar_cnpj_usa_primeiros_tres_digitos(criar_contrato, cliente_cnpj) -> None:
    contrato = criar_contrato(cliente=cliente_cnpj)
    ContratoService.transicionar(contrato.id, StatusContrato.GERADO)
    assinatura = AssinaturaService.emitir(contrato.id)

    # 12.345.678/0001-95: últimos três dígitos não servem para CNPJ
    with pytest.raises(CodigoInvalidoError):
        AssinaturaService.validar(assinatura.token, '195')

    assert AssinaturaService.validar(assinatura.token, '123').status == StatusAssinatura.VALIDADA


@pytest.mark.parametrize('codigo', ['12', '1234', 'abc', ''])
def test_codigo_com_formato_invalido(assinatura, codigo) -> None:
    with pytest.raises(DadosInvalidosError):
        AssinaturaService.validar(assinatura.token, codigo)

    assinatura.refresh_from_db()
    assert assinatura.tentativas_validacao == 0


def test_limite_de_tentativas(assinatura, settings) -> None:
    settings.CONTRATO_ASSINATURA_MAX_TENTATIVAS = 3

    for restantes in (2, 1, 0):
        with pytest.raises(CodigoInvalidoError) as exc_info:
            AssinaturaService.validar(assinatura.token, '999')
        assert exc_info.value.tentativas_restantes == restantes

    # Bloqueado mesmo com o código correto
    with pytest.raises(TentativasExcedidasError):
        AssinaturaService.validar(assinatura.token, '123')

    assinatura.refresh_from_db()
    assert assinatura.tentativas_validacao == 3
    assert assinatura.status == StatusAssinatura.PENDENTE


def test_validar_novamente_e_idempotente(assinatura) -> None:
    AssinaturaService.validar(assinatura.token, '123')

    assert AssinaturaService.validar(assinatura.token, '000').status == StatusAssinatura.VALIDADA


def test_link_expirado(assinatura) -> None:
    AssinaturaContrato.objects.filter(pk=assinatura.pk).update(expira_em=timezone.now() - timedelta(minutes=1))

    with pytest.raises(LinkExpiradoError):
        AssinaturaService.consultar(assinatura.token)
    with pytest.raises(LinkExpiradoError):
        AssinaturaService.validar(assinatura.token, '123')


def test_assinar_exige_validacao(loja, assinatura, contrato_gerado) -> None:
    with pytest.raises(ConflitoError):
        AssinaturaService.assinar(assinatura.token)

    contrato_gerado.refresh_from_db()
    assert contrato_gerado.status == StatusContrato.GERADO


def test_assinar_e_idempotente(loja, assinatura, contrato_gerado) -> None:
    AssinaturaService.validar(assinatura.token, '123')

    primeira = AssinaturaService.assinar(assinatura.token, '200.10.20.30')
    segunda = AssinaturaService.assinar(assinatura.token, '200.10.20.30')
    contrato_gerado.refresh_from_db()

    assert primeira.status == segunda.status == StatusAssinatura.ASSINADA
    assert primeira.data_assinatura == segunda.data_assinatura
    assert primeira.ip_assinatura == '200.10.20.30'
    assert contrato_gerado.status == StatusContrato.ASSINADO
    assert contrato_gerado.data_assinatura is not None
    assert contrato_gerado.arquivos.filter(gerado_por='digital_signature').count() == 1


def test_assinar_contrato_cancelado(loja, assinatura, contrato_gerado) -> None:
    AssinaturaService.validar(assinatura.token, '123')
    ContratoService.transicionar(contrato_gerado.id, StatusContrato.CANCELADO)

    # O cancelamento invalida os links ativos
    with pytest.raises(LinkExpiradoError):
        AssinaturaService.assinar(assinatura.token)


def test_falha_ao_assinar_nao_deixa_estado_parcial(assinatura, contrato_gerado) -> None:
    AssinaturaService.validar(assinatura.token, '123')

    # Sem cadastro da loja o texto não pode ser registrado
    with pytest.raises(FalhaExternaError):
        AssinaturaService.assinar(assinatura.token)

    assinatura.refresh_from_db()
    contrato_gerado.refresh_from_db()
    assert assinatura.status == StatusAssinatura.VALIDADA
    assert contrato_gerado.status == StatusContrato.GERADO
    assert not contrato_gerado.arquivos.exists()


def test_documento_liberado_apos_validacao(loja, assinatura) -> None:
    with pytest.raises(ConflitoError):
        AssinaturaService.documento(assinatura.token)

    AssinaturaService.validar(assinatura.token, '123')
    _, texto = AssinaturaService.documento(assinatura.token)

    assert texto.startswith('CONTRATO PARTICULAR DE COMPRA E VENDA')


def test_link_assinado_continua_acessivel_apos_expirar(loja, assinatura) -> None:
    AssinaturaService.validar(assinatura.token, '123')
    AssinaturaService.assinar(assinatura.token)
    AssinaturaContrato.objects.filter(pk=assinatura.pk).update(expira_em=timezone.now() - timedelta(days=1))

    assert AssinaturaService.consultar(assinatura.token)['assinado'] is True


def test_enviar_para_assinatura(loja, criar_contrato, mailoutbox, django_capture_on_commit_callbacks) -> None:
    contrato = criar_contrato()

    with django_capture_on_commit_callbacks(execute=True):
        assinatura = AssinaturaService.enviar_para_assinatura(contrato.id, 'Testes')

    contrato.refresh_from_db()
    assinatura.refresh_from_db()
    assert contrato.status == StatusContrato.GERADO
    assert contrato.arquivos.get().gerado_por == 'signature_request'
    assert assinatura.data_envio_email is not None
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ['ana.ferreira@example.com']
    assert assinatura.token in mailoutbox[0].body


def test_enviar_para_assinatura_sem_email(loja, criar_contrato, cliente_cpf) -> None:
    cliente_cpf.email = ''
    cliente_cpf.save()
    contrato = criar_contrato()

    with pytest.raises(DadosInvalidosError):
        AssinaturaService.enviar_para_assinatura(contrato.id)

    contrato.refresh_from_db()
    assert contrato.status == StatusContrato.RASCUNHO


def test_email_de_confirmacao_com_pdf(loja, assinatura, mailoutbox, django_capture_on_commit_callbacks) -> None:
    AssinaturaService.validar(assinatura.token, '123')

    with django_capture_on_commit_callbacks(execute=True):
        AssinaturaService.assinar(assinatura.token)

    assert len(mailoutbox) == 1
    nome, conteudo, mimetype = mailoutbox[0].attachments[0]
    assert mimetype == 'application/pdf'
    assert conteudo.startswith(b'%PDF')


def test_certificado_de_assinatura(loja, assinatura) -> None:
    AssinaturaService.validar(assinatura.token, '123')
    assinada = AssinaturaService.assinar(assinatura.token, '200.10.20.30')

    linhas = linhas_certificado(assinada, loja)
    assinado_em = timezone.localtime(assinada.data_assinatura).strftime('%d/%m/%Y')

    assert linhas[0].startswith('Assinatura da loja: MayBack Cars Comércio de Veículos Ltda')
    assert 'Ana Paula Ferreira - CPF: 111.444.771-23' in linhas[1]
    assert any(assinado_em in linha for linha in linhas)
    assert 'IP de origem: 200.10.20.30' in linhas


def test_pdf_assinado_inclui_certificado(loja, assinatura, contrato_gerado) -> None:
    AssinaturaService.validar(assinatura.token, '123')
    assinada = AssinaturaService.assinar(assinatura.token, '200.10.20.30')
    contrato_gerado.refresh_from_db()
    texto = contrato_gerado.arquivos.get(gerado_por='digital_signature').conteudo

    sem_certificado = DocumentoService.gerar_pdf(contrato_gerado, texto)
    com_certificado = DocumentoService.gerar_pdf(contrato_gerado, texto, assinada)

    assert com_certificado.startswith(b'%PDF')
    assert len(com_certificado) > len(sem_certificado)


def test_link_pendente_nao_gera_certificado(loja, assinatura, contrato_gerado) -> None:
    texto = DocumentoService.renderizar(contrato_gerado)

    pendente = DocumentoService.gerar_pdf(contrato_gerado, texto, assinatura)
    sem_assinatura = DocumentoService.gerar_pdf(contrato_gerado, texto)

    assert abs(len(pendente) - len(sem_assinatura)) < 64
