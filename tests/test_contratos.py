from __future__ import annotations

import hashlib
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from conftest import CAMPOS_POR_TIPO
from contratos.exceptions import (
    ConflitoError,
    DadosInvalidosError,
    FalhaExternaError,
    LinkExpiradoError,
    NaoEncontradoError,
    TransicaoInvalidaError,
)
from contratos.models import ArquivoContrato, Contrato, StatusAssinatura, StatusContrato, TipoContrato
from contratos.services import AssinaturaService, ContratoService, DocumentoService, ParcelaService
from core.models import LogSistema

pytestmark = pytest.mark.django_db

OBRIGATORIOS = {
    TipoContrato.COMPLEMENTO_ENTRADA: ['entrada_total', 'entrada_paga', 'forma_pagamento_restante',
                                       'quantidade_parcelas', 'valor_parcela', 'dia_vencimento',
                                       'forma_pagamento_parcelas'],
    TipoContrato.COMPRA_VENDA: ['valor_venda'],
    TipoContrato.AQUISICAO_VEICULO: ['valor_venda'],
    TipoContrato.CONSIGNACAO: ['valor_minimo_venda', 'comissao_loja', 'prazo_consignacao'],
    TipoContrato.PROTOCOLO_ENTREGA: ['data_hora_entrega'],
    TipoContrato.RETIRADA_CONSIGNACAO: ['data_hora_retirada', 'motivo_retirada'],
}


def _dados(tipo, cliente, veiculo, **extra):
    dados = {'tipo_contrato': tipo, 'cliente': cliente.id, 'veiculo': veiculo.id}
    dados.update(CAMPOS_POR_TIPO[tipo])
    dados.update(extra)
    return dados


@pytest.mark.parametrize('tipo', list(TipoContrato))
def test_criar_com_campos_obrigatorios(tipo, cliente_cpf, veiculo) -> None:
    contrato = ContratoService.criar(_dados(tipo, cliente_cpf, veiculo), 'Testes')

    assert contrato.status == StatusContrato.RASCUNHO
    assert contrato.tipo_contrato == tipo
    assert contrato.numero_contrato == f"CONT-{contrato.data_criacao.year}-{contrato.id:05d}"
    assert contrato.criado_por == 'Testes'
    assert contrato.historico_status[0]['status'] == StatusContrato.RASCUNHO


@pytest.mark.parametrize(
    ('tipo', 'campo'),
    [(tipo, campo) for tipo, campos in OBRIGATORIOS.items() for campo in campos],
)
def test_criar_sem_campo_obrigatorio(tipo, campo, cliente_cpf, veiculo) -> None:
    dados = _dados(tipo, cliente_cpf, veiculo)
    dados.pop(campo)

    with pytest.raises(DadosInvalidosError) as exc_info:
        ContratoService.criar(dados, 'Testes')

    assert campo in exc_info.value.detalhes['campos']
    assert not Contrato.objects.exists()


def test_complemento_avista_exige_data_de_vencimento(cliente_cpf, veiculo) -> None:
    dados = _dados(TipoContrato.COMPLEMENTO_ENTRADA, cliente_cpf, veiculo, forma_pagamento_restante='avista')

    with pytest.raises(DadosInvalidosError) as exc_info:
        ContratoService.criar(dados)

    assert 'data_vencimento_avista' in exc_info.value.detalhes['campos']


def test_tipo_de_contrato_invalido(cliente_cpf, veiculo) -> None:
    with pytest.raises(DadosInvalidosError) as exc_info:
        ContratoService.criar({'tipo_contrato': 'leasing', 'cliente': cliente_cpf.id, 'veiculo': veiculo.id})

    assert 'tipo_contrato' in exc_info.value.detalhes['campos']


def test_valores_negativos_sao_rejeitados(criar_contrato) -> None:
    with pytest.raises(DadosInvalidosError) as exc_info:
        criar_contrato(valor_venda='-1.00')

    assert 'valor_venda' in exc_info.value.detalhes['campos']


@pytest.mark.parametrize(
    ('total', 'paga', 'restante'),
    [
        ('10000.00', '4000.00', Decimal('6000.00')),
        ('10000.00', '10000.00', Decimal('0.00')),
        ('5000.00', '8000.00', Decimal('0.00')),
    ],
)
def test_entrada_restante(criar_contrato, total, paga, restante) -> None:
    contrato = criar_contrato(entrada_total=total, entrada_paga=paga)
    contrato.refresh_from_db()

    assert contrato.entrada_restante == restante


def test_entrada_restante_recalculada_ao_atualizar(criar_contrato) -> None:
    contrato = criar_contrato(entrada_total='20000.00', entrada_paga='20000.00')

    contrato = ContratoService.atualizar(contrato.id, {'entrada_paga': '12500.00'})
    contrato.refresh_from_db()

    assert contrato.entrada_restante == Decimal('7500.00')


def test_fluxo_rascunho_gerado_assinado(criar_contrato) -> None:
    contrato = criar_contrato()

    contrato = ContratoService.transicionar(contrato.id, StatusContrato.GERADO)
    assert contrato.status == StatusContrato.GERADO
    assert contrato.data_geracao is not None

    contrato = ContratoService.transicionar(contrato.id, StatusContrato.ASSINADO)
    assert contrato.status == StatusContrato.ASSINADO
    assert contrato.data_assinatura is not None
    assert [h['status'] for h in contrato.historico_status] == ['draft', 'generated', 'signed']


def test_rascunho_nao_pode_ir_direto_para_assinado(criar_contrato) -> None:
    contrato = criar_contrato()

    with pytest.raises(TransicaoInvalidaError) as exc_info:
        ContratoService.transicionar(contrato.id, StatusContrato.ASSINADO)

    assert exc_info.value.detalhes == {'de': 'draft', 'para': 'signed'}
    contrato.refresh_from_db()
    assert contrato.status == StatusContrato.RASCUNHO


@pytest.mark.parametrize('origem', [StatusContrato.RASCUNHO, StatusContrato.GERADO])
def test_cancelamento_permitido(criar_contrato, origem) -> None:
    contrato = criar_contrato()
    if origem == StatusContrato.GERADO:
        ContratoService.transicionar(contrato.id, StatusContrato.GERADO)

    contrato = ContratoService.transicionar(contrato.id, StatusContrato.CANCELADO, observacao='Cliente desistiu')

    assert contrato.status == StatusContrato.CANCELADO
    assert contrato.data_cancelamento is not None
    assert 'Cliente desistiu' in contrato.historico_status[-1]['observacao']


@pytest.mark.parametrize('final', [StatusContrato.ASSINADO, StatusContrato.CANCELADO])
@pytest.mark.parametrize('destino', list(StatusContrato))
def test_estados_finais_nao_tem_saida(contrato_gerado, final, destino) -> None:
    ContratoService.transicionar(contrato_gerado.id, final)

    with pytest.raises(TransicaoInvalidaError):
        ContratoService.transicionar(contrato_gerado.id, destino)


def test_contrato_inexistente() -> None:
    with pytest.raises(NaoEncontradoError):
        ContratoService.transicionar(999999, StatusContrato.GERADO)


def test_atualizar_contrato_assinado_gera_conflito(contrato_gerado) -> None:
    ContratoService.transicionar(contrato_gerado.id, StatusContrato.ASSINADO)

    with pytest.raises(ConflitoError):
        ContratoService.atualizar(contrato_gerado.id, {'observacoes': 'Alteração tardia'})


def test_tipo_nao_pode_ser_alterado(criar_contrato) -> None:
    contrato = criar_contrato()

    with pytest.raises(DadosInvalidosError) as exc_info:
        ContratoService.atualizar(contrato.id, {'tipo_contrato': TipoContrato.CONSIGNACAO})

    assert 'tipo_contrato' in exc_info.value.detalhes['campos']


def test_excluir_contrato_assinado_gera_conflito(contrato_gerado) -> None:
    ContratoService.transicionar(contrato_gerado.id, StatusContrato.ASSINADO)

    with pytest.raises(ConflitoError):
        ContratoService.excluir(contrato_gerado.id)

    assert Contrato.objects.filter(pk=contrato_gerado.id).exists()


def test_excluir_rascunho(criar_contrato) -> None:
    contrato = criar_contrato()

    ContratoService.excluir(contrato.id, 'Testes')

    assert not Contrato.objects.filter(pk=contrato.id).exists()
    assert LogSistema.objects.filter(modulo='contratos', acao='excluir').exists()


def test_listar_com_filtros(criar_contrato, cliente_cnpj) -> None:
    compra = criar_contrato()
    consignacao = criar_contrato(TipoContrato.CONSIGNACAO, cliente=cliente_cnpj)
    ContratoService.transicionar(consignacao.id, StatusContrato.GERADO)

    assert list(ContratoService.listar(tipo=TipoContrato.COMPRA_VENDA)) == [compra]
    assert list(ContratoService.listar(status=StatusContrato.GERADO)) == [consignacao]
    assert list(ContratoService.listar(busca='Ribeiro')) == [consignacao]
    assert set(ContratoService.listar(busca='ABC1D23')) == {compra, consignacao}


def test_parcelas_geradas_para_complemento_parcelado(criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)
    parcelas = list(contrato.parcelas.all())

    assert [p.numero_parcela for p in parcelas] == [1, 2, 3]
    assert all(p.valor == Decimal('2000.00') for p in parcelas)
    assert all(not p.paga for p in parcelas)


def test_calculo_de_vencimentos() -> None:
    vencimentos = ParcelaService.calcular_vencimentos(3, 10, date(2026, 1, 5))

    assert vencimentos == [date(2026, 2, 10), date(2026, 3, 10), date(2026, 4, 10)]


def test_vencimento_em_fim_de_semana_passa_para_dia_util() -> None:
    # 10/01/2026 é sábado
    vencimentos = ParcelaService.calcular_vencimentos(2, 10, date(2025, 12, 1))

    assert vencimentos == [date(2026, 1, 12), date(2026, 2, 10)]


def test_registrar_pagamento_de_parcela(criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)
    parcela = contrato.parcelas.get(numero_parcela=1)

    ParcelaService.registrar_pagamento(parcela.id, data_pagamento=date(2026, 11, 10))
    parcela.refresh_from_db()

    assert parcela.paga
    assert parcela.valor_pago == Decimal('2000.00')
    assert parcela.data_pagamento == date(2026, 11, 10)

    with pytest.raises(ConflitoError):
        ParcelaService.registrar_pagamento(parcela.id)


def test_cronograma_com_parcela_paga_nao_e_regerado(criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)
    ParcelaService.registrar_pagamento(contrato.parcelas.get(numero_parcela=1).id)

    ContratoService.atualizar(contrato.id, {'quantidade_parcelas': 4})

    assert contrato.parcelas.count() == 3


def test_texto_do_contrato_com_dados_formatados(loja, criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)

    texto = DocumentoService.renderizar(contrato)

    assert 'MayBack Cars Comércio de Veículos Ltda' in texto
    assert 'CNPJ sob o nº 11.222.333/0001-81' in texto
    assert 'Ana Paula Ferreira, inscrito(a) no CPF sob o nº 111.444.771-23' in texto
    assert 'Marca: Toyota' in texto
    assert 'Quilometragem: 45.210 km' in texto
    assert 'R$ 6.000,00' in texto
    assert '3 (três) parcelas' in texto
    assert 'Multa moratória de 2% (dois por cento)' in texto
    assert 'Comarca de São Paulo' in texto


def test_texto_sem_loja_cadastrada(criar_contrato) -> None:
    contrato = criar_contrato()

    with pytest.raises(FalhaExternaError):
        DocumentoService.renderizar(contrato)


def test_compra_venda_com_financiamento_e_troca(loja, criar_contrato, veiculo_troca) -> None:
    contrato = criar_contrato(
        valor_financiado='15000.00',
        banco_financiamento='Banco Exemplo S.A.',
        veiculo_troca=veiculo_troca.id,
        valor_troca='18000.00',
    )

    texto = DocumentoService.renderizar(contrato)

    assert 'junto à instituição financeira Banco Exemplo S.A.' in texto
    assert 'Placa: XYZ9A87' in texto
    assert 'R$ 18.000,00' in texto


def test_pdf_do_contrato(loja, criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)

    pdf = DocumentoService.gerar_pdf(contrato)

    assert pdf.startswith(b'%PDF')


def test_exportacoes_sao_versionadas_e_imutaveis(loja, criar_contrato) -> None:
    contrato = criar_contrato()

    _, primeiro, texto = DocumentoService.exportar(contrato.id, 'Testes')
    _, segundo, _ = DocumentoService.exportar(contrato.id, 'Testes')

    assert (primeiro.versao, segundo.versao) == (1, 2)
    assert primeiro.gerado_por == 'staff_export'
    assert len(primeiro.hash_arquivo) == 64
    assert primeiro.url_arquivo.endswith('?versao=1')

    primeiro.nome_arquivo = 'alterado.pdf'
    with pytest.raises(ConflitoError):
        primeiro.save()
    assert ArquivoContrato.objects.get(pk=primeiro.pk).nome_arquivo != 'alterado.pdf'


def test_assinatura_digital_recalcula_vencimentos(loja, criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)
    # Cronograma provisório montado meses antes da assinatura
    ParcelaService.gerar_parcelas(contrato, date(2025, 1, 5))
    assert contrato.parcelas.get(numero_parcela=1).data_vencimento == date(2025, 2, 10)

    ContratoService.transicionar(contrato.id, StatusContrato.GERADO)
    assinatura = AssinaturaService.emitir(contrato.id)
    AssinaturaService.validar(assinatura.token, '123')
    AssinaturaService.assinar(assinatura.token)

    contrato.refresh_from_db()
    assinado_em = timezone.localdate(contrato.data_assinatura)
    vencimentos = list(contrato.parcelas.values_list('data_vencimento', flat=True))
    assert len(vencimentos) == 3
    assert vencimentos[0] >= assinado_em + timedelta(days=30)
    assert vencimentos == ParcelaService.calcular_vencimentos(3, 10, assinado_em)


def test_assinatura_pela_equipe_recalcula_vencimentos(criar_contrato) -> None:
    contrato = criar_contrato(TipoContrato.COMPLEMENTO_ENTRADA)
    ParcelaService.gerar_parcelas(contrato, date(2025, 1, 5))
    ContratoService.transicionar(contrato.id, StatusContrato.GERADO)

    contrato = ContratoService.transicionar(contrato.id, StatusContrato.ASSINADO)

    primeira = contrato.parcelas.get(numero_parcela=1)
    assert primeira.data_vencimento >= timezone.localdate(contrato.data_assinatura) + timedelta(days=30)


def test_assinatura_pela_equipe_invalida_links_ativos(assinatura, contrato_gerado) -> None:
    ContratoService.transicionar(contrato_gerado.id, StatusContrato.ASSINADO)

    assinatura.refresh_from_db()
    assert assinatura.status == StatusAssinatura.INVALIDADA
    with pytest.raises(LinkExpiradoError):
        AssinaturaService.validar(assinatura.token, '123')


def test_versao_exportada_preserva_o_texto_original(loja, criar_contrato) -> None:
    contrato = criar_contrato()
    _, arquivo, texto = DocumentoService.exportar(contrato.id, 'Testes')

    ContratoService.atualizar(contrato.id, {'valor_venda': '99999.00'})

    _, versao = DocumentoService.arquivo_da_versao(contrato.id, arquivo.versao)
    assert versao.conteudo == texto
    assert hashlib.sha256(versao.conteudo.encode('utf-8')).hexdigest() == versao.hash_arquivo
    assert 'R$ 99.999,00' not in versao.conteudo
    assert 'R$ 99.999,00' in DocumentoService.renderizar(contrato)


@pytest.mark.parametrize('versao', ['7', 'abc'])
def test_versao_inexistente(criar_contrato, versao) -> None:
    contrato = criar_contrato()

    with pytest.raises(NaoEncontradoError):
        DocumentoService.arquivo_da_versao(contrato.id, versao)
