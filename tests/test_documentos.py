from __future__ import annotations

from dataclasses import replace

import pytest

from contratos.documentos import (
    TEMPLATES,
    DadosContrato,
    formatar_forma_pagamento,
    numero_por_extenso,
    renderizar_contrato,
)

BASE = DadosContrato(
    razao_social_loja='MayBack Cars Comércio de Veículos Ltda',
    cnpj_loja='11.222.333/0001-81',
    endereco_loja='Av. dos Automóveis, 1500, Vila Mariana, São Paulo - SP',
    representante_loja='Marcos Almeida',
    cpf_representante_loja='529.982.247-25',
    nome_cliente='Ana Paula Ferreira',
    cpf_cnpj_cliente='111.444.771-23',
    tipo_documento_cliente='CPF',
    rg_cliente='12.345.678-9',
    cnh_cliente='01234567890',
    endereco_cliente='Rua das Flores, 42, Centro, Campinas - SP',
    telefone_cliente='(11) 91234-5678',
    email_cliente='ana.ferreira@example.com',
    marca='Toyota',
    modelo='Corolla XEi',
    ano='2020/2021',
    cor='Prata',
    placa='ABC1D23',
    chassi='9BR53ZEC2M1234567',
    renavam='12345678901',
    km='45.210',
    valor_veiculo='R$ 55.000,00',
    cidade_foro='São Paulo',
    data_emissao='18 de outubro de 2026',
)

COMPLEMENTO_PARCELADO = replace(
    BASE,
    entrada_total='R$ 10.000,00',
    entrada_paga='R$ 4.000,00',
    entrada_restante='R$ 6.000,00',
    forma_pagamento='parcelado',
    quantidade_parcelas=3,
    valor_parcela='R$ 2.000,00',
    dia_vencimento=10,
    forma_pagamento_parcelas='pix',
)


@pytest.mark.parametrize('tipo', sorted(TEMPLATES))
def test_renderizacao_deterministica(tipo: str) -> None:
    assert renderizar_contrato(tipo, COMPLEMENTO_PARCELADO) == renderizar_contrato(tipo, COMPLEMENTO_PARCELADO)


def test_complemento_entrada_parcelado() -> None:
    texto = renderizar_contrato('entry_complement', COMPLEMENTO_PARCELADO)

    assert texto.startswith('CONTRATO PARTICULAR DE COMPLEMENTO DE ENTRADA')
    assert 'R$ 6.000,00' in texto
    assert 'Quantidade de parcelas: 3 (três) parcelas;' in texto
    assert 'Valor de cada parcela: R$ 2.000,00;' in texto
    assert 'todo dia 10 de cada mês' in texto
    assert 'Forma de pagamento: PIX;' in texto
    assert (
        '3.2. A primeira parcela terá seu vencimento 30 (trinta) dias após a data de assinatura '
        'deste instrumento.'
    ) in texto
    assert 'condição suspensiva' not in texto


def test_complemento_entrada_avista() -> None:
    dados = replace(COMPLEMENTO_PARCELADO, forma_pagamento='avista', data_vencimento_avista='30/10/2026')
    texto = renderizar_contrato('entry_complement', dados)

    assert 'em parcela única, mediante pagamento à vista, com vencimento para o dia 30/10/2026' in texto
    assert 'Quantidade de parcelas' not in texto
    assert '30 (trinta) dias após a data de assinatura' not in texto


def test_compra_venda_sem_financiamento() -> None:
    dados = replace(BASE, valor_financiado='R$ 0,00', banco_financiador='Banco Exemplo')
    texto = renderizar_contrato('purchase_sale', dados)

    assert 'condição suspensiva' not in texto
    assert 'Banco Exemplo' not in texto


def test_compra_venda_com_financiamento() -> None:
    dados = replace(BASE, valor_financiado='R$ 15.000,00', banco_financiador='Banco Exemplo S.A.')
    texto = renderizar_contrato('purchase_sale', dados)

    assert 'o montante de R$ 15.000,00 será objeto de financiamento' in texto
    assert 'junto à instituição financeira Banco Exemplo S.A.' in texto
    assert 'A aprovação do financiamento é condição suspensiva' in texto
    assert 'parcelas mensais' not in texto


def test_compra_venda_com_parcelas_do_financiamento() -> None:
    dados = replace(
        BASE,
        valor_financiado='R$ 25.000,00',
        banco_financiador='Banco Exemplo S.A.',
        parcelas_financiamento=48,
        valor_parcela_financiamento='R$ 850,00',
    )
    texto = renderizar_contrato('purchase_sale', dados)

    assert ('O financiamento será pago em 48 (quarenta e oito) parcelas mensais de R$ 850,00, '
            'diretamente à instituição financeira.') in texto


def test_compra_venda_referencia_complemento_de_entrada() -> None:
    sem_restante = renderizar_contrato('purchase_sale', replace(BASE, entrada_restante='R$ 0,00'))
    com_restante = renderizar_contrato('purchase_sale', replace(BASE, entrada_restante='R$ 6.000,00'))

    assert 'CONTRATO PARTICULAR DE COMPLEMENTO DE ENTRADA' not in sem_restante
    assert '3.6. O valor restante da entrada, no montante de R$ 6.000,00' in com_restante


def test_veiculo_em_troca_exige_placa_e_valor() -> None:
    sem_valor = renderizar_contrato('purchase_sale', replace(BASE, placa_troca='XYZ9A87'))
    com_troca = renderizar_contrato(
        'purchase_sale',
        replace(BASE, placa_troca='XYZ9A87', modelo_troca='Etios', valor_troca='R$ 18.000,00'),
    )

    assert 'DO VEÍCULO DADO EM TROCA' not in sem_valor
    assert 'DO VEÍCULO DADO EM TROCA' in com_troca
    assert 'O valor atribuído ao veículo dado em troca é de R$ 18.000,00' in com_troca


def test_penalidades_por_extenso() -> None:
    texto = renderizar_contrato('entry_complement', replace(COMPLEMENTO_PARCELADO, multa_percentual='2',
                                                            juros_mensal='1'))

    assert 'Multa moratória de 2% (dois por cento)' in texto
    assert 'Juros de mora de 1% (um por cento) ao mês' in texto


def test_vencimento_antecipado_opcional() -> None:
    com = renderizar_contrato('entry_complement', COMPLEMENTO_PARCELADO)
    sem = renderizar_contrato('entry_complement',
                              replace(COMPLEMENTO_PARCELADO, clausula_vencimento_antecipado=False))

    assert 'vencimento antecipado' in com
    assert 'vencimento antecipado' not in sem


def test_identificacao_cpf_inclui_rg_e_cnh() -> None:
    texto = renderizar_contrato('purchase_sale', BASE)

    assert 'inscrito(a) no CPF sob o nº 111.444.771-23' in texto
    assert 'portador(a) do RG nº 12.345.678-9, CNH nº 01234567890' in texto


def test_identificacao_cnpj_omite_rg_e_cnh() -> None:
    dados = replace(BASE, tipo_documento_cliente='CNPJ', cpf_cnpj_cliente='12.345.678/0001-95')
    texto = renderizar_contrato('purchase_sale', dados)

    assert 'inscrito(a) no CNPJ sob o nº 12.345.678/0001-95' in texto
    assert 'portador(a) do RG' not in texto


def test_tipos_com_testemunhas() -> None:
    assert 'TESTEMUNHAS:' in renderizar_contrato('consignment', BASE)
    assert 'TESTEMUNHAS:' not in renderizar_contrato('delivery_protocol', BASE)


def test_tipo_desconhecido() -> None:
    with pytest.raises(ValueError):
        renderizar_contrato('leasing', BASE)


@pytest.mark.parametrize(
    ('numero', 'esperado'),
    [
        (0, 'zero'),
        (2, 'dois'),
        ('1', 'um'),
        (14, 'quatorze'),
        (20, 'vinte'),
        (21, 'vinte e um'),
        (30, 'trinta'),
        (99, 'noventa e nove'),
        (100, '100'),
        ('2,5', '2,5'),
        (-3, '-3'),
        ('abc', 'abc'),
    ],
)
def test_numero_por_extenso(numero, esperado: str) -> None:
    assert numero_por_extenso(numero) == esperado


@pytest.mark.parametrize(
    ('forma', 'esperado'),
    [
        ('pix', 'PIX'),
        ('boleto', 'Boleto Bancário'),
        ('transferencia', 'Transferência Bancária (TED/DOC)'),
        ('cheque', 'a definir'),
        (None, 'a definir'),
    ],
)
def test_formatar_forma_pagamento(forma, esperado: str) -> None:
    assert formatar_forma_pagamento(forma) == esperado
