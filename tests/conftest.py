from __future__ import annotations

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from clientes.models import Cliente
from contratos.models import StatusContrato, TipoContrato
from contratos.services import AssinaturaService, ContratoService
from core.models import Loja
from veiculos.models import Marca, Veiculo

CAMPOS_POR_TIPO = {
    TipoContrato.COMPLEMENTO_ENTRADA: {
        'entrada_total': '10000.00',
        'entrada_paga': '4000.00',
        'forma_pagamento_restante': 'parcelado',
        'quantidade_parcelas': 3,
        'valor_parcela': '2000.00',
        'dia_vencimento': 10,
        'forma_pagamento_parcelas': 'pix',
    },
    TipoContrato.COMPRA_VENDA: {
        'valor_venda': '55000.00',
        'entrada_total': '20000.00',
        'entrada_paga': '20000.00',
    },
    TipoContrato.AQUISICAO_VEICULO: {
        'valor_venda': '38000.00',
    },
    TipoContrato.CONSIGNACAO: {
        'valor_minimo_venda': '42000.00',
        'comissao_loja': '8.00',
        'prazo_consignacao': 60,
    },
    TipoContrato.PROTOCOLO_ENTREGA: {
        'data_hora_entrega': '2026-10-20T14:30:00-03:00',
        'chave_principal': True,
        'manual': True,
    },
    TipoContrato.RETIRADA_CONSIGNACAO: {
        'data_hora_retirada': '2026-10-21T09:00:00-03:00',
        'motivo_retirada': 'Desistência da venda pelo proprietário',
    },
}


@pytest.fixture
def loja(db):
    return Loja.objects.create(
        razao_social='MayBack Cars Comércio de Veículos Ltda',
        nome_fantasia='MayBack Cars',
        cnpj='11222333000181',
        email='contato@maybackcars.com.br',
        telefone='11987654321',
        rua='Av. dos Automóveis',
        numero='1500',
        bairro='Vila Mariana',
        cidade='São Paulo',
        estado='SP',
        cep='04101-000',
        representante_legal='Marcos Almeida',
        cpf_representante='52998224725',
    )


@pytest.fixture
def cliente_cpf(db):
    # Documento terminado em 123
    return Cliente.objects.create(
        nome='Ana Paula Ferreira',
        cpf_cnpj='111.444.771-23',
        rg='12.345.678-9',
        cnh='01234567890',
        email='ana.ferreira@example.com',
        telefone='11912345678',
        rua='Rua das Flores',
        numero='42',
        bairro='Centro',
        cidade='Campinas',
        estado='SP',
    )


@pytest.fixture
def cliente_cnpj(db):
    # Documento iniciado em 123 e terminado em 195
    return Cliente.objects.create(
        nome='Transportes Ribeiro Ltda',
        cpf_cnpj='12.345.678/0001-95',
        email='financeiro@ribeiro.example.com',
        telefone='1133334444',
    )


@pytest.fixture
def marca(db):
    return Marca.objects.create(nome='Toyota')


@pytest.fixture
def veiculo(marca):
    return Veiculo.objects.create(
        marca=marca,
        modelo='Corolla XEi',
        ano='2020/2021',
        cor='Prata',
        km=45210,
        preco=Decimal('55000.00'),
        placa='ABC1D23',
        renavam='12345678901',
        chassi='9BR53ZEC2M1234567',
    )


@pytest.fixture
def veiculo_troca(marca):
    return Veiculo.objects.create(
        marca=marca,
        modelo='Etios',
        ano='2016/2016',
        cor='Branco',
        km=98000,
        placa='XYZ9A87',
    )


@pytest.fixture
def criar_contrato(cliente_cpf, veiculo):
    def _criar(tipo=TipoContrato.COMPRA_VENDA, cliente=None, **campos):
        dados = {
            'tipo_contrato': tipo,
            'cliente': (cliente or cliente_cpf).id,
            'veiculo': veiculo.id,
        }
        dados.update(CAMPOS_POR_TIPO[tipo])
        dados.update(campos)
        return ContratoService.criar(dados, 'Testes')
    return _criar


@pytest.fixture
def contrato_gerado(criar_contrato):
    contrato = criar_contrato()
    return ContratoService.transicionar(contrato.id, StatusContrato.GERADO, 'Testes')


@pytest.fixture
def assinatura(contrato_gerado):
    return AssinaturaService.emitir(contrato_gerado.id, 'Testes')


@pytest.fixture
def usuario(db, django_user_model):
    return django_user_model.objects.create_user(
        username='vendedor', password='senha-de-teste', first_name='Carla', last_name='Souza'
    )


@pytest.fixture
def api_client(usuario):
    client = APIClient()
    client.force_authenticate(user=usuario)
    return client


@pytest.fixture
def cliente_publico():
    return APIClient()
