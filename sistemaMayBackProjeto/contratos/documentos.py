"""
Geração do texto jurídico dos contratos.

Cada tipo de contrato é uma lista ordenada de blocos de cláusulas; cada
bloco é uma função pura ``(dados) -> str | None`` e o documento final é a
concatenação dos blocos que retornam texto. Nenhuma função deste módulo
acessa o banco, lê o relógio ou gera valores aleatórios: para a mesma
entrada o texto gerado é sempre idêntico.

Os valores monetários e datas chegam já formatados em ``DadosContrato``
(ver ``contratos.services.DocumentoService.montar_dados``).
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

UNIDADES = [
    'zero', 'um', 'dois', 'três', 'quatro', 'cinco', 'seis', 'sete', 'oito', 'nove', 'dez',
    'onze', 'doze', 'treze', 'quatorze', 'quinze', 'dezesseis', 'dezessete', 'dezoito',
    'dezenove', 'vinte',
]

DEZENAS = {
    2: 'vinte',
    3: 'trinta',
    4: 'quarenta',
    5: 'cinquenta',
    6: 'sessenta',
    7: 'setenta',
    8: 'oitenta',
    9: 'noventa',
}

FORMAS_PAGAMENTO = {
    'pix': 'PIX',
    'boleto': 'Boleto Bancário',
    'transferencia': 'Transferência Bancária (TED/DOC)',
}


@dataclass(frozen=True)
class DadosContrato:
    # Loja
    razao_social_loja: str = ''
    cnpj_loja: str = ''
    endereco_loja: str = ''
    representante_loja: str = ''
    cpf_representante_loja: str = ''
    telefone_loja: str = ''

    # Cliente
    nome_cliente: str = ''
    cpf_cnpj_cliente: str = ''
    tipo_documento_cliente: str = 'CPF'
    rg_cliente: str = ''
    cnh_cliente: str = ''
    endereco_cliente: str = ''
    telefone_cliente: str = ''
    email_cliente: str = ''

    # Veículo
    marca: str = ''
    modelo: str = ''
    ano: str = ''
    cor: str = ''
    placa: str = ''
    chassi: str = ''
    renavam: str = ''
    km: str = ''

    # Valores (moeda já formatada, ex.: "R$ 6.000,00")
    valor_veiculo: str = ''
    valor_veiculo_extenso: str = ''
    entrada_total: str = ''
    entrada_paga: str = ''
    entrada_restante: str = ''
    valor_financiado: str = ''
    banco_financiador: str = ''
    parcelas_financiamento: int = 0
    valor_parcela_financiamento: str = ''

    # Pagamento do restante da entrada
    forma_pagamento: str = ''
    data_vencimento_avista: str = ''
    quantidade_parcelas: int = 0
    valor_parcela: str = ''
    dia_vencimento: int = 0
    forma_pagamento_parcelas: str = ''

    # Percentuais como números simples ("2", "2,5")
    multa_percentual: str = '2'
    juros_mensal: str = '1'
    clausula_vencimento_antecipado: bool = True
    penalidades_adicionais: str = ''

    cidade_foro: str = ''
    data_emissao: str = ''

    # Consignação
    valor_minimo_venda: str = ''
    comissao_loja: str = ''
    prazo_consignacao: int = 0
    multa_retirada_antecipada: str = ''

    # Protocolo de entrega
    data_hora_entrega: str = ''
    chave_principal: bool = False
    chave_reserva: bool = False
    manual: bool = False
    condicao_geral: str = ''

    # Retirada de consignação
    data_hora_retirada: str = ''
    motivo_retirada: str = ''
    condicao_veiculo: str = ''

    # Veículo dado na troca
    marca_troca: str = ''
    modelo_troca: str = ''
    ano_troca: str = ''
    cor_troca: str = ''
    placa_troca: str = ''
    chassi_troca: str = ''
    renavam_troca: str = ''
    km_troca: str = ''
    valor_troca: str = ''
    observacoes_troca: str = ''

    observacoes: str = ''


def numero_por_extenso(numero):
    """
    Número inteiro de 0 a 99 por extenso (ex.: 21 -> 'vinte e um').
    Valores a partir de 100, negativos ou fracionários retornam o próprio numeral.
    """
    texto = str(numero).strip()
    try:
        valor = Decimal(texto.replace(',', '.'))
    except InvalidOperation:
        return texto
    if not valor.is_finite() or valor != valor.to_integral_value() or valor < 0 or valor >= 100:
        return texto
    n = int(valor)
    if n <= 20:
        return UNIDADES[n]
    dezena, unidade = divmod(n, 10)
    if unidade == 0:
        return DEZENAS[dezena]
    return f"{DEZENAS[dezena]} e {UNIDADES[unidade]}"


def formatar_forma_pagamento(forma):
    return FORMAS_PAGAMENTO.get(forma or '', 'a definir')


def _valor_positivo(valor_formatado):
    """'R$ 15.000,00' -> True; '', 'R$ 0,00' -> False"""
    digitos = ''.join(c for c in (valor_formatado or '') if c.isdigit())
    return bool(digitos) and int(digitos) > 0


def _sim_nao(valor):
    return 'SIM' if valor else 'NÃO'


def _tem_troca(d):
    return bool(d.placa_troca and d.valor_troca)


def _descricao_veiculo(d):
    return (
        f"    Marca: {d.marca}\n"
        f"    Modelo: {d.modelo}\n"
        f"    Ano de Fabricação/Modelo: {d.ano}\n"
        f"    Cor: {d.cor}\n"
        f"    Placa: {d.placa}\n"
        f"    Chassi: {d.chassi}\n"
        f"    RENAVAM: {d.renavam}\n"
        f"    Quilometragem: {d.km} km"
    )


def _identificacao_cliente(d):
    documentos = ''
    if d.tipo_documento_cliente == 'CPF':
        documentos = f"portador(a) do RG nº {d.rg_cliente}, CNH nº {d.cnh_cliente}, "
    return (
        f"{d.nome_cliente}, inscrito(a) no {d.tipo_documento_cliente} sob o nº {d.cpf_cnpj_cliente}, "
        f"{documentos}residente e domiciliado(a) na {d.endereco_cliente}, "
        f"telefone {d.telefone_cliente}, e-mail {d.email_cliente}"
    )


def _identificacao_loja(d):
    return (
        f"{d.razao_social_loja}, pessoa jurídica de direito privado, inscrita no CNPJ sob o nº "
        f"{d.cnpj_loja}, com sede na {d.endereco_loja}, neste ato representada por "
        f"{d.representante_loja}, inscrito(a) no CPF sob o nº {d.cpf_representante_loja}"
    )


def _partes(titulo_loja, titulo_cliente):
    """Qualificação das partes: loja primeiro, cliente em seguida"""
    def bloco(d):
        return (
            "Pelo presente instrumento particular, de um lado:\n\n"
            f"{titulo_loja}: {_identificacao_loja(d)}, doravante denominada simplesmente "
            f"\"{titulo_loja}\";\n\n"
            "e, de outro lado:\n\n"
            f"{titulo_cliente}: {_identificacao_cliente(d)}, doravante denominado(a) simplesmente "
            f"\"{titulo_cliente}\";\n\n"
            "têm entre si justo e contratado o seguinte:"
        )
    return bloco


def _titulo(texto):
    return lambda d: texto


def _assinaturas(titulo_loja, titulo_cliente, com_testemunhas=True):
    def bloco(d):
        texto = (
            f"{d.cidade_foro}, {d.data_emissao}\n\n\n\n\n"
            "_____________________________________________\n"
            f"{d.razao_social_loja}\n"
            f"CNPJ: {d.cnpj_loja}\n"
            f"{titulo_loja}\n\n\n\n\n"
            "_____________________________________________\n"
            f"{d.nome_cliente}\n"
            f"{d.tipo_documento_cliente}: {d.cpf_cnpj_cliente}\n"
            f"{titulo_cliente}"
        )
        if com_testemunhas:
            texto += (
                "\n\n\n\n\nTESTEMUNHAS:\n\n\n"
                "1. _____________________________________________\n"
                "   Nome:\n"
                "   CPF:\n\n\n"
                "2. _____________________________________________\n"
                "   Nome:\n"
                "   CPF:"
            )
        return texto
    return bloco


def _encerramento(d):
    return (
        "E, por estarem assim justas e contratadas, as partes firmam o presente instrumento "
        "em 02 (duas) vias de igual teor e forma, na presença de duas testemunhas."
    )


def _foro(numero_clausula, ordinal):
    def bloco(d):
        return (
            f"CLÁUSULA {ordinal} - DO FORO\n\n"
            f"{numero_clausula}.1. Fica eleito o foro da Comarca de {d.cidade_foro} para dirimir "
            "quaisquer dúvidas ou litígios decorrentes deste contrato, com renúncia expressa a "
            "qualquer outro, por mais privilegiado que seja."
        )
    return bloco


def _veiculo_troca(d):
    if not _tem_troca(d):
        return None
    texto = (
        "CLÁUSULA COMPLEMENTAR - DO VEÍCULO DADO EM TROCA\n\n"
        "C.1. Como parte do pagamento da entrada, o COMPRADOR entrega à VENDEDORA, em regime de "
        "dação em pagamento, o seguinte veículo:\n\n"
        f"    Marca: {d.marca_troca or '-'}\n"
        f"    Modelo: {d.modelo_troca or '-'}\n"
        f"    Ano de Fabricação/Modelo: {d.ano_troca or '-'}\n"
        f"    Cor: {d.cor_troca or '-'}\n"
        f"    Placa: {d.placa_troca or '-'}\n"
        f"    Chassi: {d.chassi_troca or '-'}\n"
        f"    RENAVAM: {d.renavam_troca or '-'}\n"
        f"    Quilometragem: {d.km_troca or '-'} km\n\n"
        f"C.2. O valor atribuído ao veículo dado em troca é de {d.valor_troca}, que será abatido do "
        "preço total do veículo objeto desta transação, compondo parte da entrada.\n\n"
        "C.3. O COMPRADOR declara ser o legítimo proprietário do veículo dado em troca, garantindo "
        "que o mesmo encontra-se livre e desembaraçado de quaisquer ônus, gravames, débitos de "
        "multas, IPVA, licenciamento ou quaisquer outras pendências.\n\n"
        "C.4. O COMPRADOR compromete-se a entregar toda a documentação necessária à transferência "
        "de propriedade do veículo dado em troca, devidamente preenchida e assinada, no prazo de "
        "até 05 (cinco) dias úteis contados da assinatura deste contrato."
    )
    if d.observacoes_troca:
        texto += f"\n\nC.5. Observações sobre o veículo em troca: {d.observacoes_troca}"
    return texto


def _penalidades(numero_clausula, ordinal, sujeito='COMPRADOR', credor='VENDEDORA'):
    def bloco(d):
        n = numero_clausula
        texto = (
            f"CLÁUSULA {ordinal} - DA MULTA, JUROS E INADIMPLÊNCIA\n\n"
            f"{n}.1. Em caso de atraso no pagamento de qualquer parcela ou do valor total, o "
            f"{sujeito} incorrerá em:\n\n"
            f"    a) Multa moratória de {d.multa_percentual}% "
            f"({numero_por_extenso(d.multa_percentual)} por cento) sobre o valor em atraso;\n"
            f"    b) Juros de mora de {d.juros_mensal}% "
            f"({numero_por_extenso(d.juros_mensal)} por cento) ao mês, calculados pro rata die;\n"
            "    c) Atualização monetária pelo índice IGP-M/FGV ou, na sua falta, pelo IPCA/IBGE."
        )
        proximo = 2
        if d.clausula_vencimento_antecipado:
            texto += (
                f"\n\n{n}.{proximo}. O não pagamento de qualquer parcela por prazo superior a 30 "
                "(trinta) dias importará no vencimento antecipado de todas as demais parcelas "
                "vincendas, tornando-se exigível imediatamente a totalidade do débito remanescente, "
                "acrescido de multa, juros e correção monetária."
            )
            proximo += 1
        texto += (
            f"\n\n{n}.{proximo}. A tolerância da {credor} quanto a eventuais atrasos não constituirá "
            "novação ou alteração das condições pactuadas, permanecendo em vigor todas as "
            "cláusulas deste contrato."
        )
        proximo += 1
        if d.penalidades_adicionais:
            texto += f"\n\n{n}.{proximo}. {d.penalidades_adicionais}"
        return texto
    return bloco


# ---------------------------------------------------------------------------
# Complemento de entrada
# ---------------------------------------------------------------------------

def _complemento_objeto(d):
    return (
        "CLÁUSULA PRIMEIRA - DO OBJETO\n\n"
        "1.1. O presente contrato tem por objeto formalizar o compromisso de pagamento do valor "
        "restante da entrada referente à aquisição do veículo abaixo descrito:\n\n"
        f"{_descricao_veiculo(d)}\n\n"
        "1.2. O COMPRADOR declara conhecer o veículo objeto deste contrato, tendo-o examinado e "
        "encontrado em perfeitas condições de uso e funcionamento."
    )


def _complemento_valores(d):
    return (
        "CLÁUSULA SEGUNDA - DO VALOR E COMPOSIÇÃO DA ENTRADA\n\n"
        f"2.1. O valor total do veículo foi ajustado entre as partes em {d.valor_veiculo}.\n\n"
        "2.2. A entrada total acordada para a aquisição do veículo corresponde ao valor de "
        f"{d.entrada_total}.\n\n"
        "2.3. O COMPRADOR realizou, no ato desta transação, o pagamento parcial da entrada no "
        f"valor de {d.entrada_paga}.\n\n"
        "2.4. O valor restante da entrada, objeto principal deste contrato, corresponde a "
        f"{d.entrada_restante}, que será pago conforme as condições estabelecidas na Cláusula "
        "Terceira."
    )


def _complemento_pagamento(d):
    if d.forma_pagamento == 'avista':
        return (
            "CLÁUSULA TERCEIRA - DA FORMA DE PAGAMENTO\n\n"
            "3.1. O COMPRADOR compromete-se a pagar o valor restante da entrada, no montante de "
            f"{d.entrada_restante}, em parcela única, mediante pagamento à vista, com vencimento "
            f"para o dia {d.data_vencimento_avista}.\n\n"
            "3.2. O pagamento deverá ser realizado através de transferência bancária (PIX ou TED) "
            "para a conta indicada pela VENDEDORA, ou por outro meio expressamente autorizado por "
            "esta.\n\n"
            "3.3. O comprovante de pagamento deverá ser apresentado à VENDEDORA para fins de "
            "quitação e registro."
        )
    forma = formatar_forma_pagamento(d.forma_pagamento_parcelas)
    return (
        "CLÁUSULA TERCEIRA - DA FORMA DE PAGAMENTO\n\n"
        "3.1. O COMPRADOR compromete-se a pagar o valor restante da entrada, no montante de "
        f"{d.entrada_restante}, de forma parcelada, nas seguintes condições:\n\n"
        f"    a) Quantidade de parcelas: {d.quantidade_parcelas} "
        f"({numero_por_extenso(d.quantidade_parcelas)}) parcelas;\n"
        f"    b) Valor de cada parcela: {d.valor_parcela};\n"
        f"    c) Data de vencimento: todo dia {d.dia_vencimento} de cada mês;\n"
        f"    d) Forma de pagamento: {forma};\n\n"
        "3.2. A primeira parcela terá seu vencimento 30 (trinta) dias após a data de assinatura "
        "deste instrumento.\n\n"
        f"3.3. O pagamento deverá ser realizado através de {forma}, conforme orientações "
        "fornecidas pela VENDEDORA.\n\n"
        "3.4. Os comprovantes de pagamento deverão ser apresentados à VENDEDORA para fins de baixa "
        "e registro das parcelas quitadas."
    )


def _complemento_obrigacoes(d):
    return (
        "CLÁUSULA QUINTA - DAS OBRIGAÇÕES DAS PARTES\n\n"
        "5.1. São obrigações do COMPRADOR:\n\n"
        "    a) Efetuar o pagamento do valor restante da entrada nas condições e prazos "
        "estabelecidos neste instrumento;\n"
        "    b) Manter seus dados cadastrais atualizados junto à VENDEDORA;\n"
        "    c) Comunicar imediatamente qualquer alteração de endereço, telefone ou e-mail;\n"
        "    d) Apresentar os comprovantes de pagamento sempre que solicitado pela VENDEDORA;\n"
        "    e) Cumprir integralmente as demais obrigações assumidas no Contrato de Compra e "
        "Venda.\n\n"
        "5.2. São obrigações da VENDEDORA:\n\n"
        "    a) Emitir os recibos correspondentes aos pagamentos recebidos;\n"
        "    b) Fornecer ao COMPRADOR todas as informações necessárias para a efetivação dos "
        "pagamentos;\n"
        "    c) Proceder à baixa das parcelas quitadas em seus registros internos;\n"
        "    d) Cumprir as obrigações assumidas no Contrato de Compra e Venda vinculado a este "
        "instrumento."
    )


def _complemento_rescisao(d):
    return (
        "CLÁUSULA SEXTA - DA RESCISÃO E PENALIDADES\n\n"
        "6.1. O descumprimento de qualquer cláusula deste contrato por qualquer das partes "
        "ensejará sua rescisão de pleno direito, independentemente de notificação judicial ou "
        "extrajudicial.\n\n"
        "6.2. Em caso de rescisão por culpa do COMPRADOR:\n\n"
        "    a) A VENDEDORA poderá reter o percentual de 20% (vinte por cento) do valor já pago, a "
        "título de perdas e danos, custos administrativos e depreciação do veículo;\n"
        "    b) O saldo remanescente será devolvido ao COMPRADOR no prazo de 30 (trinta) dias, "
        "após deduzidas as penalidades cabíveis;\n"
        "    c) A VENDEDORA poderá exigir a imediata devolução do veículo, se este já tiver sido "
        "entregue.\n\n"
        "6.3. Em caso de rescisão por culpa da VENDEDORA, esta deverá restituir integralmente os "
        "valores pagos pelo COMPRADOR, acrescidos de correção monetária pelo IGP-M/FGV, no prazo "
        "de 15 (quinze) dias."
    )


def _complemento_disposicoes(d):
    return (
        "CLÁUSULA SÉTIMA - DAS DISPOSIÇÕES GERAIS\n\n"
        "7.1. Este contrato é acessório e complementar ao Contrato de Compra e Venda do veículo "
        "identificado na Cláusula Primeira, sendo ambos interdependentes.\n\n"
        "7.2. A nulidade ou invalidade de qualquer cláusula não prejudicará as demais, que "
        "permanecerão em pleno vigor.\n\n"
        "7.3. Qualquer alteração deste contrato somente será válida se realizada por escrito e "
        "assinada por ambas as partes.\n\n"
        "7.4. As partes declaram que este contrato foi celebrado de livre e espontânea vontade, "
        "após a leitura integral de seu conteúdo."
    )


# ---------------------------------------------------------------------------
# Compra e venda
# ---------------------------------------------------------------------------

def _compra_venda_objeto(d):
    return (
        "CLÁUSULA PRIMEIRA - DO OBJETO\n\n"
        "1.1. O presente contrato tem por objeto a compra e venda do veículo abaixo descrito, "
        "de propriedade da VENDEDORA:\n\n"
        f"{_descricao_veiculo(d)}\n\n"
        "1.2. O COMPRADOR declara ter vistoriado o veículo, conhecendo seu estado de conservação, "
        "e o recebe no estado em que se encontra."
    )


def _compra_venda_preco(d):
    extenso = f" ({d.valor_veiculo_extenso})" if d.valor_veiculo_extenso else ''
    return (
        "CLÁUSULA SEGUNDA - DO PREÇO\n\n"
        f"2.1. O preço total do veículo é de {d.valor_veiculo}{extenso}, ajustado livremente entre "
        "as partes."
    )


def _compra_venda_pagamento(d):
    return (
        "CLÁUSULA TERCEIRA - DA FORMA DE PAGAMENTO\n\n"
        f"3.1. A título de entrada, o COMPRADOR pagará à VENDEDORA o valor total de "
        f"{d.entrada_total}.\n\n"
        f"3.2. No ato da assinatura deste instrumento, o COMPRADOR pagou a quantia de "
        f"{d.entrada_paga}, dando a VENDEDORA plena quitação sobre o referido valor.\n\n"
        "3.3. O saldo do preço será quitado na forma ajustada entre as partes, observadas as "
        "condições desta cláusula."
    )


def _condicoes_financiamento(d):
    if not d.parcelas_financiamento:
        return ''
    texto = (
        f" O financiamento será pago em {d.parcelas_financiamento} "
        f"({numero_por_extenso(d.parcelas_financiamento)}) parcelas mensais"
    )
    if _valor_positivo(d.valor_parcela_financiamento):
        texto += f" de {d.valor_parcela_financiamento}"
    return texto + ", diretamente à instituição financeira."


def _compra_venda_financiamento(d):
    if not _valor_positivo(d.valor_financiado):
        return None
    return (
        f"3.4. Do valor total, o montante de {d.valor_financiado} será objeto de financiamento "
        f"junto à instituição financeira {d.banco_financiador}, ficando o COMPRADOR responsável "
        "por cumprir todas as exigências e condições impostas pela referida instituição."
        f"{_condicoes_financiamento(d)}\n\n"
        "3.5. A aprovação do financiamento é condição suspensiva para a efetivação da venda, de "
        "modo que, não sendo aprovado, as partes retornarão ao estado anterior, com a devolução "
        "integral dos valores pagos pelo COMPRADOR."
    )


def _compra_venda_complemento_entrada(d):
    if not _valor_positivo(d.entrada_restante):
        return None
    return (
        f"3.6. O valor restante da entrada, no montante de {d.entrada_restante}, será pago "
        "conforme as condições estabelecidas no CONTRATO PARTICULAR DE COMPLEMENTO DE ENTRADA, "
        "que é parte integrante e indissociável deste instrumento, vinculando-se a ele para "
        "todos os efeitos legais."
    )


def _compra_venda_entrega(d):
    return (
        "CLÁUSULA QUARTA - DA ENTREGA E DA TRANSFERÊNCIA\n\n"
        "4.1. O veículo será entregue ao COMPRADOR após a confirmação do pagamento da entrada e, "
        "havendo financiamento, após a liberação do crédito pela instituição financeira.\n\n"
        "4.2. A VENDEDORA entregará ao COMPRADOR o Certificado de Registro do Veículo (CRV) "
        "devidamente preenchido e assinado, para fins de transferência de propriedade.\n\n"
        "4.3. O COMPRADOR obriga-se a providenciar a transferência do veículo para o seu nome "
        "junto ao órgão de trânsito competente no prazo de 30 (trinta) dias, nos termos do art. "
        "123 do Código de Trânsito Brasileiro."
    )


def _compra_venda_responsabilidades(d):
    return (
        "CLÁUSULA QUINTA - DAS RESPONSABILIDADES E DA GARANTIA\n\n"
        "5.1. São de responsabilidade da VENDEDORA os débitos de IPVA, licenciamento e multas "
        "relativos a fatos geradores anteriores à data de entrega do veículo.\n\n"
        "5.2. A partir da entrega, o COMPRADOR assume integral responsabilidade civil e criminal "
        "pelo uso do veículo, bem como por todos os débitos e infrações posteriores.\n\n"
        "5.3. A VENDEDORA concede garantia legal de 90 (noventa) dias para motor e câmbio, nos "
        "termos do art. 26, inciso II, do Código de Defesa do Consumidor, excluídos os itens de "
        "desgaste natural."
    )


def _compra_venda_rescisao(d):
    return (
        "CLÁUSULA SEXTA - DA RESCISÃO\n\n"
        "6.1. O descumprimento de qualquer cláusula deste contrato ensejará sua rescisão de pleno "
        "direito, independentemente de notificação judicial ou extrajudicial.\n\n"
        "6.2. Em caso de desistência ou rescisão por culpa do COMPRADOR, a VENDEDORA poderá reter "
        "20% (vinte por cento) dos valores pagos, a título de perdas e danos e despesas "
        "administrativas, devolvendo o saldo no prazo de 30 (trinta) dias.\n\n"
        "6.3. Em caso de rescisão por culpa da VENDEDORA, esta restituirá integralmente os "
        "valores pagos, acrescidos de correção monetária pelo IGP-M/FGV, no prazo de 15 "
        "(quinze) dias."
    )


def _compra_venda_disposicoes(d):
    texto = (
        "CLÁUSULA SÉTIMA - DAS DISPOSIÇÕES GERAIS\n\n"
        "7.1. A nulidade ou invalidade de qualquer cláusula não prejudicará as demais, que "
        "permanecerão em pleno vigor.\n\n"
        "7.2. Qualquer alteração deste contrato somente será válida se realizada por escrito e "
        "assinada por ambas as partes."
    )
    if d.observacoes:
        texto += f"\n\n7.3. Observações: {d.observacoes}"
    return texto


# ---------------------------------------------------------------------------
# Aquisição de veículo (a loja compra do cliente)
# ---------------------------------------------------------------------------

def _aquisicao_objeto(d):
    return (
        "CLÁUSULA PRIMEIRA - DO OBJETO\n\n"
        "1.1. O presente contrato tem por objeto a aquisição, pela COMPRADORA, do veículo abaixo "
        "descrito, de propriedade do(a) VENDEDOR(A):\n\n"
        f"{_descricao_veiculo(d)}"
    )


def _aquisicao_preco(d):
    extenso = f" ({d.valor_veiculo_extenso})" if d.valor_veiculo_extenso else ''
    return (
        "CLÁUSULA SEGUNDA - DO PREÇO E DO PAGAMENTO\n\n"
        f"2.1. Pelo veículo descrito na Cláusula Primeira, a COMPRADORA pagará ao(à) VENDEDOR(A) "
        f"o valor de {d.valor_veiculo}{extenso}.\n\n"
        "2.2. O pagamento será efetuado mediante transferência bancária para conta de "
        "titularidade do(a) VENDEDOR(A), após a conferência da documentação e a vistoria do "
        "veículo.\n\n"
        "2.3. Havendo débitos ou gravames sobre o veículo, a COMPRADORA poderá quitá-los "
        "diretamente, abatendo os respectivos valores do preço ajustado."
    )


def _aquisicao_declaracoes(d):
    return (
        "CLÁUSULA TERCEIRA - DAS DECLARAÇÕES DO(A) VENDEDOR(A)\n\n"
        "3.1. O(A) VENDEDOR(A) declara ser o(a) legítimo(a) proprietário(a) do veículo, "
        "garantindo que o mesmo encontra-se livre e desembaraçado de quaisquer ônus, gravames, "
        "restrições judiciais ou administrativas, salvo os expressamente informados à "
        "COMPRADORA.\n\n"
        "3.2. O(A) VENDEDOR(A) responde pela evicção e pelos vícios ocultos do veículo, bem como "
        "pela veracidade da quilometragem informada."
    )


def _aquisicao_documentacao(d):
    return (
        "CLÁUSULA QUARTA - DA DOCUMENTAÇÃO E DA RESPONSABILIDADE POR DÉBITOS\n\n"
        "4.1. O(A) VENDEDOR(A) entregará o veículo acompanhado do CRV devidamente preenchido e "
        "assinado com firma reconhecida, manual, chave reserva e demais documentos pertinentes.\n\n"
        "4.2. Correm por conta do(a) VENDEDOR(A) todos os débitos de IPVA, licenciamento, "
        "multas e tributos cujo fato gerador seja anterior à data de entrega do veículo, ainda "
        "que apurados posteriormente."
    )


# ---------------------------------------------------------------------------
# Consignação
# ---------------------------------------------------------------------------

def _consignacao_objeto(d):
    return (
        "CLÁUSULA PRIMEIRA - DO OBJETO\n\n"
        "1.1. O(A) CONSIGNANTE entrega à CONSIGNATÁRIA, em regime de consignação para venda, o "
        "veículo abaixo descrito:\n\n"
        f"{_descricao_veiculo(d)}\n\n"
        "1.2. A posse do veículo é transferida à CONSIGNATÁRIA exclusivamente para fins de "
        "exposição e intermediação da venda, permanecendo a propriedade com o(a) CONSIGNANTE até "
        "a sua alienação."
    )


def _consignacao_condicoes(d):
    return (
        "CLÁUSULA SEGUNDA - DO VALOR MÍNIMO E DA COMISSÃO\n\n"
        f"2.1. O veículo não poderá ser vendido por valor inferior a {d.valor_minimo_venda}, "
        "salvo autorização expressa e por escrito do(a) CONSIGNANTE.\n\n"
        f"2.2. Pela intermediação, a CONSIGNATÁRIA fará jus à comissão de {d.comissao_loja}% "
        f"({numero_por_extenso(d.comissao_loja)} por cento) sobre o valor efetivo da venda, que "
        "será retida no repasse ao(à) CONSIGNANTE.\n\n"
        "2.3. O repasse do valor líquido ao(à) CONSIGNANTE ocorrerá em até 05 (cinco) dias úteis "
        "após o recebimento integral do preço pela CONSIGNATÁRIA."
    )


def _consignacao_prazo(d):
    texto = (
        "CLÁUSULA TERCEIRA - DO PRAZO E DA RETIRADA\n\n"
        f"3.1. A consignação vigorará pelo prazo de {d.prazo_consignacao} "
        f"({numero_por_extenso(d.prazo_consignacao)}) dias, contados da assinatura deste "
        "instrumento, prorrogável por acordo entre as partes.\n\n"
        "3.2. O(A) CONSIGNANTE poderá retirar o veículo a qualquer tempo, mediante aviso prévio "
        "de 48 (quarenta e oito) horas e assinatura do termo de retirada."
    )
    if _valor_positivo(d.multa_retirada_antecipada):
        texto += (
            "\n\n3.3. A retirada do veículo antes do término do prazo de consignação sujeitará o(a) "
            f"CONSIGNANTE ao pagamento de multa de {d.multa_retirada_antecipada}, a título de "
            "ressarcimento das despesas de preparação, exposição e divulgação."
        )
    return texto


def _consignacao_responsabilidades(d):
    return (
        "CLÁUSULA QUARTA - DAS RESPONSABILIDADES\n\n"
        "4.1. A CONSIGNATÁRIA responde pela guarda e conservação do veículo enquanto este "
        "permanecer sob sua posse, excetuados o desgaste natural e os casos fortuitos ou de "
        "força maior.\n\n"
        "4.2. Permanecem sob responsabilidade do(a) CONSIGNANTE os débitos de IPVA, "
        "licenciamento, multas e quaisquer gravames anteriores à consignação."
    )


# ---------------------------------------------------------------------------
# Protocolo de entrega
# ---------------------------------------------------------------------------

def _entrega_veiculo(d):
    return (
        "1. DO VEÍCULO ENTREGUE\n\n"
        f"A VENDEDORA entrega ao(à) COMPRADOR(A), em {d.data_hora_entrega}, o veículo abaixo "
        "descrito:\n\n"
        f"{_descricao_veiculo(d)}"
    )


def _entrega_itens(d):
    return (
        "2. DOS ITENS ENTREGUES\n\n"
        f"    Chave principal: {_sim_nao(d.chave_principal)}\n"
        f"    Chave reserva: {_sim_nao(d.chave_reserva)}\n"
        f"    Manual do proprietário: {_sim_nao(d.manual)}\n\n"
        f"Condição geral do veículo: {d.condicao_geral or 'Não informada'}"
    )


def _entrega_declaracao(d):
    return (
        "3. DA DECLARAÇÃO DE RECEBIMENTO\n\n"
        "O(A) COMPRADOR(A) declara ter recebido o veículo acima descrito, juntamente com os "
        "itens assinalados, após vistoria realizada no ato da entrega, assumindo a partir deste "
        "momento a responsabilidade civil e criminal pelo seu uso, bem como por multas e "
        "infrações posteriores à data e hora indicadas."
    )


# ---------------------------------------------------------------------------
# Retirada de consignação
# ---------------------------------------------------------------------------

def _retirada_veiculo(d):
    return (
        "1. DO VEÍCULO RETIRADO\n\n"
        f"O(A) CONSIGNANTE retira da CONSIGNATÁRIA, em {d.data_hora_retirada}, o veículo abaixo "
        "descrito, que se encontrava em regime de consignação:\n\n"
        f"{_descricao_veiculo(d)}"
    )


def _retirada_motivo(d):
    return (
        "2. DO MOTIVO E DA CONDIÇÃO DO VEÍCULO\n\n"
        f"Motivo da retirada: {d.motivo_retirada}\n\n"
        f"Condição do veículo no ato da retirada: {d.condicao_veiculo or 'Não informada'}"
    )


def _retirada_quitacao(d):
    texto = (
        "3. DA QUITAÇÃO\n\n"
        "Com a retirada, as partes dão por encerrado o contrato de consignação, outorgando-se "
        "mútua quitação quanto à guarda do veículo, ressalvadas as obrigações financeiras "
        "eventualmente pendentes."
    )
    if _valor_positivo(d.multa_retirada_antecipada):
        texto += (
            "\n\nPor se tratar de retirada antecipada, é devida pelo(a) CONSIGNANTE a multa de "
            f"{d.multa_retirada_antecipada}, conforme previsto no contrato de consignação."
        )
    return texto


TEMPLATES = {
    'entry_complement': [
        _titulo("CONTRATO PARTICULAR DE COMPLEMENTO DE ENTRADA PARA AQUISIÇÃO DE VEÍCULO"),
        _partes('VENDEDORA', 'COMPRADOR(A)'),
        _complemento_objeto,
        _complemento_valores,
        _veiculo_troca,
        _complemento_pagamento,
        _penalidades(4, 'QUARTA'),
        _complemento_obrigacoes,
        _complemento_rescisao,
        _complemento_disposicoes,
        _foro(8, 'OITAVA'),
        _encerramento,
        _assinaturas('VENDEDORA', 'COMPRADOR(A)'),
    ],
    'purchase_sale': [
        _titulo("CONTRATO PARTICULAR DE COMPRA E VENDA DE VEÍCULO AUTOMOTOR"),
        _partes('VENDEDORA', 'COMPRADOR(A)'),
        _compra_venda_objeto,
        _compra_venda_preco,
        _compra_venda_pagamento,
        _compra_venda_financiamento,
        _compra_venda_complemento_entrada,
        _veiculo_troca,
        _compra_venda_entrega,
        _compra_venda_responsabilidades,
        _compra_venda_rescisao,
        _compra_venda_disposicoes,
        _foro(8, 'OITAVA'),
        _encerramento,
        _assinaturas('VENDEDORA', 'COMPRADOR(A)'),
    ],
    'vehicle_purchase': [
        _titulo("CONTRATO PARTICULAR DE COMPRA DE VEÍCULO"),
        _partes('COMPRADORA', 'VENDEDOR(A)'),
        _aquisicao_objeto,
        _aquisicao_preco,
        _aquisicao_declaracoes,
        _aquisicao_documentacao,
        _foro(5, 'QUINTA'),
        _encerramento,
        _assinaturas('COMPRADORA', 'VENDEDOR(A)'),
    ],
    'consignment': [
        _titulo("CONTRATO DE CONSIGNAÇÃO DE VEÍCULO PARA VENDA"),
        _partes('CONSIGNATÁRIA', 'CONSIGNANTE'),
        _consignacao_objeto,
        _consignacao_condicoes,
        _consignacao_prazo,
        _consignacao_responsabilidades,
        _foro(5, 'QUINTA'),
        _encerramento,
        _assinaturas('CONSIGNATÁRIA', 'CONSIGNANTE'),
    ],
    'delivery_protocol': [
        _titulo("PROTOCOLO DE ENTREGA DE VEÍCULO"),
        _partes('VENDEDORA', 'COMPRADOR(A)'),
        _entrega_veiculo,
        _entrega_itens,
        _entrega_declaracao,
        _assinaturas('VENDEDORA', 'COMPRADOR(A)', com_testemunhas=False),
    ],
    'consignment_withdrawal': [
        _titulo("TERMO DE RETIRADA DE VEÍCULO EM CONSIGNAÇÃO"),
        _partes('CONSIGNATÁRIA', 'CONSIGNANTE'),
        _retirada_veiculo,
        _retirada_motivo,
        _retirada_quitacao,
        _assinaturas('CONSIGNATÁRIA', 'CONSIGNANTE', com_testemunhas=False),
    ],
}


def renderizar_contrato(tipo_contrato, dados):
    """
    Gera o texto do contrato para o tipo informado.

    Args:
        tipo_contrato: código do tipo (ex.: 'entry_complement')
        dados: DadosContrato com os valores já formatados

    Returns:
        str: texto completo do contrato

    Raises:
        ValueError: tipo de contrato desconhecido
    """
    try:
        blocos = TEMPLATES[tipo_contrato]
    except KeyError:
        raise ValueError(f"Tipo de contrato desconhecido: {tipo_contrato}") from None

    partes = []
    for bloco in blocos:
        texto = bloco(dados)
        if texto:
            partes.append(texto.strip('\n'))
    return '\n\n\n'.join(partes) + '\n'
