import logging
from io import BytesIO
from xml.sax.saxutils import escape

import requests
from django.conf import settings
from django.utils import timezone
from num2words import num2words
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.utils import Validadores
from .models import StatusAssinatura

logger = logging.getLogger(__name__)

title_style = ParagraphStyle(
    name='Title',
    fontSize=14,
    leading=18,
    alignment=1,
    spaceAfter=16,
    fontName='Helvetica-Bold',
    textColor=colors.HexColor('#1A1A1A'),
)

heading_style = ParagraphStyle(
    name='Heading2',
    fontSize=11,
    leading=14,
    spaceAfter=8,
    spaceBefore=10,
    fontName='Helvetica-Bold',
    textColor=colors.HexColor('#1A1A1A'),
)

normal_style = ParagraphStyle(
    name='Normal',
    fontSize=10,
    leading=14,
    spaceBefore=3,
    spaceAfter=6,
    fontName='Helvetica',
    leftIndent=10,
    rightIndent=10,
    alignment=4,
)

certificado_style = ParagraphStyle(
    name='Certificado',
    fontSize=8,
    leading=11,
    spaceAfter=3,
    fontName='Helvetica',
    leftIndent=10,
    rightIndent=10,
    textColor=colors.HexColor('#333333'),
)

paragrafos_com_indentacao = ParagraphStyle(
    name='IndentedParagraph',
    fontSize=10,
    leading=14,
    spaceBefore=3,
    spaceAfter=6,
    fontName='Helvetica',
    leftIndent=30,
    rightIndent=10,
    alignment=0,
)


def _eh_titulo_de_secao(linha):
    return linha.startswith('CLÁUSULA') or linha.startswith('TESTEMUNHAS') or (
        len(linha) > 3 and linha[0].isdigit() and linha[1:3] == '. ' and linha[3:].isupper()
    )


def _carregar_logo(url):
    """Baixa o logotipo da loja; falhas apenas deixam o PDF sem logo"""
    if not url:
        return None
    try:
        response = requests.get(url, timeout=settings.CONTRATO_LOGO_TIMEOUT)
        response.raise_for_status()
        return ImageReader(BytesIO(response.content))
    except (requests.RequestException, OSError) as e:
        logger.warning(f"Erro ao carregar logotipo da loja: {e}")
        return None


def _desenhar_pagina(loja, logo, numero_contrato):
    """Borda, logotipo e rodapé de todas as páginas"""
    def desenhar(canvas, doc):
        canvas.saveState()

        if logo is not None:
            img_width, img_height = logo.getSize()
            width = 90
            height = width * (img_height / float(img_width))
            canvas.drawImage(logo, 30, A4[1] - 30 - height, width=width, height=height, mask='auto')

        canvas.setStrokeColor(colors.black)
        canvas.setLineWidth(1)
        canvas.rect(20, 20, A4[0] - 40, A4[1] - 40)

        if loja is not None:
            footer_text = f"{loja.razao_social} - CNPJ: {loja.cnpj} - {loja.endereco_completo}"
            canvas.setFont('Helvetica', 7)
            canvas.drawCentredString(A4[0] / 2, 10, footer_text)

        canvas.setFont('Helvetica', 7)
        canvas.drawRightString(A4[0] - 25, A4[1] - 15, f"{numero_contrato} - pág. {doc.page}")
        canvas.restoreState()
    return desenhar


def _tabela_parcelas(parcelas, largura):
    data = [["Parcela", "Valor", "Valor por Extenso", "Vencimento"]]
    for parcela in parcelas:
        valor_extenso = num2words(float(parcela.valor), lang='pt_BR', to='currency').upper()
        data.append([
            str(parcela.numero_parcela),
            Validadores.formatar_moeda(parcela.valor),
            Paragraph(valor_extenso, normal_style),
            parcela.data_vencimento.strftime('%d/%m/%Y'),
        ])

    table = Table(data, colWidths=[largura * 0.12, largura * 0.2, largura * 0.48, largura * 0.2])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2C3E50')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 10),
        ('BACKGROUND', (0, 1), (-1, -1), colors.HexColor('#F8F9FA')),
        ('ALIGN', (0, 1), (1, -1), 'CENTER'),
        ('ALIGN', (3, 1), (3, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#CCCCCC')),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#2C3E50')),
    ]))
    return table


def linhas_certificado(assinatura, loja=None):
    """Registros do certificado de assinatura digital (loja e cliente)"""
    contrato = assinatura.contrato
    cliente = contrato.cliente
    assinado_em = timezone.localtime(assinatura.data_assinatura).strftime('%d/%m/%Y às %H:%M:%S')
    linhas = []
    if loja is not None:
        linhas.append(
            f"Assinatura da loja: {loja.razao_social} - CNPJ: {Validadores.formatar_cpf_cnpj(loja.cnpj)}"
        )
    linhas.append(
        f"Assinatura do cliente: {cliente.nome} - {cliente.tipo_documento or 'Documento'}: "
        f"{cliente.get_cpf_cnpj_display()}"
    )
    linhas.append(f"Data da assinatura: {assinado_em}")
    linhas.append(f"IP de origem: {assinatura.ip_assinatura or 'não informado'}")
    linhas.append(f"Identificador do link: {assinatura.token[:16]}")
    return linhas


def _bloco_certificado(assinatura, loja):
    bloco = [
        Spacer(1, 0.3 * inch),
        Paragraph("CERTIFICADO DE ASSINATURA DIGITAL", heading_style),
        Paragraph(
            "Este documento foi assinado eletronicamente pelas partes, com validação de identidade do "
            "cliente, nos termos da Medida Provisória nº 2.200-2/2001. A assinatura eletrônica tem a "
            "mesma validade jurídica de uma assinatura manuscrita.",
            certificado_style,
        ),
    ]
    for linha in linhas_certificado(assinatura, loja):
        bloco.append(Paragraph(escape(linha), certificado_style))
    return bloco


def gerar_pdf_contrato(contrato, texto, loja=None, assinatura=None):
    """
    Monta o PDF a partir do texto já renderizado do contrato.

    O texto é quebrado em blocos (linhas em branco); títulos de cláusula
    recebem estilo de cabeçalho e linhas recuadas (itens a, b, c...) o
    estilo com indentação. Se houver parcelas geradas, o cronograma é
    anexado ao final com os valores por extenso. Contratos assinados
    digitalmente terminam com o certificado de assinatura.

    Returns:
        bytes: conteúdo do PDF
    """
    pdf_buffer = BytesIO()
    doc = SimpleDocTemplate(
        pdf_buffer,
        pagesize=A4,
        rightMargin=30,
        leftMargin=30,
        topMargin=40,
        bottomMargin=30,
        title=f"Contrato {contrato.numero_contrato}",
    )

    story = []
    blocos = [b for b in texto.split('\n\n') if b.strip()]
    for indice, bloco in enumerate(blocos):
        linhas = bloco.strip('\n').split('\n')
        primeira = linhas[0].strip()

        if indice == 0:
            story.append(Paragraph(escape(primeira), title_style))
            continue

        if _eh_titulo_de_secao(primeira):
            story.append(Paragraph(escape(primeira), heading_style))
            linhas = linhas[1:]
            if not linhas:
                continue

        recuado = all(l.startswith('    ') for l in linhas if l.strip())
        conteudo = '<br/>'.join(escape(l.strip()) for l in linhas)
        story.append(Paragraph(conteudo, paragrafos_com_indentacao if recuado else normal_style))

    parcelas = list(contrato.parcelas.all())
    if parcelas:
        story.append(Spacer(1, 0.2 * inch))
        story.append(Paragraph("CRONOGRAMA DE PARCELAS", heading_style))
        story.append(_tabela_parcelas(parcelas, doc.width))

    if assinatura is not None and assinatura.status == StatusAssinatura.ASSINADA:
        story.extend(_bloco_certificado(assinatura, loja))

    logo = _carregar_logo(loja.logo_url if loja else '')
    desenhar = _desenhar_pagina(loja, logo, contrato.numero_contrato)
    doc.build(story, onFirstPage=desenhar, onLaterPages=desenhar)

    pdf_buffer.seek(0)
    return pdf_buffer.getvalue()
