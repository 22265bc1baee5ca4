"""
E-mails do fluxo de assinatura. O envio é best-effort: falhas de SMTP são
registradas em log e nunca desfazem a operação que originou o e-mail.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from core.models import Loja

logger = logging.getLogger(__name__)


def _nome_loja():
    loja = Loja.atual()
    if loja is None:
        return 'MayBack Cars'
    return loja.nome_fantasia or loja.razao_social


def _contexto(assinatura):
    contrato = assinatura.contrato
    return {
        'assinatura': assinatura,
        'contrato': contrato,
        'cliente': contrato.cliente,
        'veiculo': contrato.veiculo,
        'tipo_contrato': contrato.get_tipo_contrato_display(),
        'link': assinatura.link,
        'validade_horas': settings.CONTRATO_ASSINATURA_VALIDADE_HORAS,
        'nome_loja': _nome_loja(),
    }


def _enviar(assunto, texto, html, destinatario, anexos=None):
    mensagem = EmailMultiAlternatives(
        subject=assunto,
        body=texto,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[destinatario],
    )
    mensagem.attach_alternative(html, 'text/html')
    for nome, conteudo, mimetype in anexos or []:
        mensagem.attach(nome, conteudo, mimetype)
    mensagem.send(fail_silently=False)


def enviar_link_assinatura(assinatura):
    """Envia ao cliente o link público de assinatura. Retorna True se enviado."""
    if not assinatura.email_cliente:
        logger.warning(f"Assinatura {assinatura.id} sem e-mail do cliente; link não enviado")
        return False

    contexto = _contexto(assinatura)
    texto = (
        f"Prezado(a) {contexto['cliente'].nome},\n\n"
        f"Seu contrato de {contexto['tipo_contrato']} está pronto para assinatura digital.\n\n"
        f"Veículo: {contexto['veiculo'].resumo}\n"
        f"Placa: {contexto['veiculo'].placa or 'N/A'}\n"
        f"Contrato: {contexto['contrato'].numero_contrato}\n\n"
        f"Para assinar o contrato, acesse: {contexto['link']}\n\n"
        "Importante: Para validar sua identidade, você precisará informar os últimos 3 dígitos "
        "do seu CPF ou os primeiros 3 dígitos do seu CNPJ.\n\n"
        f"Este link é válido por {contexto['validade_horas']} horas.\n\n"
        f"{contexto['nome_loja']}\n"
    )
    html = render_to_string('contratos/emails/link_assinatura.html', contexto)

    try:
        _enviar(
            f"Contrato de {contexto['tipo_contrato']} - Assinatura Digital",
            texto, html, assinatura.email_cliente,
        )
    except Exception:
        logger.exception(f"Falha ao enviar link de assinatura do contrato {assinatura.contrato_id}")
        return False

    logger.info(f"Link de assinatura enviado para {assinatura.email_cliente} "
                f"(contrato {assinatura.contrato_id})")
    return True


def enviar_contrato_assinado(assinatura, pdf_bytes=None):
    """Envia a confirmação da assinatura, com o PDF anexo quando disponível"""
    if not assinatura.email_cliente:
        return False

    contexto = _contexto(assinatura)
    texto = (
        f"Prezado(a) {contexto['cliente'].nome},\n\n"
        f"Confirmamos a assinatura digital do seu contrato de {contexto['tipo_contrato']}.\n\n"
        f"Veículo: {contexto['veiculo'].resumo}\n"
        f"Contrato: {contexto['contrato'].numero_contrato}\n\n"
        f"{contexto['nome_loja']}\n"
    )
    html = render_to_string('contratos/emails/contrato_assinado.html', contexto)
    anexos = []
    if pdf_bytes:
        anexos.append((f"{contexto['contrato'].numero_contrato}.pdf", pdf_bytes, 'application/pdf'))

    try:
        _enviar(
            f"Contrato de {contexto['tipo_contrato']} assinado",
            texto, html, assinatura.email_cliente, anexos,
        )
    except Exception:
        logger.exception(f"Falha ao enviar contrato assinado {assinatura.contrato_id}")
        return False
    return True
