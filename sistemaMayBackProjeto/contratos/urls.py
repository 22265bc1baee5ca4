from django.urls import path
from . import views

app_name = 'contratos'

urlpatterns = [
    # API da equipe
    path('api/contratos/', views.contratos, name='contratos'),
    path('api/contratos/<int:contrato_id>/', views.contrato_detalhe, name='contrato_detalhe'),
    path('api/contratos/<int:contrato_id>/status/', views.contrato_status, name='contrato_status'),
    path('api/contratos/<int:contrato_id>/texto/', views.contrato_texto, name='contrato_texto'),
    path('api/contratos/<int:contrato_id>/pdf/', views.contrato_pdf, name='contrato_pdf'),
    path('api/contratos/<int:contrato_id>/parcelas/', views.contrato_parcelas, name='contrato_parcelas'),
    path('api/contratos/<int:contrato_id>/arquivos/', views.contrato_arquivos, name='contrato_arquivos'),
    path('api/contratos/<int:contrato_id>/enviar-assinatura/', views.enviar_assinatura, name='enviar_assinatura'),
    path('api/contratos/<int:contrato_id>/assinatura/', views.contrato_assinatura, name='contrato_assinatura'),
    path('api/parcelas/<int:parcela_id>/pagar/', views.pagar_parcela, name='pagar_parcela'),

    # Assinatura pública (link enviado ao cliente)
    path('publico/assinatura/<str:token>/', views.assinatura_publica, name='assinatura_publica'),
    path('publico/assinatura/<str:token>/validar/', views.assinatura_validar, name='assinatura_validar'),
    path('publico/assinatura/<str:token>/contrato/', views.assinatura_contrato, name='assinatura_contrato'),
    path('publico/assinatura/<str:token>/pdf/', views.assinatura_pdf, name='assinatura_pdf'),
    path('publico/assinatura/<str:token>/assinar/', views.assinatura_assinar, name='assinatura_assinar'),
]
