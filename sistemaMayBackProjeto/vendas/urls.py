from django.urls import path
from . import views

app_name = 'vendas'

urlpatterns = [
    path('api/sem-contrato/', views.vendas_sem_contrato, name='vendas_sem_contrato'),
]
