from django.db import models


class Marca(models.Model):
    nome = models.CharField(max_length=100, unique=True)

    class Meta:
        verbose_name = "Marca"
        verbose_name_plural = "Marcas"
        ordering = ['nome']

    def __str__(self):
        return self.nome


class Veiculo(models.Model):
    STATUS_CHOICES = [
        ('disponivel', 'Disponível'),
        ('reservado', 'Reservado'),
        ('vendido', 'Vendido'),
        ('consignado', 'Consignado'),
    ]

    marca = models.ForeignKey(Marca, on_delete=models.PROTECT, related_name='veiculos')
    modelo = models.CharField(max_length=100)
    ano = models.CharField('Ano Fabricação/Modelo', max_length=9)
    cor = models.CharField(max_length=50, blank=True)
    km = models.PositiveIntegerField('Quilometragem', default=0)
    preco = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    placa = models.CharField(max_length=8, blank=True)
    renavam = models.CharField('RENAVAM', max_length=11, blank=True)
    chassi = models.CharField(max_length=17, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='disponivel')

    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Veículo"
        verbose_name_plural = "Veículos"
        ordering = ['-data_criacao']

    def __str__(self):
        return self.resumo

    @property
    def resumo(self):
        """'Marca Modelo Ano', como exibido na tela de assinatura"""
        return f"{self.marca.nome} {self.modelo} {self.ano}"
