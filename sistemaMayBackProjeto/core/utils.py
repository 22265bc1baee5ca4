import re
from decimal import Decimal


def get_client_ip(request):
    """Obtém IP real do cliente"""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


class Validadores:
    """Validações e formatações comuns reutilizáveis"""

    @staticmethod
    def apenas_digitos(valor):
        return re.sub(r'[^0-9]', '', valor or '')

    @staticmethod
    def validar_cnpj(cnpj):
        """Valida CNPJ"""
        cnpj = Validadores.apenas_digitos(cnpj)

        if len(cnpj) != 14 or cnpj == cnpj[0] * 14:
            return False

        # Cálculo dos dígitos verificadores
        pesos_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
        pesos_2 = [6] + pesos_1

        soma = sum(int(cnpj[i]) * pesos_1[i] for i in range(12))
        digito_1 = 11 - (soma % 11)
        if digito_1 >= 10:
            digito_1 = 0

        soma = sum(int(cnpj[i]) * pesos_2[i] for i in range(13))
        digito_2 = 11 - (soma % 11)
        if digito_2 >= 10:
            digito_2 = 0

        return cnpj[-2:] == f"{digito_1}{digito_2}"

    @staticmethod
    def validar_cpf(cpf):
        """Valida CPF"""
        cpf = Validadores.apenas_digitos(cpf)
        if len(cpf) != 11 or cpf == cpf[0] * 11:
            return False

        for i in range(9, 11):
            soma = sum(int(cpf[num]) * ((i + 1) - num) for num in range(0, i))
            digito = (soma * 10) % 11
            if digito == 10:
                digito = 0
            if digito != int(cpf[i]):
                return False
        return True

    @staticmethod
    def formatar_moeda(valor):
        """Formata valor para exibição em Real"""
        if valor is None:
            return "R$ 0,00"
        if isinstance(valor, str):
            try:
                valor = Decimal(valor)
            except ArithmeticError:
                return valor
        if isinstance(valor, (int, float, Decimal)):
            return f"R$ {valor:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
        return valor

    @staticmethod
    def formatar_cpf_cnpj(documento):
        """Aplica máscara de CPF (11 dígitos) ou CNPJ (14 dígitos)"""
        digitos = Validadores.apenas_digitos(documento)
        if len(digitos) == 11:
            return f"{digitos[:3]}.{digitos[3:6]}.{digitos[6:9]}-{digitos[9:]}"
        if len(digitos) == 14:
            return f"{digitos[:2]}.{digitos[2:5]}.{digitos[5:8]}/{digitos[8:12]}-{digitos[12:]}"
        return documento or ''

    @staticmethod
    def formatar_telefone(telefone):
        """Formata telefone para exibição"""
        telefone = Validadores.apenas_digitos(telefone)

        if len(telefone) == 11:
            return f"({telefone[:2]}) {telefone[2:7]}-{telefone[7:]}"
        elif len(telefone) == 10:
            return f"({telefone[:2]}) {telefone[2:6]}-{telefone[6:]}"
        return telefone

    @staticmethod
    def formatar_percentual(valor):
        """2.00 -> '2', 2.50 -> '2,5' (sem símbolo de %)"""
        if valor is None:
            return '0'
        valor = Decimal(str(valor)).normalize()
        if valor == valor.to_integral_value():
            return str(int(valor))
        return format(valor, 'f').replace('.', ',')
