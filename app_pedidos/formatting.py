# ==============================================================================
# FORMATO - Moneda y fechas en es-CO
# ==============================================================================

from datetime import datetime, timedelta
from typing import Optional

# Abreviaturas de mes en español (Colombia)
MESES_CORTOS = ['ene', 'feb', 'mar', 'abr', 'may', 'jun',
                'jul', 'ago', 'sept', 'oct', 'nov', 'dic']


def format_cop(value) -> str:
    """
    Formatea pesos colombianos sin decimales.

    Ejemplos:
        31000   -> "$ 31.000"
        1250000 -> "$ 1.250.000"
        -500    -> "-$ 500"
    """
    try:
        amount = int(round(float(value or 0)))
    except (TypeError, ValueError):
        amount = 0
    sign = '-' if amount < 0 else ''
    grouped = f"{abs(amount):,}".replace(',', '.')
    return f"{sign}$ {grouped}"


def short_date_label(value: datetime) -> str:
    """Etiqueta corta de día: '19 oct'."""
    return f"{value.day} {MESES_CORTOS[value.month - 1]}"


def format_datetime(value: Optional[datetime]) -> str:
    """Fecha y hora local para tickets: '19/10/2025 17:05'."""
    if value is None:
        return ''
    return value.astimezone().strftime('%d/%m/%Y %H:%M')


def local_now() -> datetime:
    """Hora local con zona horaria."""
    return datetime.now().astimezone()


def start_of_day(value: datetime) -> datetime:
    """Medianoche del día de `value` en su propia zona horaria."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def days_back(value: datetime, days: int) -> datetime:
    return value - timedelta(days=days)
