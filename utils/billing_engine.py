"""
Billing Engine - Motor de cálculo del cobro de checkout
SINGLE SOURCE OF TRUTH para horas usadas y monto a cobrar en el checkout
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

CENTS = Decimal("0.01")
SECONDS_PER_HOUR = 3600


def _safe_decimal(value, fallback: Decimal = Decimal("0")) -> Decimal:
    """Convierte a Decimal de forma segura"""
    if value is None:
        return fallback
    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (ValueError, TypeError, ArithmeticError):
        return fallback


def quantize_money(value) -> Decimal:
    return _safe_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_hours_used(check_in_time: datetime, check_out_time: datetime) -> int:
    """
    Horas enteras cobradas por una estadía: toda hora iniciada cuenta, mínimo 1.
    60 minutos exactos es 1 hora, 61 minutos son 2.
    """
    elapsed = (check_out_time - check_in_time).total_seconds()
    hours_used = math.ceil(elapsed / SECONDS_PER_HOUR)
    if hours_used <= 0:
        hours_used = 1
    return hours_used


def compute_total(
    hours_used: int,
    price,
    standard_hours: Optional[int],
    excess_hour_price=None,
) -> Decimal:
    """
    Monto a cobrar para una tarifa según las horas cobradas.

    - Tarifa con horas estándar (hours > 0): precio fijo, más excess_hour_price por
      cada hora que exceda la duración estándar si hay precio de exceso.
    - Tarifa solo por hora (hours == 0 con precio de exceso): hours_used x precio de exceso.
    - Nunca menos que el precio base cuando aplica una tarifa con horas estándar.
    """
    base_price = _safe_decimal(price)
    rate_hours = int(standard_hours or 0)
    excess = _safe_decimal(excess_hour_price) if excess_hour_price is not None else None

    total = base_price
    if rate_hours > 0 and hours_used > rate_hours and excess is not None and excess > 0:
        total = base_price + (hours_used - rate_hours) * excess
    elif rate_hours > 0:
        total = base_price
    elif rate_hours == 0 and excess is not None and excess > 0:
        total = hours_used * excess

    if rate_hours > 0 and total < base_price:
        total = base_price

    return quantize_money(total)


def compute_checkout_bill(
    check_in_time: datetime,
    check_out_time: datetime,
    price,
    standard_hours: Optional[int],
    excess_hour_price=None,
) -> Dict[str, Any]:
    """
    Returns:
        {"hours_used": int, "total_amount": Decimal, "excess_hours": int}
    """
    hours_used = compute_hours_used(check_in_time, check_out_time)
    total_amount = compute_total(hours_used, price, standard_hours, excess_hour_price)
    rate_hours = int(standard_hours or 0)
    return {
        "hours_used": hours_used,
        "total_amount": total_amount,
        "excess_hours": max(0, hours_used - rate_hours) if rate_hours > 0 else 0,
    }
