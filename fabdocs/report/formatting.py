from __future__ import annotations

import re
from datetime import date


_AMOUNT_PATTERN = re.compile(r'-?\d[\d,]*(?:\.\d+)?')


def _group_indian(integer_digits: str) -> str:
    if len(integer_digits) <= 3:
        return integer_digits
    head, tail = integer_digits[:-3], integer_digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def format_inr(value: float, *, decimals: int | None = None) -> str:
    """Lakh/crore digit grouping: 4464000 -> '44,64,000'.

    With ``decimals=None`` trailing zero fractions are dropped and at most
    three fraction digits are kept.
    """
    number = float(value or 0)
    sign = '-' if number < 0 else ''
    number = abs(number)
    if decimals is None:
        text = f'{number:.3f}'.rstrip('0').rstrip('.')
    else:
        text = f'{number:.{decimals}f}'
    integer_part, _, fraction = text.partition('.')
    grouped = _group_indian(integer_part)
    return f'{sign}{grouped}.{fraction}' if fraction else f'{sign}{grouped}'


def format_quantity(value: float) -> str:
    number = float(value or 0)
    if number.is_integer():
        return str(int(number))
    return f'{number:g}'


def format_display_date(value: date) -> str:
    return value.strftime('%d/%m/%Y')


def format_compact_date(value: date) -> str:
    return value.strftime('%d%m%Y')


def parse_amount(value: object) -> float:
    """Best-effort number from free text such as 'Rs. 1,20,000.50'."""
    match = _AMOUNT_PATTERN.search(str(value or ''))
    if match is None:
        return 0.0
    return float(match.group(0).replace(',', ''))
