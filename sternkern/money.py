from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date

from .errors import ValidationError

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value, field='amount', allow_negative=False):
    """Coerce a form or column value to a 2-place Decimal. Blank and None are 0."""
    if value is None:
        return ZERO
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
    if not amount.is_finite():
        raise ValidationError(f'{field} must be a number')
    if amount < 0 and not allow_negative:
        raise ValidationError(f'{field} must not be negative')
    return amount


def money_sum(values):
    total = ZERO
    for v in values:
        total += to_money(v, allow_negative=True)
    return total


def month_start(value=None):
    """First day of the month for a date or a YYYY-MM / YYYY-MM-DD string."""
    if value is None:
        value = date.today()
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 7:
                value = date.fromisoformat(text + '-01')
            else:
                value = date.fromisoformat(text[:10])
        except ValueError:
            raise ValidationError('billing_month must be YYYY-MM or YYYY-MM-DD')
    return value.replace(day=1)


def parse_date(value, field='date'):
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f'Invalid {field} format. Use YYYY-MM-DD')
