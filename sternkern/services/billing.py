# sternkern/services/billing.py
"""
Per-unit balances and payment recording.

balance = previous_arrears + current_rent - latest_paid_amount

previous_arrears sums the outstanding amount_due of invoices billed for a
month strictly before the current one; the current month's invoice is this
cycle's bill, not a carry-over. current_rent is the unit's live rent, not
what was invoiced. Ties on the latest payment date go to the highest row id.
"""
import logging
from datetime import date

from ..config import BillingConfig
from ..errors import NotFoundError, ValidationError
from ..models import Invoice, Payment, Tenant, Unit
from ..money import ZERO, money_sum, month_start, parse_date, to_money
from ..store import get_store
from .occupancy import OCCUPIED
from .saga import Saga

logger = logging.getLogger(__name__)


def previous_arrears(invoices, today=None):
    cutoff = month_start(today or date.today())
    return money_sum(
        inv.amount_due for inv in invoices
        if inv.billing_month is not None
        and inv.billing_month < cutoff
        and to_money(inv.amount_due, allow_negative=True) > 0
    )


def latest_payment(payments):
    """Most recent payment by date; the highest id wins a same-day tie."""
    dated = [p for p in payments if p.payment_date is not None]
    if not dated:
        return None
    return max(dated, key=lambda p: (p.payment_date, p.id or 0))


def compute_balances(today=None, store=None):
    """One row per Occupied unit, ordered by house number."""
    store = get_store(store)
    today = today or date.today()
    missing = BillingConfig.MISSING_FIELD

    units = store.query(Unit).filter_by(occupancy_status=OCCUPIED) \
                             .order_by(Unit.house_number) \
                             .all()
    houses = [u.house_number for u in units]
    if not houses:
        return []

    tenants = store.query(Tenant).filter(Tenant.house_number.in_(houses)) \
                                 .order_by(Tenant.id).all()
    payments = store.query(Payment).filter(Payment.house_number.in_(houses)).all()
    invoices = store.query(Invoice).filter(Invoice.house_number.in_(houses)).all()

    tenant_by_house = {}
    for t in tenants:
        tenant_by_house.setdefault(t.house_number, t)
    payments_by_house, invoices_by_house = {}, {}
    for p in payments:
        payments_by_house.setdefault(p.house_number, []).append(p)
    for inv in invoices:
        invoices_by_house.setdefault(inv.house_number, []).append(inv)

    rows = []
    for unit in units:
        tenant = tenant_by_house.get(unit.house_number)
        latest = latest_payment(payments_by_house.get(unit.house_number, []))
        arrears = previous_arrears(invoices_by_house.get(unit.house_number, []), today)
        current_rent = to_money(unit.rent_amount, allow_negative=True)
        latest_amount = to_money(latest.amount_paid, allow_negative=True) if latest else ZERO
        if tenant is None:
            logger.warning("Occupied unit %s has no tenant row", unit.house_number)
        rows.append({
            'house_number': unit.house_number,
            'tenant_name': tenant.tenant_name if tenant and tenant.tenant_name else missing,
            'contact': tenant.contact_number if tenant and tenant.contact_number else missing,
            'previous_arrears': arrears,
            'current_rent': current_rent,
            'latest_paid_amount': latest_amount,
            'latest_payment_method': latest.payment_method if latest else missing,
            'balance': arrears + current_rent - latest_amount
        })
    return rows


def record_payment(fields, store=None):
    """
    Append a payment. When it names an invoice of the same house, the
    invoice is marked Paid once its linked payments cover total_due.
    amount_due is never changed here; balances subtract the latest payment.
    """
    store = get_store(store)
    house_number = str(fields.get('house_number') or '').strip()
    if not house_number:
        raise ValidationError('house_number is required')
    method = fields.get('payment_method')
    if method not in BillingConfig.PAYMENT_METHODS:
        raise ValidationError(f'payment_method must be one of {", ".join(BillingConfig.PAYMENT_METHODS)}')
    amount = to_money(fields.get('amount_paid'), 'amount_paid')
    if amount <= 0:
        raise ValidationError('amount_paid must be greater than zero')
    payment_date = parse_date(fields.get('payment_date'), 'payment_date') or date.today()

    invoice = None
    invoice_label = fields.get('invoice_id') or None
    if invoice_label:
        invoice = store.query(Invoice).filter_by(invoice_id=invoice_label).first()
        if not invoice:
            raise NotFoundError(f'Invoice {invoice_label} not found')
        if invoice.house_number != house_number:
            raise ValidationError(f'Invoice {invoice_label} belongs to unit {invoice.house_number}, not {house_number}')

    tenant_name = fields.get('tenant_name')
    if not tenant_name:
        tenant = store.query(Tenant).filter_by(house_number=house_number).first()
        tenant_name = tenant.tenant_name if tenant else None

    payment = Payment(
        tenant_name=tenant_name,
        house_number=house_number,
        amount_paid=amount,
        payment_method=method,
        invoice_id=invoice_label,
        payment_date=payment_date
    )
    if invoice is None:
        store.insert(payment)
        logger.info("Payment of %s %s recorded for %s", BillingConfig.CURRENCY, amount, house_number)
        return payment

    invoice_pk = invoice.id
    already_paid = money_sum(
        p.amount_paid for p in store.query(Payment).filter_by(invoice_id=invoice_label).all()
    )
    covered = already_paid + amount >= to_money(invoice.total_due, allow_negative=True)
    if not covered or invoice.payment_status == 'Paid':
        store.insert(payment)
        logger.info("Payment of %s %s recorded against %s",
                    BillingConfig.CURRENCY, amount, invoice_label)
        return payment

    saga = Saga(f'Record payment for {house_number} against {invoice_label}')
    saga.step('insert payment',
              lambda: store.insert(payment),
              lambda: store.delete(Payment, id=payment_id))
    payment_id = payment.id
    saga.step(f'mark {invoice_label} Paid',
              lambda: store.update(Invoice, {'payment_status': 'Paid'}, id=invoice_pk))
    logger.info("Payment of %s %s settles %s", BillingConfig.CURRENCY, amount, invoice_label)
    return payment


def mark_overdue_invoices(today=None, store=None):
    """Unpaid invoices from before this month that still owe money become Overdue."""
    store = get_store(store)
    cutoff = month_start(today or date.today())
    ids = [inv.id for inv in store.query(Invoice).filter(
        Invoice.billing_month < cutoff,
        Invoice.amount_due > 0,
        Invoice.payment_status == 'Unpaid'
    ).all()]
    if not ids:
        return 0
    for pk in ids:
        store.update(Invoice, {'payment_status': 'Overdue'}, id=pk)
    logger.info("%d invoice(s) marked Overdue", len(ids))
    return len(ids)
