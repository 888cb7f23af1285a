# sternkern/services/invoicing.py
import logging
from datetime import date

from ..errors import DuplicateInvoiceError, NotFoundError, ValidationError
from ..models import Invoice, Tenant, Unit
from ..money import money_sum, month_start, to_money
from ..store import get_store

logger = logging.getLogger(__name__)

UTILITY_FIELDS = ('electricity', 'water', 'garbage', 'other_utilities')


def invoice_label(house_number, billing_month):
    return f"INV-{billing_month:%Y%m}-{house_number}"


def build_invoice(house_number, tenant_name, billing_month, rent_amount, utilities=None):
    """An unsaved Unpaid invoice; total_due and amount_due start equal."""
    utilities = utilities or {}
    charges = {field: to_money(utilities.get(field), field) for field in UTILITY_FIELDS}
    rent = to_money(rent_amount, 'rent_amount')
    total = money_sum([rent] + list(charges.values()))
    return Invoice(
        invoice_id=invoice_label(house_number, billing_month),
        house_number=house_number,
        tenant_name=tenant_name,
        billing_month=billing_month,
        rent_amount=rent,
        total_due=total,
        amount_due=total,
        payment_status='Unpaid',
        date_generated=date.today(),
        **charges
    )


def invoiced_houses(billing_month, store=None):
    store = get_store(store)
    rows = store.query(Invoice).with_entities(Invoice.house_number) \
                               .filter_by(billing_month=billing_month).all()
    return {r[0] for r in rows}


def generate_invoice(fields, store=None):
    """
    Single invoice for one house. Rent defaults to the unit's live rent and
    tenant_name to the tenant bound to the house; blank utilities are 0.
    """
    store = get_store(store)
    house_number = str(fields.get('house_number') or '').strip()
    if not house_number:
        raise ValidationError('house_number is required')
    if not fields.get('billing_month'):
        raise ValidationError('billing_month is required')
    billing_month = month_start(fields['billing_month'])

    unit = store.query(Unit).filter_by(house_number=house_number).first()
    if not unit:
        raise NotFoundError(f'Unit {house_number} not found')
    if house_number in invoiced_houses(billing_month, store):
        raise DuplicateInvoiceError(f'Unit {house_number} already has an invoice for {billing_month:%Y-%m}')

    rent = fields.get('rent_amount')
    if rent is None or (isinstance(rent, str) and not rent.strip()):
        rent = unit.rent_amount
    tenant_name = fields.get('tenant_name')
    if not tenant_name:
        tenant = store.query(Tenant).filter_by(house_number=house_number).first()
        tenant_name = tenant.tenant_name if tenant else None

    invoice = build_invoice(house_number, tenant_name, billing_month, rent, fields)
    store.insert(invoice)
    logger.info("Invoice %s generated (%s due)", invoice.invoice_id, invoice.total_due)
    return invoice


def generate_bulk_invoices(billing_month, store=None):
    """
    One invoice per tenant bound to a unit, at that unit's live rent with no
    utilities. Tenants without a unit and houses already invoiced for the
    month are skipped. An empty batch writes nothing.
    """
    store = get_store(store)
    if not billing_month:
        raise ValidationError('billing_month is required')
    billing_month = month_start(billing_month)

    tenants = store.query(Tenant).filter(Tenant.house_number.isnot(None)) \
                                 .order_by(Tenant.house_number, Tenant.id).all()
    rent_by_house = {u.house_number: u.rent_amount for u in store.query(Unit).all()}
    already = invoiced_houses(billing_month, store)

    batch = []
    for tenant in tenants:
        house = tenant.house_number
        if not house:
            continue
        if house in already:
            logger.info("Skipping %s: already invoiced for %s", house, billing_month.strftime('%Y-%m'))
            continue
        batch.append(build_invoice(house, tenant.tenant_name, billing_month, rent_by_house.get(house)))
        already.add(house)

    if not batch:
        logger.info("Bulk invoicing for %s: nothing to generate", billing_month.strftime('%Y-%m'))
        return []
    store.insert_many(batch)
    logger.info("Bulk invoicing for %s: %d invoice(s) generated", billing_month.strftime('%Y-%m'), len(batch))
    return batch
