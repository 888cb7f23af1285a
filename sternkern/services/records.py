# sternkern/services/records.py
"""Units and the per-unit side records: maintenance jobs, utility readings, inventory."""
import logging
from datetime import date

from ..config import BillingConfig
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import InventoryItem, Maintenance, Unit, Utility
from ..money import month_start, parse_date, to_money
from ..store import get_store
from .occupancy import UNOCCUPIED, set_occupancy

logger = logging.getLogger(__name__)


def _house_number(fields):
    house_number = str(fields.get('house_number') or '').strip()
    if not house_number:
        raise ValidationError('house_number is required')
    if len(house_number) > BillingConfig.HOUSE_NUMBER_MAX_LENGTH:
        raise ValidationError(f'house_number max length is {BillingConfig.HOUSE_NUMBER_MAX_LENGTH}')
    return house_number


def _int_field(fields, name, default):
    value = fields.get(name, default)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')
    if value < 0:
        raise ValidationError(f'{name} must not be negative')
    return value


def _require_unit(store, house_number):
    unit = store.query(Unit).filter_by(house_number=house_number).first()
    if not unit:
        raise NotFoundError(f'Unit {house_number} not found')
    return unit


# --- Units ---

def create_unit(fields, store=None):
    store = get_store(store)
    house_number = _house_number(fields)
    if store.query(Unit).filter_by(house_number=house_number).first():
        raise ConflictError(f'Unit {house_number} already exists')
    unit = Unit(
        house_number=house_number,
        bedrooms=_int_field(fields, 'bedrooms', 1),
        rent_amount=to_money(fields.get('rent_amount'), 'rent_amount'),
        occupancy_status=UNOCCUPIED
    )
    store.insert(unit)
    logger.info("Unit %s created", house_number)
    return unit


def update_unit(house_number, fields, store=None):
    """
    Edit bedrooms and rent. A direct occupancy_status value is a manual
    override: it is written, but logged as a consistency risk.
    """
    store = get_store(store)
    unit = _require_unit(store, house_number)
    status = fields.get('occupancy_status')
    if status and status not in BillingConfig.OCCUPANCY_STATUSES:
        raise ValidationError(f'occupancy_status must be one of {", ".join(BillingConfig.OCCUPANCY_STATUSES)}')
    current_status = unit.occupancy_status
    values = {}
    if 'bedrooms' in fields:
        values['bedrooms'] = _int_field(fields, 'bedrooms', unit.bedrooms)
    if 'rent_amount' in fields:
        values['rent_amount'] = to_money(fields['rent_amount'], 'rent_amount')
    if values:
        store.update(Unit, values, id=unit.id)
    if status and status != current_status:
        logger.warning("Manual occupancy override on %s: %s -> %s",
                       house_number, current_status, status)
        set_occupancy(house_number, status, store)
    return store.get(Unit, unit.id)


# --- Maintenance ---

def create_maintenance(fields, store=None):
    store = get_store(store)
    house_number = _house_number(fields)
    _require_unit(store, house_number)
    description = (fields.get('description') or '').strip()
    if not description:
        raise ValidationError('description is required')
    status = fields.get('status') or 'Pending'
    if status not in BillingConfig.MAINTENANCE_STATUSES:
        raise ValidationError(f'status must be one of {", ".join(BillingConfig.MAINTENANCE_STATUSES)}')
    job = Maintenance(
        house_number=house_number,
        description=description,
        status=status,
        contractor_name=fields.get('contractor_name'),
        cost=to_money(fields.get('cost'), 'cost'),
        date_of_maintenance=parse_date(fields.get('date_of_maintenance'), 'date_of_maintenance') or date.today()
    )
    store.insert(job)
    return job


def advance_maintenance(job_id, status, store=None):
    """Pending -> In Progress -> Completed; a job never moves backwards."""
    store = get_store(store)
    job = store.get(Maintenance, job_id)
    if not job:
        raise NotFoundError('Maintenance request not found')
    order = BillingConfig.MAINTENANCE_STATUSES
    if status not in order:
        raise ValidationError(f'status must be one of {", ".join(order)}')
    if order.index(status) < order.index(job.status):
        raise ValidationError(f'Cannot move maintenance from {job.status} back to {status}')
    if status != job.status:
        store.update(Maintenance, {'status': status}, id=job_id)
        logger.info("Maintenance %s: %s -> %s", job_id, job.status, status)
    return store.get(Maintenance, job_id)


# --- Utilities ---

def record_utility(fields, store=None):
    store = get_store(store)
    house_number = _house_number(fields)
    _require_unit(store, house_number)
    if not fields.get('billing_month'):
        raise ValidationError('billing_month is required')
    reading = Utility(
        house_number=house_number,
        tenant_name=fields.get('tenant_name'),
        billing_month=month_start(fields['billing_month']),
        **{f: to_money(fields.get(f), f) for f in ('electricity', 'water', 'garbage', 'other_utilities')}
    )
    store.insert(reading)
    return reading


# --- Inventory ---

def add_inventory_item(fields, store=None):
    store = get_store(store)
    name = (fields.get('item_name') or '').strip()
    if not name:
        raise ValidationError('item_name is required')
    house_number = fields.get('house_number') or None
    if house_number:
        _require_unit(store, house_number)
    price = fields.get('purchase_price')
    item = InventoryItem(
        item_name=name,
        item_category=fields.get('item_category'),
        house_number=house_number,
        quantity=_int_field(fields, 'quantity', 1),
        condition=fields.get('condition'),
        purchase_date=parse_date(fields.get('purchase_date'), 'purchase_date'),
        purchase_price=to_money(price, 'purchase_price') if price not in (None, '') else None,
        warranty_expiry=parse_date(fields.get('warranty_expiry'), 'warranty_expiry'),
        notes=fields.get('notes')
    )
    store.insert(item)
    return item
