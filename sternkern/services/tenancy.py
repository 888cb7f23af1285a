# sternkern/services/tenancy.py
"""
Tenant <-> unit bindings.

The tenants and units tables are written separately, one commit per write, so
each operation runs as a Saga: the tenant write goes first, the occupancy
writes after it, and a failure part way through undoes the finished writes
before a ConsistencyError is raised.
"""
import logging

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Tenant, Unit
from ..store import get_store
from .occupancy import OCCUPIED, UNOCCUPIED, set_occupancy
from .saga import Saga

logger = logging.getLogger(__name__)

TENANT_FIELDS = ('tenant_name', 'contact_number', 'email')


def _get_unit(store, house_number):
    unit = store.query(Unit).filter_by(house_number=house_number).first()
    if not unit:
        raise NotFoundError(f'Unit {house_number} not found')
    return unit


def _require_vacant(store, house_number):
    unit = _get_unit(store, house_number)
    if unit.occupancy_status != UNOCCUPIED:
        raise ConflictError(f'Unit {house_number} is not vacant ({unit.occupancy_status})')
    return unit


def add_tenant(fields, house_number, store=None):
    """Onboard a tenant to a vacant unit: insert the tenant, then mark the unit Occupied."""
    store = get_store(store)
    name = (fields.get('tenant_name') or '').strip()
    if not name:
        raise ValidationError('tenant_name is required')
    if not house_number:
        raise ValidationError('house_number is required')
    _require_vacant(store, house_number)

    tenant = Tenant(
        tenant_name=name,
        contact_number=fields.get('contact_number'),
        email=fields.get('email'),
        house_number=house_number
    )
    saga = Saga(f'Add tenant {name} to {house_number}')
    saga.step('insert tenant',
              lambda: store.insert(tenant),
              lambda: store.delete(Tenant, id=tenant_id))
    tenant_id = tenant.id
    saga.step(f'mark {house_number} {OCCUPIED}',
              lambda: set_occupancy(house_number, OCCUPIED, store))
    logger.info("Tenant %s (%s) added to %s", name, tenant_id, house_number)
    return tenant


def shift_tenant(current_house_number, target_house_number, store=None):
    """Move the tenant at current_house_number into the vacant target unit."""
    store = get_store(store)
    if current_house_number == target_house_number:
        raise ValidationError('Target unit must differ from the current unit')
    tenant = store.query(Tenant).filter_by(house_number=current_house_number).first()
    if not tenant:
        raise NotFoundError(f'No tenant in unit {current_house_number}')
    source = _get_unit(store, current_house_number)
    _require_vacant(store, target_house_number)

    tenant_id = tenant.id
    source_status = source.occupancy_status
    saga = Saga(f'Shift tenant {tenant.tenant_name} {current_house_number} -> {target_house_number}')
    saga.step('move tenant record',
              lambda: store.update(Tenant, {'house_number': target_house_number}, id=tenant_id),
              lambda: store.update(Tenant, {'house_number': current_house_number}, id=tenant_id))
    saga.step(f'mark {current_house_number} {UNOCCUPIED}',
              lambda: set_occupancy(current_house_number, UNOCCUPIED, store),
              lambda: set_occupancy(current_house_number, source_status, store))
    saga.step(f'mark {target_house_number} {OCCUPIED}',
              lambda: set_occupancy(target_house_number, OCCUPIED, store))
    logger.info("Tenant %s shifted %s -> %s", tenant_id, current_house_number, target_house_number)
    return store.get(Tenant, tenant_id)


def vacate_tenant(house_number, store=None):
    """Remove the tenant bound to house_number and free the unit."""
    store = get_store(store)
    tenant = store.query(Tenant).filter_by(house_number=house_number).first()
    if not tenant:
        raise NotFoundError(f'No tenant in unit {house_number}')
    _get_unit(store, house_number)

    snapshot = {
        'id': tenant.id,
        'tenant_name': tenant.tenant_name,
        'contact_number': tenant.contact_number,
        'email': tenant.email,
        'house_number': tenant.house_number,
        'arrears': tenant.arrears
    }
    saga = Saga(f'Vacate tenant {tenant.tenant_name} from {house_number}')
    saga.step('delete tenant',
              lambda: store.delete(Tenant, id=snapshot['id']),
              lambda: store.insert(Tenant(**snapshot)))
    saga.step(f'mark {house_number} {UNOCCUPIED}',
              lambda: set_occupancy(house_number, UNOCCUPIED, store))
    logger.info("Tenant %s vacated %s", snapshot['id'], house_number)
    return {k: v for k, v in snapshot.items() if k != 'arrears'}
