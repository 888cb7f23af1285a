# sternkern/services/occupancy.py
import logging

from ..config import BillingConfig
from ..errors import NotFoundError, ValidationError
from ..models import Tenant, Unit
from ..store import get_store

logger = logging.getLogger(__name__)

OCCUPIED = 'Occupied'
UNOCCUPIED = 'Unoccupied'
UNDER_MAINTENANCE = 'Under Maintenance'


def set_occupancy(house_number, status, store=None):
    """Write occupancy_status for one unit. Single write, no tenant coordination."""
    if status not in BillingConfig.OCCUPANCY_STATUSES:
        raise ValidationError(f'occupancy_status must be one of {", ".join(BillingConfig.OCCUPANCY_STATUSES)}')
    store = get_store(store)
    count = store.update(Unit, {'occupancy_status': status}, house_number=house_number)
    if not count:
        raise NotFoundError(f'Unit {house_number} not found')
    logger.info("Unit %s marked %s", house_number, status)


def list_vacant(store=None):
    store = get_store(store)
    return store.query(Unit).filter_by(occupancy_status=UNOCCUPIED) \
                            .order_by(Unit.house_number.asc()) \
                            .all()


def list_occupied_house_numbers(store=None):
    """House numbers currently bound to a tenant row."""
    store = get_store(store)
    rows = store.query(Tenant).with_entities(Tenant.house_number) \
                              .filter(Tenant.house_number.isnot(None)) \
                              .distinct() \
                              .all()
    return sorted(r[0] for r in rows)


def find_occupancy_drift(store=None):
    """
    Units whose status disagrees with tenant presence.
    An Under Maintenance unit with no tenant is not drift.
    """
    store = get_store(store)
    bound = set(list_occupied_house_numbers(store))
    drift = []
    for unit in store.query(Unit).order_by(Unit.house_number).all():
        has_tenant = unit.house_number in bound
        if has_tenant and unit.occupancy_status != OCCUPIED:
            expected = OCCUPIED
        elif not has_tenant and unit.occupancy_status == OCCUPIED:
            expected = UNOCCUPIED
        else:
            continue
        drift.append({
            'house_number': unit.house_number,
            'occupancy_status': unit.occupancy_status,
            'expected_status': expected
        })
    return drift


def reconcile_occupancy(store=None):
    """Rewrite every drifting unit's status from tenant presence."""
    store = get_store(store)
    drift = find_occupancy_drift(store)
    for row in drift:
        logger.warning("Reconciling unit %s: %s -> %s",
                       row['house_number'], row['occupancy_status'], row['expected_status'])
        set_occupancy(row['house_number'], row['expected_status'], store)
    return drift
