# sternkern/services/reports.py
import json
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from ..models import Invoice, Maintenance, Payment, Tenant, Unit
from ..money import ZERO, money_sum, month_start
from ..store import get_store
from .billing import compute_balances
from .occupancy import OCCUPIED

logger = logging.getLogger(__name__)


def occupancy_rate(occupied, total):
    """Whole-number percentage, half rounded up; 0 when there are no units."""
    if not total:
        return 0
    rate = Decimal(occupied) * 100 / Decimal(total)
    return int(rate.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _next_month(first):
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def dashboard_summary(today=None, store=None):
    """
    Headline figures for the landlord dashboard. Arrears come from the
    recomputed balances, never from the cached tenant column.
    """
    store = get_store(store)
    today = today or date.today()
    start = month_start(today)
    end = _next_month(start)

    units = store.query(Unit).all()
    total_units = len(units)
    occupied_units = sum(1 for u in units if u.occupancy_status == OCCUPIED)
    payments = store.query(Payment).all()
    invoices = store.query(Invoice).filter(Invoice.payment_status != 'Paid').all()

    return {
        'total_units': total_units,
        'occupied_units': occupied_units,
        'vacant_units': max(total_units - occupied_units, 0),
        'occupancy_rate': occupancy_rate(occupied_units, total_units),
        'active_tenants': store.query(Tenant).filter(Tenant.house_number.isnot(None)).count(),
        'total_revenue': money_sum(p.amount_paid for p in payments),
        'monthly_revenue': money_sum(p.amount_paid for p in payments
                                     if p.payment_date and start <= p.payment_date < end),
        'outstanding_total': money_sum(inv.amount_due for inv in invoices),
        'computed_arrears': money_sum(row['balance'] for row in compute_balances(today, store)),
        'pending_maintenance': store.query(Maintenance).filter_by(status='Pending').count(),
        'overdue_invoices': sum(1 for inv in invoices
                                if inv.billing_month < start and (inv.amount_due or ZERO) > 0),
    }


def recent_activity(limit=6, store=None, scope=None):
    """
    Latest payments and maintenance updates merged newest first. scope, when
    given, narrows each query, e.g. to a tenant's own unit.
    """
    store = get_store(store)
    scope = scope or (lambda query, model: query)
    payments = scope(store.query(Payment), Payment) \
        .order_by(Payment.payment_date.desc(), Payment.id.desc()) \
        .limit(limit).all()
    jobs = scope(store.query(Maintenance), Maintenance) \
        .order_by(Maintenance.date_of_maintenance.desc(), Maintenance.id.desc()) \
        .limit(limit).all()
    items = [{
        'type': 'payment',
        'title': 'Payment received',
        'house_number': p.house_number,
        'amount': p.amount_paid,
        'date': p.payment_date
    } for p in payments]
    items += [{
        'type': 'maintenance',
        'title': 'Maintenance update',
        'house_number': m.house_number,
        'description': m.description,
        'status': m.status,
        'date': m.date_of_maintenance
    } for m in jobs]
    # stable sort keeps payments ahead of maintenance on the same day
    items.sort(key=lambda item: item['date'], reverse=True)
    for item in items[:limit]:
        item['date'] = item['date'].isoformat()
    return items[:limit]


# --- Export rows ---

def monthly_revenue_rows(store=None):
    store = get_store(store)
    totals = {}
    for p in store.query(Payment).all():
        if p.payment_date is None:
            continue
        key = p.payment_date.strftime('%Y-%m')
        totals[key] = totals.get(key, ZERO) + (p.amount_paid or ZERO)
    return [{'Month': month, 'Revenue': totals[month]} for month in sorted(totals)]


def tenant_statement_rows(store=None):
    store = get_store(store)
    payments = store.query(Payment).order_by(Payment.house_number, Payment.payment_date, Payment.id).all()
    return [{
        'House': p.house_number,
        'Tenant': p.tenant_name,
        'Date': p.payment_date,
        'Amount': p.amount_paid,
        'Method': p.payment_method,
        'Invoice': p.invoice_id
    } for p in payments]


def maintenance_cost_rows(store=None):
    store = get_store(store)
    jobs = store.query(Maintenance).order_by(Maintenance.date_of_maintenance, Maintenance.id).all()
    return [{
        'Date': m.date_of_maintenance,
        'House': m.house_number,
        'Description': m.description,
        'Contractor': m.contractor_name,
        'Status': m.status,
        'Cost': m.cost
    } for m in jobs]


def occupancy_rows(store=None):
    store = get_store(store)
    tenants = {}
    for t in store.query(Tenant).filter(Tenant.house_number.isnot(None)).order_by(Tenant.id).all():
        tenants.setdefault(t.house_number, t.tenant_name)
    return [{
        'House': u.house_number,
        'Bedrooms': u.bedrooms,
        'Rent': u.rent_amount,
        'Status': u.occupancy_status,
        'Tenant': tenants.get(u.house_number)
    } for u in store.query(Unit).order_by(Unit.house_number).all()]


EXPORTS = {
    'monthly_revenue.csv': monthly_revenue_rows,
    'tenant_statements.csv': tenant_statement_rows,
    'maintenance_costs.csv': maintenance_cost_rows,
    'occupancy_analysis.csv': occupancy_rows,
}


def _json_field(value):
    if isinstance(value, Decimal):
        # JSON number, no exponent, no trailing zeros: 1000.00 -> 1000, 12.50 -> 12.5
        return format(value.normalize(), 'f')
    if isinstance(value, date):
        return json.dumps(value.isoformat(), ensure_ascii=False)
    return json.dumps(value, ensure_ascii=False)


def to_csv(rows):
    """
    Header from the first row's keys, then one line per row with every field
    JSON-encoded. Lines are joined with a newline and there is no trailing one.
    """
    if not rows:
        return ''
    keys = list(rows[0].keys())
    logger.debug("CSV export: %d row(s), columns %s", len(rows), keys)
    lines = [','.join(keys)]
    for row in rows:
        lines.append(','.join(_json_field(row.get(k)) for k in keys))
    return '\n'.join(lines)
