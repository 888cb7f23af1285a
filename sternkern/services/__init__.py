# services package

from .occupancy import set_occupancy, list_vacant, list_occupied_house_numbers
from .tenancy import add_tenant, shift_tenant, vacate_tenant
from .billing import compute_balances, record_payment
from .invoicing import generate_invoice, generate_bulk_invoices
from .reports import dashboard_summary, occupancy_rate, to_csv
