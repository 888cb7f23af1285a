from flask import Blueprint, request, jsonify
from ..auth import require_capability, require_staff, scope_to_house
from ..config import BillingConfig
from ..models import Invoice
from ..money import parse_date
from ..services.billing import mark_overdue_invoices
from ..services.invoicing import generate_invoice, generate_bulk_invoices

invoices_bp = Blueprint('invoices', __name__)


@invoices_bp.route('/invoices', methods=['POST'])
@require_capability('invoices')
def create_invoice():
    require_staff()
    data = request.get_json(silent=True) or {}
    invoice = generate_invoice(data)
    return jsonify(invoice.to_dict()), 201


@invoices_bp.route('/invoices/bulk', methods=['POST'])
@require_capability('invoices')
def create_bulk_invoices():
    require_staff()
    data = request.get_json(silent=True) or {}
    if not data.get('billing_month'):
        return jsonify({'error': 'billing_month is required'}), 400
    invoices = generate_bulk_invoices(data['billing_month'])
    return jsonify({'created': len(invoices), 'invoices': [i.to_dict() for i in invoices]}), 201


@invoices_bp.route('/invoices', methods=['GET'])
@require_capability('invoices')
def list_invoices():
    query = scope_to_house(Invoice.query, Invoice)
    house_number = request.args.get('house_number')
    status = request.args.get('status')
    if house_number:
        query = query.filter_by(house_number=house_number)
    if status:
        if status not in BillingConfig.PAYMENT_STATUSES:
            return jsonify({'error': f'status must be one of {", ".join(BillingConfig.PAYMENT_STATUSES)}'}), 400
        query = query.filter_by(payment_status=status)
    invoices = query.order_by(Invoice.billing_month.desc(), Invoice.house_number).all()
    return jsonify([i.to_dict() for i in invoices]), 200


@invoices_bp.route('/invoices/mark-overdue', methods=['POST'])
@require_capability('invoices')
def overdue():
    require_staff()
    as_of = parse_date(request.args.get('as_of'), 'as_of')
    return jsonify({'marked_overdue': mark_overdue_invoices(as_of)}), 200
