from flask import Blueprint, request, jsonify
from ..auth import require_capability, require_house_access, scope_to_house
from ..models import Payment
from ..services.billing import record_payment

payments_bp = Blueprint('payments', __name__)


@payments_bp.route('/payments', methods=['POST'])
@require_capability('payments')
def add_payment():
    data = request.get_json(silent=True) or {}
    require_house_access(str(data.get('house_number') or '').strip())
    payment = record_payment(data)
    return jsonify(payment.to_dict()), 201


@payments_bp.route('/payments', methods=['GET'])
@require_capability('payments')
def list_payments():
    query = scope_to_house(Payment.query, Payment)
    house_number = request.args.get('house_number')
    if house_number:
        query = query.filter_by(house_number=house_number)
    payments = query.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()
    return jsonify([p.to_dict() for p in payments]), 200
