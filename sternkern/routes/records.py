from flask import Blueprint, request, jsonify
from .. import db
from ..auth import require_capability, require_house_access, scope_to_house
from ..models import InventoryItem, Maintenance, Utility
from ..services.records import add_inventory_item, advance_maintenance, create_maintenance, record_utility

records_bp = Blueprint('records', __name__)


# --- Maintenance ---

@records_bp.route('/maintenance', methods=['POST'])
@require_capability('maintenance')
def add_maintenance():
    data = request.get_json(silent=True) or {}
    require_house_access(str(data.get('house_number') or '').strip())
    job = create_maintenance(data)
    return jsonify(job.to_dict()), 201


@records_bp.route('/maintenance', methods=['GET'])
@require_capability('maintenance')
def list_maintenance():
    query = scope_to_house(Maintenance.query, Maintenance)
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    jobs = query.order_by(Maintenance.date_of_maintenance.desc(), Maintenance.id.desc()).all()
    return jsonify([m.to_dict() for m in jobs]), 200


@records_bp.route('/maintenance/<int:id>', methods=['PATCH'])
@require_capability('maintenance')
def update_maintenance(id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'error': 'status is required'}), 400
    job = db.get_or_404(Maintenance, id)
    require_house_access(job.house_number)
    job = advance_maintenance(id, data['status'])
    return jsonify(job.to_dict()), 200


# --- Utilities ---

@records_bp.route('/utilities', methods=['POST'])
@require_capability('utilities')
def add_utility():
    data = request.get_json(silent=True) or {}
    reading = record_utility(data)
    return jsonify(reading.to_dict()), 201


@records_bp.route('/utilities', methods=['GET'])
@require_capability('utilities')
def list_utilities():
    readings = Utility.query.order_by(Utility.billing_month.desc(), Utility.house_number).all()
    return jsonify([u.to_dict() for u in readings]), 200


# --- Inventory ---

@records_bp.route('/inventory', methods=['POST'])
@require_capability('inventory')
def add_inventory():
    data = request.get_json(silent=True) or {}
    item = add_inventory_item(data)
    return jsonify(item.to_dict()), 201


@records_bp.route('/inventory', methods=['GET'])
@require_capability('inventory')
def list_inventory():
    items = InventoryItem.query.order_by(InventoryItem.item_name).all()
    return jsonify([i.to_dict() for i in items]), 200
