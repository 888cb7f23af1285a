from flask import Blueprint, request, jsonify
from ..auth import require_capability
from ..config import BillingConfig
from ..models import Unit
from ..services.occupancy import list_vacant
from ..services.records import create_unit, update_unit

units_bp = Blueprint('units', __name__)


@units_bp.route('/units', methods=['POST'])
@require_capability('units')
def add_unit():
    data = request.get_json(silent=True) or {}
    unit = create_unit(data)
    return jsonify(unit.to_dict()), 201


@units_bp.route('/units', methods=['GET'])
@require_capability('units')
def list_units():
    status = request.args.get('status')
    query = Unit.query
    if status:
        if status not in BillingConfig.OCCUPANCY_STATUSES:
            return jsonify({'error': f'status must be one of {", ".join(BillingConfig.OCCUPANCY_STATUSES)}'}), 400
        query = query.filter_by(occupancy_status=status)
    units = query.order_by(Unit.house_number).all()
    return jsonify([u.to_dict() for u in units]), 200


@units_bp.route('/units/vacant', methods=['GET'])
@require_capability('units')
def vacant_units():
    return jsonify([u.to_dict() for u in list_vacant()]), 200


@units_bp.route('/units/<house_number>', methods=['GET'])
@require_capability('units')
def get_unit(house_number):
    unit = Unit.query.filter_by(house_number=house_number).first()
    if not unit:
        return jsonify({'error': 'Unit not found'}), 404
    return jsonify(unit.to_dict()), 200


@units_bp.route('/units/<house_number>', methods=['PATCH'])
@require_capability('units')
def edit_unit(house_number):
    data = request.get_json(silent=True) or {}
    unit = update_unit(house_number, data)
    return jsonify(unit.to_dict()), 200
