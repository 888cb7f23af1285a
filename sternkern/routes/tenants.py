from flask import Blueprint, request, jsonify
from ..auth import require_capability
from ..models import Tenant
from ..services.tenancy import add_tenant, shift_tenant, vacate_tenant

tenants_bp = Blueprint('tenants', __name__)


@tenants_bp.route('/tenants', methods=['POST'])
@require_capability('tenants')
def onboard_tenant():
    data = request.get_json(silent=True) or {}
    if not data.get('tenant_name') or not data.get('house_number'):
        return jsonify({'error': 'tenant_name and house_number are required'}), 400
    tenant = add_tenant(data, data['house_number'])
    return jsonify(tenant.to_dict()), 201


@tenants_bp.route('/tenants', methods=['GET'])
@require_capability('tenants')
def list_tenants():
    tenants = Tenant.query.order_by(Tenant.tenant_name).all()
    return jsonify([t.to_dict() for t in tenants]), 200


@tenants_bp.route('/tenants/shift', methods=['POST'])
@require_capability('tenants')
def shift():
    data = request.get_json(silent=True) or {}
    required_fields = ['current_house_number', 'target_house_number']
    if not all(data.get(field) for field in required_fields):
        return jsonify({'error': 'current_house_number and target_house_number are required'}), 400
    tenant = shift_tenant(data['current_house_number'], data['target_house_number'])
    return jsonify(tenant.to_dict()), 200


@tenants_bp.route('/tenants/vacate', methods=['POST'])
@require_capability('tenants')
def vacate():
    data = request.get_json(silent=True) or {}
    if not data.get('house_number'):
        return jsonify({'error': 'house_number is required'}), 400
    return jsonify(vacate_tenant(data['house_number'])), 200
