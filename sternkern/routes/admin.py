from flask import Blueprint, jsonify
from ..auth import require_capability
from ..services.occupancy import find_occupancy_drift, reconcile_occupancy

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/admin/occupancy/drift', methods=['GET'])
@require_capability('settings')
def occupancy_drift():
    return jsonify(find_occupancy_drift()), 200


@admin_bp.route('/admin/occupancy/reconcile', methods=['POST'])
@require_capability('settings')
def occupancy_reconcile():
    changed = reconcile_occupancy()
    return jsonify({'reconciled': changed}), 200
