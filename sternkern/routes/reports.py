from flask import Blueprint, request, jsonify, Response
from ..auth import current_session, require_capability, scope_to_house
from ..money import parse_date
from ..services.billing import compute_balances
from ..services.reports import EXPORTS, dashboard_summary, recent_activity, to_csv

reports_bp = Blueprint('reports', __name__)


@reports_bp.route('/reports/rent-data', methods=['GET'])
@require_capability('invoices')
def get_rent_data():
    as_of = parse_date(request.args.get('as_of'), 'as_of')
    user_session = current_session()
    rows = [r for r in compute_balances(as_of) if user_session.may_access_house(r['house_number'])]
    return jsonify(rows), 200


@reports_bp.route('/reports/dashboard', methods=['GET'])
@require_capability('dashboard')
def get_dashboard():
    as_of = parse_date(request.args.get('as_of'), 'as_of')
    return jsonify(dashboard_summary(as_of)), 200


@reports_bp.route('/reports/activity', methods=['GET'])
@require_capability('dashboard')
def get_activity():
    try:
        limit = int(request.args.get('limit', 6))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    if limit < 1:
        return jsonify({'error': 'limit must be positive'}), 400
    return jsonify(recent_activity(limit, scope=scope_to_house)), 200


@reports_bp.route('/reports/export/<filename>', methods=['GET'])
@require_capability('reports')
def export_report(filename):
    builder = EXPORTS.get(filename)
    if builder is None:
        return jsonify({'error': f'Unknown export. Choose one of {", ".join(sorted(EXPORTS))}'}), 404
    csv_data = to_csv(builder())
    headers = {
        'Content-Type': 'text/csv',
        'Content-Disposition': f'attachment; filename="{filename}"'
    }
    return Response(csv_data, headers=headers)
