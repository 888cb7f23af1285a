from flask import Blueprint, request, jsonify
from ..auth import login, logout, current_session, require_capability, create_user

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/auth/login', methods=['POST'])
def login_user():
    data = request.get_json(silent=True) or {}
    if not data.get('username') or not data.get('password'):
        return jsonify({'error': 'username and password are required'}), 400
    user_session = login(data['username'], data['password'])
    if user_session is None:
        return jsonify({'error': 'Invalid username or password'}), 401
    return jsonify(user_session.to_dict()), 200


@auth_bp.route('/auth/logout', methods=['POST'])
def logout_user():
    logout()
    return jsonify({'message': 'Logged out'}), 200


@auth_bp.route('/auth/me', methods=['GET'])
def who_am_i():
    user_session = current_session()
    if user_session is None:
        return jsonify({'error': 'Login required'}), 401
    return jsonify(user_session.to_dict()), 200


@auth_bp.route('/users', methods=['POST'])
@require_capability('settings')
def add_user():
    data = request.get_json(silent=True) or {}
    user = create_user(data)
    return jsonify(user.to_dict()), 201
