"""Authentication routes."""
from flask import Blueprint, jsonify

from aidconnect.routes._helpers import form_data
from aidconnect.services import registration_service
from aidconnect.services.record_store import get_store
from aidconnect.services.session_gate import sign_in, sign_out

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = form_data()
    registration_service.register(
        get_store(),
        fullname=data.get('fullname'),
        organization=data.get('organization'),
        email=data.get('email'),
        username=data.get('username'),
        password=data.get('password'),
    )
    return jsonify({'success': True, 'message': 'Registration successful'})


@auth_bp.route('/login', methods=['POST'])
def login():
    data = form_data()
    account = registration_service.authenticate(get_store(), data.get('username'), data.get('password'))
    sign_in(account)
    return jsonify({'success': True, 'role': account.role, 'username': account.username})


@auth_bp.route('/logout')
def logout():
    sign_out()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    email = form_data().get('email')
    registration_service.request_password_reset(get_store(), email)
    return jsonify({'success': True, 'message': f'Password reset link sent to {email}'})


@auth_bp.route('/reset-password/<token>', methods=['POST'])
def reset_password(token):
    registration_service.reset_password(get_store(), token, form_data().get('password'))
    return jsonify({'success': True, 'message': 'Password reset successful'})
