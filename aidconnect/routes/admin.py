"""Admin routes."""
from flask import Blueprint, jsonify

from aidconnect.services import export_service, registration_service, request_service
from aidconnect.services.record_store import get_store
from aidconnect.services.session_gate import admin_required

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/ngos')
@admin_required
def ngos():
    return jsonify(registration_service.list_ngos(get_store()))


@admin_bp.route('/requests')
@admin_required
def requests():
    return jsonify(request_service.list_all(get_store()))


@admin_bp.route('/ngos/<username>', methods=['DELETE'])
@admin_required
def delete_ngo(username):
    return jsonify({'ok': True, 'deleted': registration_service.delete_ngo(get_store(), username)})


@admin_bp.route('/ngos/at/<int:index>', methods=['DELETE'])
@admin_required
def delete_ngo_at(index):
    return jsonify({'ok': True, 'deleted': registration_service.delete_ngo_at(get_store(), index)})


@admin_bp.route('/requests/<request_id>', methods=['DELETE'])
@admin_required
def delete_request(request_id):
    return jsonify({'ok': True, 'deleted': request_service.delete(get_store(), request_id)})


@admin_bp.route('/requests/at/<int:index>', methods=['DELETE'])
@admin_required
def delete_request_at(index):
    return jsonify({'ok': True, 'deleted': request_service.delete_at(get_store(), index)})


@admin_bp.route('/export/ngos')
@admin_required
def export_ngos():
    return export_service.export_ngos(get_store())


@admin_bp.route('/export/requests')
@admin_required
def export_requests():
    return export_service.export_requests(get_store())
