"""NGO routes."""
from flask import Blueprint, jsonify
from flask_login import current_user

from aidconnect.errors import NotFound
from aidconnect.models import NGOS
from aidconnect.routes._helpers import form_data
from aidconnect.services import request_service
from aidconnect.services.record_store import get_store
from aidconnect.services.registration_service import public_ngo
from aidconnect.services.session_gate import ngo_required

ngo_bp = Blueprint('ngo', __name__)


@ngo_bp.route('/requests')
@ngo_required
def list_requests():
    return jsonify(request_service.list_for(get_store(), current_user.username))


@ngo_bp.route('/requests/<request_id>/claim', methods=['POST'])
@ngo_required
def claim_request(request_id):
    # The organization comes from the client, falling back to the caller's own.
    organization = form_data().get('ngoName') or current_user.organization
    record = request_service.claim(get_store(), request_id, organization)
    return jsonify({'ok': True, 'status': record['status'], 'helpedBy': record['helpedBy']})


@ngo_bp.route('/requests/<request_id>/helped', methods=['POST'])
@ngo_required
def mark_helped(request_id):
    record = request_service.mark_helped(get_store(), request_id)
    return jsonify({'ok': True, 'status': record['status']})


@ngo_bp.route('/profile')
@ngo_required
def profile():
    store = get_store()
    ngo = store.find(NGOS, 'username', current_user.username)
    if ngo is None:
        raise NotFound('NGO not found')
    return jsonify({
        'ngo': public_ngo(ngo),
        'requests': request_service.requests_helped_by(store, ngo.get('organization')),
    })
