"""Public aid request submission."""
from flask import Blueprint, jsonify, request

from aidconnect.services import request_service
from aidconnect.services.record_store import get_store
from aidconnect.services.storage_service import get_image_store

requests_bp = Blueprint('requests', __name__)


@requests_bp.route('', methods=['POST'])
def submit():
    record = request_service.submit(
        get_store(),
        request.form,
        request.files.get('file'),
        get_image_store(),
    )
    return jsonify({
        'message': 'File uploaded successfully',
        'id': record['id'],
        'imageUrl': record['imageUrl'],
    }), 201
