"""Aid request lifecycle: pending -> in-progress -> helped.

Known gaps kept from the legacy behaviour:
- re-claiming an in-progress request reassigns ``helpedBy`` without any
  ownership check;
- ``mark_helped`` does not verify that the caller's organization is the one
  in ``helpedBy``.
"""
from flask import current_app

from aidconnect.errors import InvalidTransition, NotFound, ValidationFailure
from aidconnect.models import (
    HELPED, IN_PROGRESS, NGOS, PENDING, STATUS_RANK, UPLOADS, new_aid_request,
)

REQUIRED_FIELDS = ('name', 'location', 'description')


def _status_rank(record):
    return STATUS_RANK.get(record.get('status'), len(STATUS_RANK))


def submit(store, fields, image, image_store) -> dict:
    """Validate, upload the photo, then append a new pending request.

    The record is only written after the upload succeeded, so a failed
    upload leaves the collection untouched.
    """
    values = {name: (fields.get(name) or '').strip() for name in REQUIRED_FIELDS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValidationFailure(f'Missing required field(s): {", ".join(missing)}')
    if image is None or not getattr(image, 'filename', None):
        raise ValidationFailure('No file received')

    image_url = image_store.upload(image)

    record = new_aid_request(values['name'], values['location'], values['description'], image_url)
    with store.lock(UPLOADS):
        records = store.load_all(UPLOADS)
        records.append(record)
        store.save_all(UPLOADS, records)
    current_app.logger.info(f"Aid request {record['id']} submitted at {record['location']}")
    return record


def _update(store, request_id, change):
    with store.lock(UPLOADS):
        records = store.load_all(UPLOADS)
        for record in records:
            if record.get('id') == request_id:
                break
        else:
            raise NotFound(f'Request {request_id} not found')
        if change(record):
            store.save_all(UPLOADS, records)
    return record


def claim(store, request_id: str, organization: str) -> dict:
    organization = (organization or '').strip()
    if not organization:
        raise ValidationFailure('Organization name is required')

    def change(record):
        if record.get('status') == HELPED:
            raise InvalidTransition('Request has already been helped')
        record['status'] = IN_PROGRESS
        record['helpedBy'] = organization
        return True

    record = _update(store, request_id, change)
    current_app.logger.info(f'Request {request_id} claimed by {organization}')
    return record


def mark_helped(store, request_id: str) -> dict:
    """Complete a claimed request; a pending request cannot skip the claim."""
    def change(record):
        status = record.get('status')
        if status == HELPED:
            return False
        if status != IN_PROGRESS:
            raise InvalidTransition('Request must be claimed before it is marked helped')
        record['status'] = HELPED
        return True

    record = _update(store, request_id, change)
    current_app.logger.info(f"Request {request_id} marked helped ({record.get('helpedBy')})")
    return record


def organization_of(store, username):
    ngo = store.find(NGOS, 'username', username)
    return ngo.get('organization') if ngo else None


def list_for(store, username: str) -> list:
    """Pending requests plus everything handled by the caller's organization."""
    organization = organization_of(store, username)
    visible = [
        record for record in store.load_all(UPLOADS)
        if record.get('status') == PENDING
        or (organization is not None and record.get('helpedBy') == organization)
    ]
    return sorted(visible, key=_status_rank)


def requests_helped_by(store, organization: str) -> list:
    if not organization:
        return []
    return [r for r in store.load_all(UPLOADS) if r.get('helpedBy') == organization]


def list_all(store) -> list:
    return store.load_all(UPLOADS)


def delete(store, request_id: str) -> dict:
    removed = store.delete_where(UPLOADS, 'id', request_id)
    current_app.logger.info(f'Request {request_id} deleted')
    return removed


def delete_at(store, index: int) -> dict:
    removed = store.delete_at(UPLOADS, index)
    current_app.logger.info(f"Request {removed.get('id')} deleted at position {index}")
    return removed
