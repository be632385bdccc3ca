"""Record shapes for NGOs and aid requests."""
import uuid
from datetime import datetime, timezone

from werkzeug.security import generate_password_hash, check_password_hash

from aidconnect import db

NGOS = 'ngos'
UPLOADS = 'uploads'
COLLECTIONS = (NGOS, UPLOADS)

PENDING = 'pending'
IN_PROGRESS = 'in-progress'
HELPED = 'helped'

STATUS_RANK = {PENDING: 0, IN_PROGRESS: 1, HELPED: 2}

NGO_PUBLIC_FIELDS = ['fullname', 'organization', 'email', 'username']
REQUEST_EXPORT_FIELDS = ['name', 'location', 'description', 'timestamp', 'status', 'helpedBy']


class StoredRecord(db.Model):
    """One record of a collection, used by the sql record store."""
    __tablename__ = 'stored_record'

    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(32), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    body = db.Column(db.JSON, nullable=False)

    def __repr__(self):
        return f'<StoredRecord {self.collection}[{self.position}]>'


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def check_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def new_ngo(fullname, organization, email, username, password):
    return {
        'fullname': fullname,
        'organization': organization,
        'email': email,
        'username': username,
        'password': hash_password(password),
    }


def new_aid_request(name, location, description, image_url):
    return {
        'id': str(uuid.uuid4()),
        'name': name,
        'location': location,
        'description': description,
        'imageUrl': image_url,
        'timestamp': utc_timestamp(),
        'status': PENDING,
        'helpedBy': '',
    }
