import io
import smtplib

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from aidconnect import create_app
from aidconnect.errors import ExternalServiceFailure
from config import Config

ADMIN_PASSWORD = 'adminpass'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    RECORD_STORE_BACKEND = 'memory'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD_HASH = generate_password_hash(ADMIN_PASSWORD)
    BASE_URL = 'http://aid.test'
    S3_BUCKET = 'aid-photos'


class FakeImageStore:
    def __init__(self):
        self.uploaded = []
        self.fail = False

    def upload(self, file):
        if self.fail:
            raise ExternalServiceFailure('Error uploading file')
        self.uploaded.append(file.filename)
        return f'https://aid-photos.s3.test/{len(self.uploaded)}/{file.filename}'


class Outbox(list):
    """Messages captured by the fake SMTP server."""
    fail = False


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions['image_store'] = FakeImageStore()
    return app


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def store(app):
    return app.extensions['record_store']


@pytest.fixture
def image_store(app):
    return app.extensions['image_store']


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    sent = Outbox()

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            if sent.fail:
                raise ConnectionRefusedError('SMTP server unavailable')

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self):
            pass

        def login(self, username, password):
            pass

        def send_message(self, msg):
            sent.append(msg)

    monkeypatch.setattr(smtplib, 'SMTP', FakeSMTP)
    return sent


@pytest.fixture
def photo():
    def make(filename='photo.jpg'):
        return FileStorage(stream=io.BytesIO(b'\xff\xd8fake-jpeg'), filename=filename,
                           content_type='image/jpeg')
    return make


@pytest.fixture
def register_ngo():
    def register(client, username, organization, email=None, password='secret'):
        return client.post('/auth/register', json={
            'fullname': f'{username} contact',
            'organization': organization,
            'email': email or f'{username}@example.org',
            'username': username,
            'password': password,
        })
    return register


@pytest.fixture
def login():
    def do_login(client, username, password='secret'):
        return client.post('/auth/login', json={'username': username, 'password': password})
    return do_login


@pytest.fixture
def plain_body():
    def read(msg):
        return msg.get_payload()[0].get_payload(decode=True).decode('utf-8')
    return read


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD
