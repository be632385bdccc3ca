"""NGO registration, login and password reset."""
import secrets

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from aidconnect.errors import (
    DuplicateUser, ExternalServiceFailure, InvalidCredentials, InvalidResetToken,
    NotFound, ValidationFailure,
)
from aidconnect.models import NGOS, check_password, hash_password, new_ngo
from aidconnect.services.notification_service import notify_password_reset
from aidconnect.services.session_gate import admin_account, ngo_account

PRIVATE_FIELDS = ('password', 'resetNonce')
RESET_SALT = 'password-reset'


def public_ngo(record: dict) -> dict:
    return {k: v for k, v in record.items() if k not in PRIVATE_FIELDS}


def _same_email(record, email):
    return (record.get('email') or '').strip().lower() == email


def register(store, fullname, organization, email, username, password) -> dict:
    fullname = (fullname or '').strip()
    organization = (organization or '').strip()
    email = (email or '').strip().lower()
    username = (username or '').strip()
    if not (fullname and organization and email and username and password):
        raise ValidationFailure('Full name, organization, email, username and password are required.')

    if username == current_app.config.get('ADMIN_USERNAME'):
        raise DuplicateUser()

    with store.lock(NGOS):
        ngos = store.load_all(NGOS)
        if any(n.get('username') == username or _same_email(n, email) for n in ngos):
            raise DuplicateUser()
        record = new_ngo(fullname, organization, email, username, password)
        ngos.append(record)
        store.save_all(NGOS, ngos)

    current_app.logger.info(f'Registered NGO {username} ({organization})')
    return public_ngo(record)


def authenticate(store, username, password):
    """Return the Account for valid credentials; the admin is checked first."""
    username = (username or '').strip()
    admin = admin_account()
    if admin and username == admin.username:
        if check_password(current_app.config['ADMIN_PASSWORD_HASH'], password or ''):
            return admin
    else:
        ngo = store.find(NGOS, 'username', username)
        if ngo and check_password(ngo.get('password'), password or ''):
            return ngo_account(ngo)
    current_app.logger.warning(f'Failed login for {username!r}')
    raise InvalidCredentials()


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=RESET_SALT)


def _set_nonce(store, username, nonce, expected=None):
    """Store ``nonce`` on the NGO; with ``expected``, only if it still holds that value."""
    with store.lock(NGOS):
        ngos = store.load_all(NGOS)
        for ngo in ngos:
            if ngo.get('username') == username:
                if expected is not None and ngo.get('resetNonce') != expected:
                    return
                if nonce is None:
                    ngo.pop('resetNonce', None)
                else:
                    ngo['resetNonce'] = nonce
                store.save_all(NGOS, ngos)
                return


def request_password_reset(store, email) -> str:
    """Email a single-use reset link and return its token.

    The previous nonce is restored if the email cannot be sent.
    """
    email = (email or '').strip().lower()
    ngo = next((n for n in store.load_all(NGOS) if _same_email(n, email)), None)
    if not email or ngo is None:
        raise NotFound('Email not found')

    nonce = secrets.token_urlsafe(16)
    _set_nonce(store, ngo['username'], nonce)
    token = _serializer().dumps({'username': ngo['username'], 'nonce': nonce})
    reset_link = f"{current_app.config['BASE_URL'].rstrip('/')}/auth/reset-password/{token}"
    try:
        notify_password_reset(email, ngo.get('fullname', ''), reset_link)
    except ExternalServiceFailure:
        _set_nonce(store, ngo['username'], ngo.get('resetNonce'), expected=nonce)
        raise
    return token


def reset_password(store, token, new_password) -> dict:
    if not new_password:
        raise ValidationFailure('Password is required.')
    try:
        data = _serializer().loads(token, max_age=current_app.config['PASSWORD_RESET_MAX_AGE'])
    except SignatureExpired:
        raise InvalidResetToken('Reset link has expired')
    except BadSignature:
        raise InvalidResetToken()
    if not isinstance(data, dict) or not data.get('username') or not data.get('nonce'):
        raise InvalidResetToken()

    username = data['username']
    with store.lock(NGOS):
        ngos = store.load_all(NGOS)
        ngo = next((n for n in ngos if n.get('username') == username), None)
        if ngo is None:
            raise NotFound('Invalid reset link')
        if ngo.get('resetNonce') != data['nonce']:
            raise InvalidResetToken('Reset link has already been used')
        ngo['password'] = hash_password(new_password)
        ngo.pop('resetNonce', None)
        store.save_all(NGOS, ngos)

    current_app.logger.info(f'Password reset for {username}')
    return public_ngo(ngo)


def list_ngos(store) -> list:
    return [public_ngo(n) for n in store.load_all(NGOS)]


def delete_ngo(store, username) -> dict:
    removed = store.delete_where(NGOS, 'username', username)
    current_app.logger.info(f'NGO {username} deleted')
    return public_ngo(removed)


def delete_ngo_at(store, index) -> dict:
    removed = store.delete_at(NGOS, index)
    current_app.logger.info(f"NGO {removed.get('username')} deleted at position {index}")
    return public_ngo(removed)
