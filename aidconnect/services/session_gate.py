"""Session-backed caller identity and role checks."""
from functools import wraps

from flask import current_app
from flask_login import UserMixin, current_user, login_user, logout_user

from aidconnect.errors import Unauthorized
from aidconnect.models import NGOS
from aidconnect.services.record_store import get_store

ANONYMOUS = 'anonymous'
NGO = 'ngo'
ADMIN = 'admin'


class Account(UserMixin):
    def __init__(self, role: str, username: str, organization: str = None):
        self.role = role
        self.username = username
        self.organization = organization

    def get_id(self):
        return f'{self.role}:{self.username}'

    @property
    def is_ngo(self):
        return self.role == NGO

    @property
    def is_admin(self):
        return self.role == ADMIN

    def __repr__(self):
        return f'<Account {self.get_id()}>'


def admin_account():
    """The configured administrator, or None when admin login is disabled."""
    if not current_app.config.get('ADMIN_PASSWORD_HASH'):
        return None
    return Account(ADMIN, current_app.config['ADMIN_USERNAME'])


def ngo_account(record):
    return Account(NGO, record['username'], record.get('organization'))


def load_account(account_id):
    role, _, username = (account_id or '').partition(':')
    if role == ADMIN:
        admin = admin_account()
        if admin and admin.username == username:
            return admin
        return None
    if role == NGO:
        record = get_store().find(NGOS, 'username', username)
        return ngo_account(record) if record else None
    return None


def current_role() -> str:
    if not current_user.is_authenticated:
        return ANONYMOUS
    return current_user.role


def current_username():
    if not current_user.is_authenticated:
        return None
    return current_user.username


def sign_in(account):
    login_user(account)
    current_app.logger.info(f'Signed in {account.get_id()}')


def sign_out():
    if current_user.is_authenticated:
        current_app.logger.info(f'Signed out {current_user.get_id()}')
    logout_user()


ACCESS_MESSAGES = {
    NGO: 'NGO access required.',
    ADMIN: 'Admin access required.',
}


def role_required(role):
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            if current_role() != role:
                raise Unauthorized(ACCESS_MESSAGES[role])
            return f(*args, **kwargs)
        return wrapped
    return decorator


ngo_required = role_required(NGO)
admin_required = role_required(ADMIN)
