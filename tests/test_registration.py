import re

import pytest

from aidconnect.errors import (
    DuplicateUser, ExternalServiceFailure, InvalidCredentials, InvalidResetToken,
    NotFound, ValidationFailure,
)
from aidconnect.models import NGOS, check_password
from aidconnect.services import registration_service


@pytest.fixture
def registered(app_ctx, store):
    return registration_service.register(
        store, 'Asha Rao', 'Org1', 'Asha@Example.org ', 'org1user', 'secret')


def test_register_hashes_password_and_normalizes_email(registered, store):
    assert registered == {
        'fullname': 'Asha Rao',
        'organization': 'Org1',
        'email': 'asha@example.org',
        'username': 'org1user',
    }
    stored = store.load_all(NGOS)
    assert len(stored) == 1
    assert stored[0]['password'] != 'secret'
    assert check_password(stored[0]['password'], 'secret')


@pytest.mark.parametrize('username, email', [
    ('org1user', 'other@example.org'),
    ('someone', 'asha@example.org'),
    ('someone', 'ASHA@example.org'),
])
def test_duplicate_registration_rejected(registered, store, username, email):
    before = store.load_all(NGOS)
    with pytest.raises(DuplicateUser):
        registration_service.register(store, 'X', 'OrgX', email, username, 'pw')
    assert store.load_all(NGOS) == before


def test_admin_username_cannot_be_registered(app_ctx, store):
    with pytest.raises(DuplicateUser):
        registration_service.register(store, 'X', 'OrgX', 'x@example.org', 'admin', 'pw')
    assert store.load_all(NGOS) == []


def test_register_requires_all_fields(app_ctx, store):
    with pytest.raises(ValidationFailure):
        registration_service.register(store, 'X', '', 'x@example.org', 'xuser', 'pw')
    assert store.load_all(NGOS) == []


def test_authenticate_ngo(registered, store):
    account = registration_service.authenticate(store, 'org1user', 'secret')
    assert (account.role, account.username, account.organization) == ('ngo', 'org1user', 'Org1')


@pytest.mark.parametrize('username, password', [
    ('org1user', 'wrong'),
    ('nobody', 'secret'),
    ('admin', 'secret'),
])
def test_authenticate_rejects_bad_credentials(registered, store, username, password):
    with pytest.raises(InvalidCredentials):
        registration_service.authenticate(store, username, password)


def test_authenticate_admin_from_config(app_ctx, store, admin_password):
    account = registration_service.authenticate(store, 'admin', admin_password)
    assert (account.role, account.username) == ('admin', 'admin')


def test_admin_login_disabled_without_hash(app_ctx, store, admin_password):
    app_ctx.config['ADMIN_PASSWORD_HASH'] = None
    with pytest.raises(InvalidCredentials):
        registration_service.authenticate(store, 'admin', admin_password)


def test_password_reset_round_trip(registered, store, outbox, plain_body):
    token = registration_service.request_password_reset(store, 'asha@example.org')

    assert len(outbox) == 1
    assert outbox[0]['To'] == 'asha@example.org'
    assert f'http://aid.test/auth/reset-password/{token}' in plain_body(outbox[0])

    registration_service.reset_password(store, token, 'new-secret')
    registration_service.authenticate(store, 'org1user', 'new-secret')
    with pytest.raises(InvalidCredentials):
        registration_service.authenticate(store, 'org1user', 'secret')
    assert 'resetNonce' not in store.find(NGOS, 'username', 'org1user')


def test_reset_token_is_single_use(registered, store, outbox):
    token = registration_service.request_password_reset(store, 'asha@example.org')
    registration_service.reset_password(store, token, 'first')
    with pytest.raises(InvalidResetToken):
        registration_service.reset_password(store, token, 'second')


def test_newer_reset_link_replaces_older(registered, store, outbox, plain_body):
    old = registration_service.request_password_reset(store, 'asha@example.org')
    new = registration_service.request_password_reset(store, 'asha@example.org')
    assert re.search(r'/auth/reset-password/(\S+)', plain_body(outbox[1])).group(1) == new

    with pytest.raises(InvalidResetToken):
        registration_service.reset_password(store, old, 'first')
    registration_service.reset_password(store, new, 'second')


def test_expired_reset_token_rejected(app_ctx, registered, store, outbox):
    token = registration_service.request_password_reset(store, 'asha@example.org')
    app_ctx.config['PASSWORD_RESET_MAX_AGE'] = -1
    with pytest.raises(InvalidResetToken):
        registration_service.reset_password(store, token, 'new-secret')


@pytest.mark.parametrize('token', ['not-a-token', 'org1user'])
def test_forged_reset_token_rejected(registered, store, token):
    with pytest.raises(InvalidResetToken):
        registration_service.reset_password(store, token, 'new-secret')


def test_reset_for_deleted_ngo_not_found(registered, store, outbox):
    token = registration_service.request_password_reset(store, 'asha@example.org')
    registration_service.delete_ngo(store, 'org1user')
    with pytest.raises(NotFound):
        registration_service.reset_password(store, token, 'new-secret')


def test_reset_requires_password(registered, store, outbox):
    token = registration_service.request_password_reset(store, 'asha@example.org')
    with pytest.raises(ValidationFailure):
        registration_service.reset_password(store, token, '')


def test_reset_request_unknown_email(registered, store, outbox):
    with pytest.raises(NotFound):
        registration_service.request_password_reset(store, 'nobody@example.org')
    assert outbox == []


def test_reset_email_failure_leaves_no_token(registered, store, outbox):
    outbox.fail = True
    with pytest.raises(ExternalServiceFailure):
        registration_service.request_password_reset(store, 'asha@example.org')
    assert 'resetNonce' not in store.find(NGOS, 'username', 'org1user')


def test_email_failure_keeps_earlier_link_valid(registered, store, outbox):
    token = registration_service.request_password_reset(store, 'asha@example.org')
    outbox.fail = True
    with pytest.raises(ExternalServiceFailure):
        registration_service.request_password_reset(store, 'asha@example.org')
    registration_service.reset_password(store, token, 'new-secret')


def test_ngo_listing_and_deletes_hide_credentials(registered, store, outbox):
    registration_service.register(store, 'Ben', 'Org2', 'ben@example.org', 'org2user', 'pw')
    registration_service.request_password_reset(store, 'ben@example.org')

    listed = registration_service.list_ngos(store)
    assert [n['username'] for n in listed] == ['org1user', 'org2user']
    assert all('password' not in n and 'resetNonce' not in n for n in listed)

    assert registration_service.delete_ngo_at(store, 1) == listed[1]
    assert registration_service.delete_ngo(store, 'org1user') == listed[0]
    assert store.load_all(NGOS) == []


def test_mixed_case_stored_email_still_matches(app_ctx, store, outbox):
    store.save_all(NGOS, [{
        'fullname': 'Legacy', 'organization': 'OrgL', 'email': 'Legacy@Example.org',
        'username': 'legacy', 'password': 'hash',
    }])

    with pytest.raises(DuplicateUser):
        registration_service.register(store, 'X', 'OrgX', 'legacy@example.org', 'someone', 'pw')
    assert len(store.load_all(NGOS)) == 1

    registration_service.request_password_reset(store, 'LEGACY@example.org')
    assert len(outbox) == 1
    assert store.find(NGOS, 'username', 'legacy')['resetNonce']
