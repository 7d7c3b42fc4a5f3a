# -*- coding: utf-8 -*-
"""
Autenticación: registro con hash, credenciales y contexto de sesión.
"""
from storefront.services.auth_service import (
    SESSION_ADMIN,
    SESSION_REDIRECT,
    SESSION_USER,
    SESSION_USER_ID,
    SessionContext,
)


def test_register_hashes_password(container):
    result = container.auth_service.register('haneul', 'pw123456', first_name='하늘')

    assert result['ok']
    assert result['toast']['title'] == '회원가입 완료'
    stored = container.user_repo.get_user_by_username('haneul')
    assert stored['password'] != 'pw123456'
    assert stored['password'].startswith(('scrypt:', 'pbkdf2:'))
    assert 'password' not in result['data']


def test_register_rejects_duplicates_and_short_passwords(container, customer):
    duplicate = container.auth_service.register('minji', 'pw123456')
    short = container.auth_service.register('newbie', '123')

    assert duplicate['toast']['description'] == '이미 사용 중인 아이디입니다.'
    assert short['error'] == 'validation'


def test_authenticate(container, customer):
    assert container.auth_service.authenticate('minji', 'secret123').id == customer.id
    assert container.auth_service.authenticate('minji', 'wrong') is None
    assert container.auth_service.authenticate('nobody', 'secret123') is None


def test_admin_login_only_for_admins(container, customer, admin):
    assert container.auth_service.admin_login('admin', 'admin1234').is_admin
    assert container.auth_service.admin_login('minji', 'secret123') is None


def test_restore_without_session(container):
    session = {SESSION_USER: {'id': 99}}
    ctx = SessionContext.restore(container.auth_service, session)

    assert not ctx.is_authenticated
    assert not ctx.is_loading
    assert SESSION_USER not in session


def test_restore_with_valid_session(container, customer):
    session = {SESSION_USER_ID: customer.id, SESSION_REDIRECT: '/cart'}
    ctx = SessionContext.restore(container.auth_service, session)

    assert ctx.user.id == customer.id
    assert ctx.redirect_path == '/cart'
    assert session[SESSION_USER]['name'] == '민지 김'


def test_restore_drops_mirror_when_remote_session_is_gone(container):
    session = {SESSION_USER_ID: 42, SESSION_USER: {'id': 42}, SESSION_ADMIN: True}
    ctx = SessionContext.restore(container.auth_service, session)

    assert ctx.user is None
    assert session == {}


def test_failed_login_leaves_state_unchanged(container, customer):
    session = {}
    ctx = SessionContext.restore(container.auth_service, session)

    assert ctx.login(container.auth_service, session, 'minji', 'wrong') is False
    assert ctx.user is None
    assert session == {}


def test_login_then_logout(container, customer):
    session = {}
    ctx = SessionContext.restore(container.auth_service, session)
    ctx.set_redirect_path(session, '/checkout')

    assert ctx.login(container.auth_service, session, 'minji', 'secret123')
    assert session[SESSION_USER_ID] == customer.id
    assert 'password' not in session[SESSION_USER]

    ctx.logout(container.auth_service, session)

    assert ctx.user is None
    assert ctx.redirect_path is None
    assert session == {}


def test_admin_status(container, customer, admin):
    service = container.auth_service
    assert service.admin_status({}, customer) is False
    assert service.admin_status({}, admin) is True
    assert service.admin_status({SESSION_ADMIN: True}) is True
