# -*- coding: utf-8 -*-
"""
Fixtures compartidas: contenedor aislado en tmp_path, datos de prueba y cliente Flask.
"""
import os
import tempfile

# Logs de profiling fuera del árbol del proyecto (se lee al importar)
os.environ.setdefault('STOREFRONT_LOGS_DIR', tempfile.mkdtemp(prefix='storefront-logs-'))

import pytest
from werkzeug.security import generate_password_hash

from storefront.app_container import AppContainer, get_container
from storefront.main import create_app
from storefront.models import User


@pytest.fixture
def container(tmp_path):
    AppContainer.reset_instance()
    c = get_container(str(tmp_path), backend_configured=True)
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def offline_container(tmp_path):
    """Contenedor con el backend deshabilitado."""
    AppContainer.reset_instance()
    c = get_container(str(tmp_path), backend_configured=False)
    yield c
    AppContainer.reset_instance()


def _create_user(container, username, password='secret123', is_admin=False, **extra):
    record = container.user_repo.create_user({
        'username': username,
        'password': generate_password_hash(password),
        'email': f'{username}@example.com',
        'first_name': extra.get('first_name', ''),
        'last_name': extra.get('last_name', ''),
        'is_admin': is_admin,
    })
    return User.from_dict(record)


@pytest.fixture
def customer(container):
    return _create_user(container, 'minji', first_name='민지', last_name='김')


@pytest.fixture
def other_customer(container):
    return _create_user(container, 'jisoo')


@pytest.fixture
def admin(container):
    return _create_user(container, 'admin', password='admin1234', is_admin=True)


@pytest.fixture
def products(container):
    """
    1: pastel con 2 unidades
    2: galleta agotada
    3: pan bajo pedido (sin inventario)
    4: producto retirado
    """
    repo = container.product_repo
    return {
        'cake': repo.save_product({'id': 1, 'name': 'Cake', 'name_ko': '딸기 케이크', 'base_price': 32000, 'stock': 2}),
        'cookie': repo.save_product({'id': 2, 'name': 'Cookie', 'name_ko': '쿠키', 'base_price': 3000, 'stock': 0}),
        'bread': repo.save_product({'id': 3, 'name': 'Bread', 'name_ko': '식빵', 'base_price': 5000, 'stock': None}),
        'retired': repo.save_product({'id': 4, 'name': 'Old', 'name_ko': '단종', 'base_price': 1000,
                                      'stock': 10, 'is_available': False}),
    }


@pytest.fixture
def app(container):
    flask_app = create_app(container)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def login(client):
    def _login(username, password='secret123'):
        r = client.post('/api/auth/login', json={'username': username, 'password': password})
        assert r.status_code == 200, r.get_json()
        return r.get_json()
    return _login
