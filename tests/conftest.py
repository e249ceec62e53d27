import os

# profiling off during tests: no logs/ directory in the working tree
os.environ.setdefault('POS_PROFILING', '0')

import pytest

from pos_system.app_container import AppContainer, get_container


@pytest.fixture
def container(tmp_path):
    AppContainer.reset_instance()
    c = get_container(str(tmp_path / 'data'))
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def composer(container):
    # plain dict plays the role of the Flask session
    return container.sale_composer({})


@pytest.fixture
def dairy(container):
    """Category 'Dairy' with Milk (index 1) and Cheese (index 2)."""
    container.category_service.create('Dairy')
    milk = container.item_service.create('Milk', '2.50', 'Dairy', 'liter')
    cheese = container.item_service.create('Cheese', 4, 'Dairy', 'kg')
    return milk, cheese


@pytest.fixture
def anonymous_client(container):
    """Client without a CSRF token."""
    from pos_system.main import app
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def client(anonymous_client):
    token = anonymous_client.get('/api/csrf').get_json()['csrf_token']
    anonymous_client.environ_base['HTTP_X_CSRF_TOKEN'] = token
    yield anonymous_client
