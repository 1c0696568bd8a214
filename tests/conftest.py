import pytest

from sandlogix.config import TestingConfig
from sandlogix.extensions import db
from sandlogix.server import create_app

GRANITE = "30m³ de 0/40"
GRAVEL = "30m³ de 8/16"


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        LOGS_DIR = str(tmp_path / "logs")

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def priced_client(client):
    """Client with unit prices and a 10 000 fee default configured."""
    response = client.put('/api/settings', json={
        'granite_prices': {GRANITE: 220000, GRAVEL: 200000},
        'default_other_fees': 10000,
    })
    assert response.status_code == 200
    return client
