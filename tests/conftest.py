from urllib.parse import urlsplit

import pytest

from stockfolio.Init.main import create_app
from stockfolio.extensions import db


@pytest.fixture
def app():
    app = create_app("TestingConfig")
    yield app
    with app.app_context():
        db.drop_all()
    app.extensions["portfolio_store"].close()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username, password="secret123"):
    return client.post("/api/register", json={"username": username, "password": password})


def login(client, username, password="secret123"):
    return client.post("/api/login", json={"username": username, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, username, password="secret123"):
    register(client, username, password)
    return bearer(login(client, username, password).get_json()["token"])


@pytest.fixture
def alice(client):
    return signup(client, "alice")


@pytest.fixture
def bob(client):
    return signup(client, "bob")


class _Response:
    """The slice of requests.Response that PortfolioClient reads."""

    def __init__(self, resp):
        self._resp = resp
        self.status_code = resp.status_code
        self.content = resp.data
        self.text = resp.get_data(as_text=True)
        self.reason = resp.status.split(" ", 1)[1]

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("response body is not JSON")
        return data


class FlaskSession:
    """Routes PortfolioClient requests into a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        resp = self.test_client.open(
            path, method=method, json=json, query_string=params, headers=headers
        )
        return _Response(resp)
