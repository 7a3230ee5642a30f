import pytest

from orderflow import create_app
from orderflow.models.customer_model import CustomerModel
from orderflow.models.experience_model import ExperienceModel
from orderflow.models.order_model import OrderModel
from orderflow.models.product_model import ProductModel
from orderflow.services.order_service import OrderService

from tests.fakes import FakeDatabase, FakeRedis

API = "/api/v1"
TENANT_PATH = "CakeHouse_ownerexamplecom"

_database = FakeDatabase()
_redis = FakeRedis()


@pytest.fixture(scope="session")
def app():
    return create_app("testing", database=_database, redis=_redis)


@pytest.fixture(autouse=True)
def database():
    _database.reset()
    _redis.reset()
    return _database


@pytest.fixture
def redis():
    return _redis


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------- registries on a bare tenant ----------------

@pytest.fixture
def customers(database):
    return CustomerModel(database, "owner-1", TENANT_PATH)


@pytest.fixture
def products(database):
    return ProductModel(database, "owner-1", TENANT_PATH)


@pytest.fixture
def orders(database):
    return OrderModel(database, "owner-1", TENANT_PATH)


@pytest.fixture
def experiences(database):
    return ExperienceModel(database, "owner-1", TENANT_PATH)


@pytest.fixture
def order_service(customers, orders, experiences):
    return OrderService(customers, orders, experiences)


# ---------------- HTTP helpers ----------------

def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def sign_up(client, email="owner@example.com", password="secret123", business_name="Cake House"):
    response = client.post(f"{API}/auth/signup", json={
        "email": email,
        "password": password,
        "business_name": business_name,
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def sign_up_admin(client, email="admin@example.com", password="secret123"):
    response = client.post(f"{API}/auth/admin/signup", json={
        "email": email,
        "password": password,
        "signup_key": "test-admin-key",
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def onboard(client, token, business_name="Cake House", phone="01711000000"):
    response = client.post(
        f"{API}/business/register",
        json={"business_name": business_name, "phone": phone},
        headers=bearer(token),
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


@pytest.fixture
def business(client):
    """A signed-up, onboarded business: {"token", "user", "profile"}."""
    signed_up = sign_up(client)
    token = signed_up["access_token"]
    profile = onboard(client, token)
    return {"token": token, "user": signed_up["user"], "profile": profile}


@pytest.fixture
def admin(client):
    signed_up = sign_up_admin(client)
    return {"token": signed_up["access_token"], "user": signed_up["user"]}
