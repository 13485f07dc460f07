"""Pytest configuration and fixtures shared by the service and API tests."""

import os

# Settings are read at import time; seed what the app needs before importing it.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from condo_parcels.database.config.connection_engine import create_connection_engine, init_db, metadata
from condo_parcels.database.daos.user_account_dao import UserAccountDao
from condo_parcels.database.entities import Building, Room, Staff, Tenant, UserAccount
from condo_parcels.database.helpers.transactionManagement import configure_session_factory


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean in-memory database for each test function.

    This fixture:
    1. Creates an in-memory SQLite engine
    2. Creates all tables
    3. Binds the `@transactional` session factory to it
    4. Drops all tables after the test completes
    """
    engine = create_connection_engine("sqlite://")
    init_db(engine)
    factory = configure_session_factory(engine)

    yield factory

    metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def directory(test_db):
    """Seed one building with two rooms, two tenants, an officer and an admin.

    `tenant_b` keeps a legacy plaintext password; every other account is hashed.
    Returns the ids the tests need.
    """
    account_dao = UserAccountDao()
    with test_db() as session:
        session.add_all([
            Building(building_id=1, building_code="A", building_name="Tower A"),
            Building(building_id=2, building_code="B", building_name="Tower B"),
        ])
        session.flush()
        session.add_all([
            Room(building_id=1, room_no="101", floor=1),
            Room(building_id=1, room_no="102", floor=1),
            Room(building_id=2, room_no="201", floor=2),
        ])
        session.flush()

        officer_user = account_dao.createUser(
            session, UserAccount(username="officer", password="officer-pass", role="OFFICER")
        )
        admin_user = account_dao.createUser(
            session, UserAccount(username="admin", password="admin-pass", role="ADMIN")
        )
        tenant_a_user = account_dao.createUser(
            session, UserAccount(username="tenant_a", password="tenant-a-pass", role="TENANT")
        )
        tenant_b_user = UserAccount(username="tenant_b", password="tenant-b-pass", role="TENANT")
        tenant_c_user = UserAccount(username="tenant_c", password="tenant-c-pass", role="TENANT")
        inactive_user = UserAccount(
            username="inactive", password="inactive-pass", role="OFFICER", status="INACTIVE"
        )
        orphan_user = UserAccount(username="orphan", password="orphan-pass", role="OFFICER")
        session.add_all([tenant_b_user, tenant_c_user, inactive_user, orphan_user])
        session.flush()

        officer = Staff(user_id=officer_user.user_id, full_name="Olivia Officer")
        admin = Staff(user_id=admin_user.user_id, full_name="Adam Admin")
        tenant_a = Tenant(
            user_id=tenant_a_user.user_id, building_id=1, room_no="101",
            full_name="Alice Tenant", phone="0800000001", email="alice@example.com",
        )
        tenant_b = Tenant(
            user_id=tenant_b_user.user_id, building_id=1, room_no="102", full_name="Bob Tenant",
        )
        tenant_c = Tenant(
            user_id=tenant_c_user.user_id, building_id=2, room_no="201", full_name="Carol Tenant",
        )
        session.add_all([officer, admin, tenant_a, tenant_b, tenant_c])
        session.commit()

        return {
            "officer_staff_id": officer.staff_id,
            "officer_user_id": officer_user.user_id,
            "admin_staff_id": admin.staff_id,
            "admin_user_id": admin_user.user_id,
            "tenant_a_id": tenant_a.tenant_id,
            "tenant_a_user_id": tenant_a_user.user_id,
            "tenant_b_id": tenant_b.tenant_id,
            "tenant_b_user_id": tenant_b_user.user_id,
            "tenant_c_id": tenant_c.tenant_id,
            "tenant_c_user_id": tenant_c_user.user_id,
            "orphan_user_id": orphan_user.user_id,
        }


@pytest.fixture(scope="function")
def client(directory):
    """HTTP client over the app, sharing the seeded in-memory database.

    Used without a context manager so the lifespan does not rebind the
    session factory.
    """
    from condo_parcels.main import app

    return TestClient(app)


@pytest.fixture(scope="function")
def auth_headers(client):
    """Return a function that logs a user in and builds the bearer header."""
    passwords = {
        "officer": "officer-pass",
        "admin": "admin-pass",
        "tenant_a": "tenant-a-pass",
        "tenant_b": "tenant-b-pass",
        "tenant_c": "tenant-c-pass",
        "orphan": "orphan-pass",
    }

    def _headers(username: str) -> dict:
        response = client.post("/auth/login", json={"username": username, "password": passwords[username]})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _headers
