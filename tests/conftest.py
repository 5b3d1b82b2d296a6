import json
from datetime import datetime, timezone

import pytest
from flask_bcrypt import Bcrypt

from hut import create_app
from hut.config import TestingConfig, settings_from
from hut.datastore import JsonStore
from hut.models import empty_document, new_user
from hut.models.base import build_record
from hut.models.hotel import HOTEL_DEFAULTS, ROOM_DEFAULTS
from hut.services import MockPaymentGateway, build_services

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
PASSWORD = "correct-horse-9"
PASSWORD_HASH = Bcrypt().generate_password_hash(PASSWORD, 4).decode("utf-8")

LAGOS = "hotel-lagos-view"
ABUJA = "hotel-abuja-lodge"
STANDARD = "room-lagos-view-standard"
SUITE = "room-lagos-view-executive-suites"
ABUJA_STANDARD = "room-abuja-lodge-standard"

CUSTOMER = "user-ada"
SECOND_CUSTOMER = "user-bayo"
RISKY_CUSTOMER = "user-risky"
HOTEL_ADMIN = "user-lagos-admin"
OTHER_HOTEL_ADMIN = "user-abuja-admin"
PLATFORM_ADMIN = "user-owner"


def seed_document():
    data = empty_document()
    data["platform"]["bank_account"] = "0123456789"
    data["hotels"] = [
        build_record(
            HOTEL_DEFAULTS,
            id=LAGOS,
            name="Lagos View",
            location="Lagos",
            bank_account="1111111111",
            cancellation_policy="moderate",
            commission_rate=0.12,
            pickup_fee=10000,
        ),
        build_record(
            HOTEL_DEFAULTS,
            id=ABUJA,
            name="Abuja Lodge",
            location="Abuja",
            bank_account="2222222222",
            cancellation_policy="flexible",
            commission_rate=0.1,
        ),
    ]
    data["rooms"] = [
        build_record(ROOM_DEFAULTS, id=STANDARD, hotel_id=LAGOS, category="Standard", price_per_night=50000, total_units=2),
        build_record(
            ROOM_DEFAULTS, id=SUITE, hotel_id=LAGOS, category="Executive Suites", price_per_night=150000, total_units=1
        ),
        build_record(
            ROOM_DEFAULTS, id=ABUJA_STANDARD, hotel_id=ABUJA, category="Standard", price_per_night=40000, total_units=3
        ),
    ]
    data["users"] = [
        new_user(
            id=CUSTOMER,
            name="Ada Obi",
            email="ada@example.com",
            phone="08031234567",
            password_hash=PASSWORD_HASH,
        ),
        new_user(
            id=SECOND_CUSTOMER,
            name="Bayo Ade",
            email="bayo@example.com",
            phone="+2348091234567",
            password_hash=PASSWORD_HASH,
        ),
        new_user(
            id=RISKY_CUSTOMER,
            name="Guest",
            email="guest@mailinator.com",
            phone="12345",
            password_hash=PASSWORD_HASH,
        ),
        new_user(
            id=HOTEL_ADMIN,
            role="hotel_admin",
            name="Lagos Admin",
            email="admin@lagosview.ng",
            password_hash=PASSWORD_HASH,
            hotel_ids=[LAGOS],
        ),
        new_user(
            id=OTHER_HOTEL_ADMIN,
            role="hotel_admin",
            name="Abuja Admin",
            email="admin@abujalodge.ng",
            password_hash=PASSWORD_HASH,
            hotel_ids=[ABUJA],
        ),
        new_user(
            id=PLATFORM_ADMIN,
            role="platform_admin",
            name="Owner",
            email="owner@hut.ng",
            password_hash=PASSWORD_HASH,
        ),
    ]
    return data


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "hut-data.json"
    path.write_text(json.dumps(seed_document()), encoding="utf-8")
    return path


@pytest.fixture
def store(data_file):
    store = JsonStore(data_file)
    yield store
    store.close()


@pytest.fixture
def config():
    return settings_from(TestingConfig)


@pytest.fixture
def make_services(store, config):
    def factory(gateway=None):
        return build_services(config, store, gateway=gateway or MockPaymentGateway("instant"))

    return factory


@pytest.fixture
def services(make_services):
    return make_services()


@pytest.fixture
def make_app(data_file, monkeypatch):
    monkeypatch.setenv("FLASK_ENV", "testing")
    apps = []

    def factory(gateway=None):
        app = create_app(
            {"DATA_FILE_PATH": str(data_file), "TESTING": True},
            gateway=gateway or MockPaymentGateway("instant"),
        )
        apps.append(app)
        return app

    yield factory
    for app in apps:
        app.extensions["hut"].store.close()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email, password=PASSWORD):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()
