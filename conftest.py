# conftest.py - shared fixtures and test-friendly settings

import os
from decimal import Decimal

import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "codestore.settings")


# --- Relax settings so requests are resilient in tests ------------------------
@pytest.fixture(autouse=True)
def _relaxed_test_settings(settings):
    settings.SECURE_SSL_REDIRECT = False
    settings.ALLOWED_HOSTS = ["*", "testserver", "localhost", "127.0.0.1"]
    settings.STORAGES = {
        "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
        "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
    }
    # Speed up password hashing in tests
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


# Throttle counters live in the cache; start every test from zero
@pytest.fixture(autouse=True)
def _clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


# --- Users & clients ------------------------------------------------------------
@pytest.fixture
def seller(db):
    from django.contrib.auth.models import User

    return User.objects.create_user(
        username="seller@example.com",
        email="seller@example.com",
        password="S3cure-pass!",
        first_name="Seller",
    )


@pytest.fixture
def other_seller(db):
    from django.contrib.auth.models import User

    return User.objects.create_user(
        username="other@example.com",
        email="other@example.com",
        password="S3cure-pass!",
        first_name="Other",
    )


@pytest.fixture
def store_admin(db):
    from django.contrib.auth.models import User

    user = User.objects.create_user(
        username="admin@example.com",
        email="admin@example.com",
        password="S3cure-pass!",
        first_name="Admin",
    )
    user.profile.role = "admin"
    user.profile.save()
    return user


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def client_for():
    from rest_framework.test import APIClient

    def make(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return make


@pytest.fixture
def auth_client(client_for, seller):
    return client_for(seller)


# --- Store data ---------------------------------------------------------------------
@pytest.fixture
def customer(seller):
    from customers.models import Customer

    return Customer.objects.create(
        owner=seller,
        name="Maria Silva",
        email="maria@example.com",
        phone="11987654321",
    )


@pytest.fixture
def make_app(seller):
    """Create an app with `codes` fresh codes, numbered from `start`."""
    from inventory.models import App, Code

    counter = {"next": 1000000000000000}

    def make(name="Game Pass", price=Decimal("50.00"), codes=0, owner=None):
        app = App.objects.create(owner=owner or seller, name=name, price=price)
        Code.objects.bulk_create([
            Code(app=app, code=str(counter["next"] + i)) for i in range(codes)
        ])
        counter["next"] += codes
        return app

    return make


@pytest.fixture
def app_with_codes(make_app):
    return make_app(name="Game Pass", price=Decimal("50.00"), codes=5)
