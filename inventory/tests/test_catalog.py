"""
Tests for the apps, codes and combos endpoints.
"""

from decimal import Decimal

import pytest

from inventory.models import App, Code, Combo
from sales.services import confirm_sale, create_sale

APPS_URL = "/api/inventory/apps/"
CODES_URL = "/api/inventory/codes/"
COMBOS_URL = "/api/inventory/combos/"


@pytest.mark.django_db
class TestAppModel:

    def test_codes_available_counts_unused_codes(self, make_app):
        app = make_app(codes=3)
        app.codes.filter(pk=app.codes.first().pk).update(used=True)

        assert app.codes_available == 2
        assert app.codes_used == 1
        assert App.objects.with_code_counts().get(pk=app.pk).available_codes == 2

    def test_code_formatted(self, make_app):
        app = make_app()
        code = Code.objects.create(app=app, code="1234567812345678")

        assert str(code) == "1234-5678-1234-5678"


@pytest.mark.django_db
class TestAppApi:

    def test_create_app(self, auth_client, seller):
        response = auth_client.post(APPS_URL, {"name": "Netflix", "price": "39.90"}, format="json")

        assert response.status_code == 201
        app = App.objects.get(pk=response.data["id"])
        assert app.owner == seller
        assert app.price == Decimal("39.90")

    def test_negative_price_rejected(self, auth_client):
        response = auth_client.post(APPS_URL, {"name": "Broken", "price": "-1"}, format="json")

        assert response.status_code == 400

    def test_list_annotated_and_scoped(self, auth_client, make_app, other_seller):
        make_app(name="Beta", codes=2)
        make_app(name="Alpha", codes=1)
        make_app(name="Hidden", codes=4, owner=other_seller)

        response = auth_client.get(APPS_URL)

        rows = response.data["results"]
        assert [row["name"] for row in rows] == ["Alpha", "Beta"]
        assert [row["codes_available"] for row in rows] == [1, 2]

    def test_list_sorted_by_name_regardless_of_creation_order(self, auth_client, make_app):
        for name in ("Zeta", "Beta", "Alpha", "Mid"):
            make_app(name=name, codes=1)

        response = auth_client.get(APPS_URL)

        assert [row["name"] for row in response.data["results"]] == ["Alpha", "Beta", "Mid", "Zeta"]

    def test_low_stock_filter(self, auth_client, make_app, settings):
        settings.CODESTORE_CONFIG = {**settings.CODESTORE_CONFIG, "LOW_CODES_THRESHOLD": 2}
        make_app(name="Plenty", codes=5)
        make_app(name="Few", codes=2)
        make_app(name="None")

        response = auth_client.get(APPS_URL, {"low_stock": "1"})

        assert [row["name"] for row in response.data["results"]] == ["Few", "None"]

    def test_update_price(self, auth_client, make_app):
        app = make_app()

        response = auth_client.patch(f"{APPS_URL}{app.pk}/", {"price": "12.00"}, format="json")

        assert response.status_code == 200
        app.refresh_from_db()
        assert app.price == Decimal("12.00")

    def test_delete_app_removes_its_codes(self, auth_client, make_app):
        app = make_app(codes=3)

        response = auth_client.delete(f"{APPS_URL}{app.pk}/")

        assert response.status_code == 204
        assert not Code.objects.exists()

    def test_delete_sold_app_refused(self, auth_client, seller, customer, app_with_codes):
        sale = create_sale(seller, customer, [{"app": app_with_codes, "quantity": 1}])
        confirm_sale(sale)

        response = auth_client.delete(f"{APPS_URL}{app_with_codes.pk}/")

        assert response.status_code == 400
        assert response.data["success"] is False
        assert App.objects.filter(pk=app_with_codes.pk).exists()

    def test_delete_app_in_combo_refused(self, auth_client, seller, make_app):
        app = make_app()
        combo = Combo.objects.create(owner=seller, name="Bundle", price=Decimal("10"))
        combo.combo_items.create(app=app)

        response = auth_client.delete(f"{APPS_URL}{app.pk}/")

        assert response.status_code == 400


@pytest.mark.django_db
class TestCodeApi:

    def test_filter_by_app_and_used(self, auth_client, make_app):
        first = make_app(name="First", codes=3)
        make_app(name="Second", codes=2)
        first.codes.filter(pk=first.codes.first().pk).update(used=True)

        response = auth_client.get(CODES_URL, {"app": first.pk, "used": "false"})

        assert response.data["count"] == 2
        assert all(row["app"] == first.pk and not row["used"] for row in response.data["results"])

    def test_non_numeric_app_filter_is_bad_request(self, auth_client, make_app):
        make_app(codes=1)

        response = auth_client.get(CODES_URL, {"app": "abc"})

        assert response.status_code == 400
        assert "app" in response.data

    def test_codes_of_other_sellers_hidden(self, client_for, other_seller, make_app):
        make_app(codes=2)

        response = client_for(other_seller).get(CODES_URL)

        assert response.data["count"] == 0


@pytest.mark.django_db
class TestComboApi:

    def test_create_combo(self, auth_client, make_app):
        first = make_app(name="First")
        second = make_app(name="Second")

        response = auth_client.post(COMBOS_URL, {
            "name": "Bundle",
            "price": "80.00",
            "app_ids": [first.pk, second.pk],
        }, format="json")

        assert response.status_code == 201
        assert response.data["app_count"] == 2
        assert {app["name"] for app in response.data["apps"]} == {"First", "Second"}

    def test_combo_needs_apps(self, auth_client):
        response = auth_client.post(COMBOS_URL, {"name": "Empty", "price": "1", "app_ids": []}, format="json")

        assert response.status_code == 400
        assert "app_ids" in response.data

    def test_repeated_app_rejected(self, auth_client, make_app):
        app = make_app()

        response = auth_client.post(COMBOS_URL, {
            "name": "Twice", "price": "1", "app_ids": [app.pk, app.pk],
        }, format="json")

        assert response.status_code == 400

    def test_other_sellers_app_rejected(self, client_for, other_seller, make_app):
        app = make_app()

        response = client_for(other_seller).post(COMBOS_URL, {
            "name": "Stolen", "price": "1", "app_ids": [app.pk],
        }, format="json")

        assert response.status_code == 400

    def test_replace_apps(self, auth_client, seller, make_app):
        first = make_app(name="First")
        second = make_app(name="Second")
        combo = Combo.objects.create(owner=seller, name="Bundle", price=Decimal("10"))
        combo.combo_items.create(app=first)

        response = auth_client.patch(f"{COMBOS_URL}{combo.pk}/", {"app_ids": [second.pk]}, format="json")

        assert response.status_code == 200
        assert list(combo.apps.values_list("name", flat=True)) == ["Second"]

    def test_delete_sold_combo_refused(self, auth_client, seller, customer, make_app):
        app = make_app(codes=1)
        combo = Combo.objects.create(owner=seller, name="Bundle", price=Decimal("10"))
        combo.combo_items.create(app=app)
        create_sale(seller, customer, [{"combo": combo, "quantity": 1}])

        response = auth_client.delete(f"{COMBOS_URL}{combo.pk}/")

        assert response.status_code == 400
        assert Combo.objects.filter(pk=combo.pk).exists()
