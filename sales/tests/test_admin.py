"""
Tests for the sale admin: inline lines are limited to the sale owner's
catalog and sales added through the admin announce themselves.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib import admin
from django.contrib.auth.models import User
from django.test import RequestFactory

from inventory.models import Combo
from sales.admin import SaleAdmin, SaleItemInline
from sales.models import Sale
from sales.signals import sale_placed


@pytest.fixture
def admin_request(db):
    request = RequestFactory().get("/admin/sales/sale/add/")
    request.user = User.objects.create_superuser("root", "root@example.com", "S3cure-pass!")
    return request


def item_data(**row):
    data = {
        "items-TOTAL_FORMS": "1",
        "items-INITIAL_FORMS": "0",
        "items-MIN_NUM_FORMS": "0",
        "items-MAX_NUM_FORMS": "1000",
        "items-0-quantity": "1",
        "items-0-price": "",
    }
    data.update({f"items-0-{key}": value for key, value in row.items()})
    return data


def build_formset(request, sale, obj=None, **row):
    inline = SaleItemInline(Sale, admin.site)
    FormSet = inline.get_formset(request, obj)
    return FormSet(item_data(**row), instance=sale, prefix="items")


@pytest.mark.django_db
class TestSaleItemInline:

    def test_own_app_accepted(self, admin_request, seller, customer, app_with_codes):
        sale = Sale(owner=seller, customer=customer)

        formset = build_formset(admin_request, sale, app=app_with_codes.pk)

        assert formset.is_valid(), formset.errors
        assert formset.forms[0].cleaned_data["price"] == Decimal("50.00")

    def test_other_sellers_app_refused_on_add(self, admin_request, seller, customer, make_app, other_seller):
        stranger_app = make_app(name="Stranger", owner=other_seller, codes=2)
        sale = Sale(owner=seller, customer=customer)

        formset = build_formset(admin_request, sale, app=stranger_app.pk)

        assert not formset.is_valid()
        assert "another seller" in str(formset.non_form_errors())

    def test_other_sellers_combo_refused_on_add(self, admin_request, seller, customer, other_seller):
        combo = Combo.objects.create(owner=other_seller, name="Theirs", price=Decimal("10.00"))
        sale = Sale(owner=seller, customer=customer)

        formset = build_formset(admin_request, sale, combo=combo.pk)

        assert not formset.is_valid()

    def test_choices_narrowed_when_editing(self, admin_request, seller, customer, make_app, other_seller):
        own_app = make_app(name="Mine")
        stranger_app = make_app(name="Stranger", owner=other_seller)
        sale = Sale.objects.create(owner=seller, customer=customer)

        formset = build_formset(admin_request, sale, obj=sale, app=stranger_app.pk)

        assert list(formset.form.base_fields["app"].queryset) == [own_app]
        assert not formset.is_valid()
        assert "app" in formset.forms[0].errors

    def test_narrowing_does_not_leak_into_next_formset(self, admin_request, seller, customer, make_app, other_seller):
        make_app(name="Mine")
        make_app(name="Stranger", owner=other_seller)
        sale = Sale.objects.create(owner=seller, customer=customer)
        inline = SaleItemInline(Sale, admin.site)

        inline.get_formset(admin_request, sale)
        fresh = inline.get_formset(admin_request, None)

        assert fresh.form.base_fields["app"].queryset.count() == 2


@pytest.mark.django_db
class TestSaleAdminSaveRelated:

    def _save(self, request, sale, change):
        model_admin = SaleAdmin(Sale, admin.site)
        form = SimpleNamespace(instance=sale, save_m2m=lambda: None)
        model_admin.save_related(request, form, [], change=change)

    def test_added_sale_sends_sale_placed(self, admin_request, seller, customer, django_capture_on_commit_callbacks):
        sale = Sale.objects.create(owner=seller, customer=customer)
        received = []

        def handler(sender, sale, **kwargs):
            received.append(sale.pk)

        sale_placed.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                self._save(admin_request, sale, change=False)
        finally:
            sale_placed.disconnect(handler)

        assert received == [sale.pk]

    def test_edited_sale_stays_quiet(self, admin_request, seller, customer, django_capture_on_commit_callbacks):
        sale = Sale.objects.create(owner=seller, customer=customer)
        received = []

        def handler(sender, sale, **kwargs):
            received.append(sale.pk)

        sale_placed.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                self._save(admin_request, sale, change=True)
        finally:
            sale_placed.disconnect(handler)

        assert received == []
