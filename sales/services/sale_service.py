"""
Sale workflow: create, confirm (code allocation), cancel, update, delete.

Every state change runs in a transaction with the sale row locked.
Notification signals are sent only after the transaction commits.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from inventory.models import Code
from sales.exceptions import (
    EmptySale,
    InsufficientCodes,
    SaleAlreadyConfirmed,
    SaleError,
    SaleNotPending,
)
from sales.models import Sale, SaleCode, SaleItem
from sales.signals import sale_cancelled, sale_confirmed, sale_placed

logger = logging.getLogger(__name__)


def _build_items(sale, items):
    """
    Create the SaleItem rows for `sale` from a list of dicts with keys
    `app` or `combo`, `quantity` and an optional `price` (defaults to the
    current price of the app or combo).
    """
    if not items:
        raise EmptySale()

    rows = []
    for line in items:
        app = line.get('app')
        combo = line.get('combo')
        if (app is None) == (combo is None):
            raise SaleError("Each item must reference exactly one app or one combo")

        product = app or combo
        if product.owner_id != sale.owner_id:
            raise SaleError(f"{product.name} does not belong to this store")

        quantity = int(line.get('quantity', 1))
        if quantity < 1:
            raise SaleError("Quantity must be at least 1")

        price = line.get('price')
        if price is None:
            price = product.price

        rows.append(SaleItem(sale=sale, app=app, combo=combo, quantity=quantity, price=Decimal(price)))

    SaleItem.objects.bulk_create(rows)
    return sum((row.subtotal for row in rows), Decimal('0.00'))


def _lock(sale):
    return Sale.objects.select_for_update().get(pk=sale.pk)


def create_sale(owner, customer, items, date=None):
    """Register a pending sale. No codes are touched until confirmation."""
    if customer.owner_id != owner.pk:
        raise SaleError("Customer does not belong to this store")

    with transaction.atomic():
        sale = Sale.objects.create(
            owner=owner,
            customer=customer,
            date=date or timezone.now(),
        )
        sale.total_price = _build_items(sale, items)
        sale.save(update_fields=['total_price', 'updated_at'])

        transaction.on_commit(lambda: sale_placed.send(sender=Sale, sale=sale))

    logger.info(
        f"[SALE CREATED] Sale #{sale.pk} | Customer: {customer.name} | "
        f"Items: {len(items)} | Total: {sale.total_price}"
    )
    return sale


def confirm_sale(sale):
    """
    Confirm a pending sale and allocate its codes.

    For each line, and for each app the line covers (the app itself or
    every app of the combo), the oldest `quantity` unused codes are marked
    used and linked to the line. If any app runs short the whole
    confirmation is rolled back and InsufficientCodes is raised.
    """
    with transaction.atomic():
        sale = _lock(sale)

        if sale.is_confirmed:
            raise SaleAlreadyConfirmed(sale)
        if not sale.is_pending:
            raise SaleNotPending(sale, action='be confirmed')

        items = list(sale.items.select_related('app', 'combo'))
        if not items:
            raise EmptySale()

        now = timezone.now()
        links = []

        for item in items:
            for app in item.apps_to_allocate():
                codes = list(
                    Code.objects.select_for_update()
                    .filter(app=app, used=False)
                    .order_by('created_at', 'id')[:item.quantity]
                )
                if len(codes) < item.quantity:
                    raise InsufficientCodes(app, item.quantity, len(codes))

                # Flag now so a later line for the same app cannot take them again
                Code.objects.filter(pk__in=[code.pk for code in codes]).update(used=True, used_at=now)
                links.extend(SaleCode(sale_item=item, code=code) for code in codes)

        SaleCode.objects.bulk_create(links)

        sale.status = Sale.STATUS_CONFIRMED
        sale.confirmed_at = now
        sale.save(update_fields=['status', 'confirmed_at', 'updated_at'])

        transaction.on_commit(lambda: sale_confirmed.send(sender=Sale, sale=sale))

    logger.info(f"[SALE CONFIRMED] Sale #{sale.pk} | Codes allocated: {len(links)}")
    return sale


def cancel_sale(sale):
    with transaction.atomic():
        sale = _lock(sale)
        if not sale.is_pending:
            raise SaleNotPending(sale, action='be cancelled')

        sale.status = Sale.STATUS_CANCELLED
        sale.cancelled_at = timezone.now()
        sale.save(update_fields=['status', 'cancelled_at', 'updated_at'])

        transaction.on_commit(lambda: sale_cancelled.send(sender=Sale, sale=sale))

    logger.info(f"[SALE CANCELLED] Sale #{sale.pk}")
    return sale


def update_sale(sale, customer=None, items=None, date=None):
    """
    Edit a pending sale. `items`, when given, replaces every line and the
    total is recalculated.
    """
    with transaction.atomic():
        sale = _lock(sale)
        if not sale.is_pending:
            raise SaleNotPending(sale, action='be edited')

        if customer is not None:
            if customer.owner_id != sale.owner_id:
                raise SaleError("Customer does not belong to this store")
            sale.customer = customer

        if date is not None:
            sale.date = date

        if items is not None:
            sale.items.all().delete()
            _build_items(sale, items)

        sale.total_price = sale.calculate_total()
        sale.save()

    logger.info(f"[SALE UPDATED] Sale #{sale.pk} | Total: {sale.total_price}")
    return sale


def delete_sale(sale):
    """
    Delete a sale and its lines. Codes it delivered stay used: they have
    already reached the customer.
    """
    with transaction.atomic():
        sale = _lock(sale)
        sale_id = sale.pk
        kept = SaleCode.objects.filter(sale_item__sale=sale).count()
        sale.delete()

    logger.info(f"[SALE DELETED] Sale #{sale_id} | Delivered codes kept used: {kept}")
    return kept
