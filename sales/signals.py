# sales/signals.py - SALE LIFECYCLE NOTIFICATIONS

from django.dispatch import Signal, receiver
import logging

from inventory.signals import warn_if_low_on_codes

logger = logging.getLogger(__name__)


# ============================================
# CUSTOM SIGNALS
# ============================================

# Sent after the creating transaction commits. kwargs: sale
sale_placed = Signal()

# Sent after codes are allocated and committed. kwargs: sale
sale_confirmed = Signal()

# kwargs: sale
sale_cancelled = Signal()


# ============================================
# ORDER PLACED
# ============================================

@receiver(sale_placed)
def log_sale_placed(sender, sale, **kwargs):
    """
    Entry point for the "order received" customer notification.
    """
    customer = sale.customer
    logger.info(
        f"[SALE PLACED] Sale #{sale.pk} | "
        f"Customer: {customer.name} ({customer.phone}) | "
        f"Total: {sale.total_price}"
    )


# ============================================
# ORDER CONFIRMED - CODES DELIVERED
# ============================================

@receiver(sale_confirmed)
def log_sale_confirmed(sender, sale, **kwargs):
    """
    Entry point for the "here are your codes" customer notification.
    """
    for item in sale.items.select_related('app', 'combo').prefetch_related('sale_codes__code'):
        logger.info(
            f"[SALE CONFIRMED] Sale #{sale.pk} | "
            f"Item: {item.product_name} x {item.quantity} | "
            f"Codes delivered: {item.sale_codes.count()}"
        )


@receiver(sale_confirmed)
def check_code_stock_after_confirmation(sender, sale, **kwargs):
    seen = set()
    for item in sale.items.select_related('app', 'combo'):
        for app in item.apps_to_allocate():
            if app.pk not in seen:
                seen.add(app.pk)
                warn_if_low_on_codes(app)


# ============================================
# ORDER CANCELLED
# ============================================

@receiver(sale_cancelled)
def log_sale_cancelled(sender, sale, **kwargs):
    logger.info(f"[SALE CANCELLED] Sale #{sale.pk} | Customer: {sale.customer.name}")
