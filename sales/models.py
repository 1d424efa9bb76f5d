# sales/models.py

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal


class Sale(models.Model):
    """
    A customer order. Codes are only allocated once the sale is confirmed.

    Lifecycle: pending -> confirmed, or pending -> cancelled.
    """

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sales',
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.RESTRICT,
        related_name='sales',
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    date = models.DateTimeField(default=timezone.now, db_index=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-id']

    def __str__(self):
        return f"Sale #{self.pk} - {self.customer} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    @property
    def is_confirmed(self):
        return self.status == self.STATUS_CONFIRMED

    @property
    def is_cancelled(self):
        return self.status == self.STATUS_CANCELLED

    def calculate_total(self):
        return sum((item.subtotal for item in self.items.all()), Decimal('0.00'))

    def update_total(self):
        self.total_price = self.calculate_total()
        self.save(update_fields=['total_price', 'updated_at'])
        return self.total_price


class SaleItem(models.Model):
    """One line of a sale: either a single app or a combo, never both."""

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    app = models.ForeignKey(
        'inventory.App',
        on_delete=models.RESTRICT,
        related_name='sale_items',
        null=True,
        blank=True,
    )
    combo = models.ForeignKey(
        'inventory.Combo',
        on_delete=models.RESTRICT,
        related_name='sale_items',
        null=True,
        blank=True,
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
    )

    class Meta:
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(app__isnull=False, combo__isnull=True)
                    | Q(app__isnull=True, combo__isnull=False)
                ),
                name='sale_item_app_xor_combo',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='sale_item_quantity_positive',
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"

    def clean(self):
        if bool(self.app_id) == bool(self.combo_id):
            raise ValidationError("A sale item must reference exactly one app or one combo.")

    @property
    def product(self):
        return self.app if self.app_id else self.combo

    @property
    def product_name(self):
        product = self.product
        return product.name if product else ''

    @property
    def subtotal(self):
        return (self.price or Decimal('0.00')) * self.quantity

    def apps_to_allocate(self):
        """Apps that each need `quantity` codes when the sale is confirmed."""
        if self.app_id:
            return [self.app]
        return list(self.combo.apps.order_by('id'))


class SaleCode(models.Model):
    """A code delivered through a sale item. A code can be delivered once."""

    sale_item = models.ForeignKey(SaleItem, on_delete=models.CASCADE, related_name='sale_codes')
    code = models.OneToOneField(
        'inventory.Code',
        on_delete=models.RESTRICT,
        related_name='sale_code',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.code} -> sale #{self.sale_item.sale_id}"
