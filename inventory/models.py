from django.conf import settings
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Count, Q
from decimal import Decimal

from .codes import format_code


class AppQuerySet(models.QuerySet):

    def with_code_counts(self):
        """
        Annotate each app with its unused code count as `available_codes`.

        Meta.ordering is not applied to aggregated queries, so the name
        order is restated here.
        """
        return self.annotate(
            available_codes=Count('codes', filter=Q(codes__used=False), distinct=True)
        ).order_by('name', 'id')


class App(models.Model):
    """
    A sellable digital product with a price and a pool of redemption codes.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='apps',
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AppQuerySet.as_manager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def codes_available(self):
        annotated = getattr(self, 'available_codes', None)
        if annotated is not None:
            return annotated
        return self.codes.filter(used=False).count()

    @property
    def codes_used(self):
        return self.codes.filter(used=True).count()


class Code(models.Model):
    """
    A single-use redemption code. Stored as digits only.
    """

    app = models.ForeignKey(App, on_delete=models.CASCADE, related_name='codes')
    code = models.CharField(
        max_length=16,
        unique=True,
        validators=[RegexValidator(r'^\d{16}$', 'Codes must have exactly 16 digits')],
    )
    used = models.BooleanField(default=False, db_index=True)
    used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['app', 'used'], name='code_app_used_idx'),
        ]

    def __str__(self):
        return self.formatted

    @property
    def formatted(self):
        return format_code(self.code)


class Combo(models.Model):
    """A bundle of apps sold together at a fixed price"""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='combos',
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    apps = models.ManyToManyField(App, through='ComboItem', related_name='combos')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class ComboItem(models.Model):
    combo = models.ForeignKey(Combo, on_delete=models.CASCADE, related_name='combo_items')
    app = models.ForeignKey(App, on_delete=models.RESTRICT, related_name='combo_items')

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['combo', 'app'], name='unique_app_per_combo'),
        ]

    def __str__(self):
        return f"{self.combo.name} / {self.app.name}"
