from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone

from customers.models import Customer
from inventory.models import App, Code
from sales.models import Sale


def _month_bounds(now):
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def dashboard_stats(owner, now=None):
    """
    Summary figures for the home screen of one seller.

    Monthly revenue counts pending and confirmed sales dated in the current
    calendar month (local time); cancelled sales are left out.
    """
    config = getattr(settings, 'CODESTORE_CONFIG', {})
    now = timezone.localtime(now or timezone.now())
    month_start, month_end = _month_bounds(now)

    sales = Sale.objects.filter(owner=owner)

    by_status = {status: 0 for status, _ in Sale.STATUS_CHOICES}
    for row in sales.order_by().values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    revenue = (
        sales.exclude(status=Sale.STATUS_CANCELLED)
        .filter(date__gte=month_start, date__lt=month_end)
        .aggregate(total=Sum('total_price'))['total']
    ) or Decimal('0.00')

    threshold = config.get('LOW_CODES_THRESHOLD', 5)
    low_stock = (
        App.objects.filter(owner=owner)
        .with_code_counts()
        .filter(available_codes__lte=threshold)
    )

    return {
        'total_customers': Customer.objects.filter(owner=owner).count(),
        'total_apps': App.objects.filter(owner=owner).count(),
        'available_codes': Code.objects.filter(app__owner=owner, used=False).count(),
        'sales_by_status': by_status,
        'total_sales': sum(by_status.values()),
        'monthly_revenue': revenue,
        'currency': config.get('CURRENCY', 'BRL'),
        'low_stock_apps': list(low_stock),
        'recent_sales': list(
            sales.select_related('customer')[:config.get('RECENT_SALES_LIMIT', 5)]
        ),
    }
