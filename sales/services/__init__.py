from .sale_service import (
    cancel_sale,
    confirm_sale,
    create_sale,
    delete_sale,
    update_sale,
)
from .dashboard_service import dashboard_stats

__all__ = [
    'cancel_sale',
    'confirm_sale',
    'create_sale',
    'dashboard_stats',
    'delete_sale',
    'update_sale',
]
