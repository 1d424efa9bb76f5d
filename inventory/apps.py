from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """
    Configuration for the Inventory application.

    This app manages what the store sells:
    - Apps (digital products with a price)
    - Codes (single-use redemption codes, each tied to one app)
    - Combos (several apps sold together at a fixed price)
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'inventory'
    verbose_name = 'Apps & Codes'

    def ready(self):
        import inventory.signals  # noqa: F401
