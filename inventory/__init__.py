"""
Inventory of sellable apps and their redemption codes.

MODELS:
- App: a digital product with a price and a pool of codes
- Code: a 16-digit, single-use redemption code tied to one app
- Combo: a bundle of apps sold at a fixed price

BUSINESS LOGIC:
  - Codes are stored digits-only and are unique across the whole store
  - A code is either unused or used; it becomes used when a sale is confirmed
  - Bulk imports skip codes repeated inside the batch or already stored

USAGE:
    from inventory.models import App
    from inventory.services import import_codes

    app = App.objects.create(owner=user, name="Game Pass", price=50)
    result = import_codes(app, "1234-5678-9012-3456\\n1111222233334444")
    result.created             # 2
    app.codes_available        # 2
"""
