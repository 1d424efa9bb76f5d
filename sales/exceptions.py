class SaleError(Exception):
    """Base class for sale workflow errors."""

    status_code = 400


class EmptySale(SaleError):
    def __init__(self, message="A sale needs at least one item"):
        super().__init__(message)


class SaleNotPending(SaleError):
    status_code = 409

    def __init__(self, sale, action='change'):
        self.sale = sale
        super().__init__(f"Only pending sales can {action} (sale #{sale.pk} is {sale.status})")


class SaleAlreadyConfirmed(SaleNotPending):
    def __init__(self, sale):
        self.sale = sale
        SaleError.__init__(self, "Sale is already confirmed")


class InsufficientCodes(SaleError):
    """Raised when an app has fewer unused codes than a sale needs."""

    status_code = 409

    def __init__(self, app, requested, available):
        self.app = app
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient codes available for app {app.name} "
            f"(requested {requested}, available {available})"
        )
