class ShopError(Exception):
    """Base for failures that map onto a structured {success, message} response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ShopError):
    status_code = 404


class ValidationFailedError(ShopError):
    status_code = 400


class InvalidPaymentStatusError(ValidationFailedError):
    def __init__(self, message: str = "Invalid payment status"):
        super().__init__(message)


class CheckoutNotPaidError(ValidationFailedError):
    def __init__(self, message: str = "Checkout is not paid yet"):
        super().__init__(message)


class ConflictError(ShopError):
    status_code = 409


class CheckoutAlreadyFinalizedError(ConflictError):
    def __init__(self, message: str = "Checkout has already been finalized"):
        super().__init__(message)


class UnauthorizedError(ShopError):
    status_code = 401


class ForbiddenError(ShopError):
    status_code = 403


class TransientStoreError(ShopError):
    """The store or a lock did not answer in time; the request may be retried."""

    status_code = 503
