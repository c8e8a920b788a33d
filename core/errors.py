"""Error taxonomy shared by the checkout and webhook services.

Services raise these; routers turn them into ``HTTPException`` responses.
``status_code`` is the HTTP status a router should use by default.
"""


class CheckoutError(Exception):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CheckoutError):
    default_message = "Invalid request"


class NotFoundError(CheckoutError):
    status_code = 404
    default_message = "Not found"


class UnavailableError(CheckoutError):
    default_message = "Product is not available"


class EmptyCartError(CheckoutError):
    default_message = "Cart is empty"


class InvalidAmountError(CheckoutError):
    default_message = "Invalid cart total amount"


class InvalidSignatureError(CheckoutError):
    status_code = 401
    default_message = "Invalid signature"


class InternalError(CheckoutError):
    status_code = 500
    default_message = "Unexpected error creating payment session. Please try again."
