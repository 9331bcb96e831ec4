class PaymentError(Exception):
    """Base for errors surfaced to API clients as JSON."""

    status_code = 400
    default_message = "Payment request failed"

    def __init__(self, message=None, *, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(PaymentError):
    default_message = "Invalid request"


class NotFoundError(PaymentError):
    status_code = 404
    default_message = "Not found"


class GatewayError(PaymentError):
    status_code = 502
    default_message = "Paytm order failed"


class SignatureError(PaymentError):
    default_message = "Checksum mismatch"


class NormalizationError(PaymentError):
    default_message = "Invalid callback payload"


class ConcurrencyError(PaymentError):
    status_code = 409
    default_message = "Order was updated concurrently, retry"


class ConfigurationError(PaymentError):
    status_code = 503
    default_message = "Payments are not configured"
