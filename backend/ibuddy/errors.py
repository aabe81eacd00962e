"""
Domain errors. Lookups return None instead of raising; these cover the other outcomes.
HTTP mapping lives in ibuddy.main (exception handlers).
"""


class InvariantViolation(RuntimeError):
    """A write could not be read back. Never retried; the request fails with 500."""


def ensure(condition, message: str) -> None:
    if not condition:
        raise InvariantViolation(message)


class AuthorizationDenied(Exception):
    """Actor may not perform the action (403). `reason` is shown to the user."""

    def __init__(self, reason: str = "Forbidden"):
        super().__init__(reason)
        self.reason = reason


def require(allowed: bool, reason: str = "Forbidden") -> None:
    if not allowed:
        raise AuthorizationDenied(reason)


class FormValidationError(Exception):
    """Field -> message map (400), e.g. {"name": "Name is already taken"}."""

    def __init__(self, errors: dict[str, str]):
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class InvalidStatusTransition(Exception):
    """Strict status mode rejected a mentee status change (409)."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change mentee status from {current} to {requested}")
        self.current = current
        self.requested = requested


class ExternalServiceError(Exception):
    """Object storage or email transport failed (502)."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
