"""
Checkout errors — the closed set of ways a checkout step can fail.

Every step returns Result[T, <one of these>]; callers branch with match:

    match await composer.submit(...):
        case Ok(confirmation):
            ...
        case Error(ValidationError(violations=v)):
            show_field_errors(v)
        case Error(StockShortfallError(shortfalls=s)):
            show_shortfalls(s)
        case Error(AuthExpired()):
            redirect_to_login()
        case Error(err):
            show_message(err.message)
"""

from __future__ import annotations

from dataclasses import dataclass

from cartflow.api._types import ApiError, ApiErrorKind

# ═══════════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """One field-level problem, shown next to the field."""

    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationError:
    """
    Local validation failed. Never sent to the server.

    Note: Carries ALL violations found, not only the first.
    """

    violations: tuple[FieldViolation, ...]

    @classmethod
    def of(cls, field: str, message: str) -> ValidationError:
        return cls((FieldViolation(field, message),))

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(v.field for v in self.violations)

    @property
    def message(self) -> str:
        return "; ".join(f"{v.field}: {v.message}" for v in self.violations)


# ═══════════════════════════════════════════════════════════════════════════════
# Stock
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Shortfall:
    """A line whose requested quantity exceeds available stock."""

    product_id: int
    requested: int
    available: int
    name: str = ""

    def __str__(self) -> str:
        label = self.name or f"#{self.product_id}"
        return f"{label}: requested {self.requested}, only {self.available} in stock"


@dataclass(frozen=True, slots=True)
class StockShortfallError:
    """One or more lines exceed availability. Checkout is blocked."""

    shortfalls: tuple[Shortfall, ...]

    @property
    def message(self) -> str:
        return "Not enough stock: " + "; ".join(str(s) for s in self.shortfalls)


# ═══════════════════════════════════════════════════════════════════════════════
# Coupon
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CouponRejected:
    """Invalid or expired coupon. Checkout may continue without a discount."""

    code: str
    reason: str = "coupon is invalid or expired"

    @property
    def message(self) -> str:
        return f"Coupon {self.code!r} rejected: {self.reason}"


# ═══════════════════════════════════════════════════════════════════════════════
# Remote
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NetworkError:
    """
    A remote call failed for reasons unrelated to business rules.

    Note: Never means "validation passed". Retryable by the user.
    """

    operation: str
    message: str
    retryable: bool = True


@dataclass(frozen=True, slots=True)
class AuthExpired:
    """401/403 during checkout. Abort, keep the cart, re-authenticate."""

    message: str = "session expired, please log in again"


@dataclass(frozen=True, slots=True)
class ServerRejected:
    """
    The order endpoint refused the order after local validation passed.

    Note: Expected outcome (e.g. stock sold out between check and commit),
    distinct from a local StockShortfallError.
    """

    message: str
    status: int | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Attempt Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutInFlight:
    """Another checkout attempt is already running for this session."""

    message: str = "a checkout is already in progress"


@dataclass(frozen=True, slots=True)
class CheckoutAbandoned:
    """The attempt was abandoned (navigation, cart edit); results discarded."""

    reason: str

    @property
    def message(self) -> str:
        return f"checkout abandoned: {self.reason}"


type CheckoutError = (
    ValidationError
    | StockShortfallError
    | CouponRejected
    | NetworkError
    | AuthExpired
    | ServerRejected
    | CheckoutInFlight
    | CheckoutAbandoned
)


# ═══════════════════════════════════════════════════════════════════════════════
# ApiError Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def from_api_error(error: ApiError, operation: str) -> NetworkError | AuthExpired:
    """
    Map a remote failure that carries no business meaning.

    Callers handle business kinds (NOT_FOUND on a coupon, REJECTED on
    checkout) before falling back to this.
    """
    if error.kind is ApiErrorKind.AUTH_EXPIRED:
        return AuthExpired(error.message)
    return NetworkError(operation, error.message, retryable=error.retryable)


__all__ = (
    "FieldViolation",
    "ValidationError",
    "Shortfall",
    "StockShortfallError",
    "CouponRejected",
    "NetworkError",
    "AuthExpired",
    "ServerRejected",
    "CheckoutInFlight",
    "CheckoutAbandoned",
    "CheckoutError",
    "from_api_error",
)
