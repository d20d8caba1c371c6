"""
API error types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ApiErrorKind(Enum):
    """Kinds of remote call failures."""

    NETWORK = auto()  # Transport failure or timeout
    AUTH_EXPIRED = auto()  # 401 / 403
    NOT_FOUND = auto()  # 404
    REJECTED = auto()  # Any other non-2xx status
    INVALID_RESPONSE = auto()  # 2xx body does not match the schema


@dataclass(frozen=True, slots=True)
class ApiError:
    """
    Remote call error.

    Note: status is None for NETWORK errors (no response was received).
    """

    kind: ApiErrorKind
    message: str
    status: int | None = None

    @property
    def retryable(self) -> bool:
        """Transport failures and 5xx may succeed when tried again."""
        if self.kind is ApiErrorKind.NETWORK:
            return True
        return self.status is not None and self.status >= 500


__all__ = (
    "ApiErrorKind",
    "ApiError",
)
