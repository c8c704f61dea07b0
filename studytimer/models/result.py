"""
Domain Results

Every store and service operation returns a Result instead of raising:
``Success(value)`` or ``Failure(error)``. Callers compose results with
``map`` / ``flat_map`` / ``recover`` rather than try/except.

DomainError is a tagged union: an ErrorKind plus the data that kind carries
(cause, offending field, gated feature).

Inside a multi-store transaction a Failure is re-raised as DomainException
(via ``unwrap()``) so the shared transaction rolls back; the boundary turns
it back into a Failure.

Usage:
    from studytimer.models.result import Success, Failure, DomainError

    result = await stats.get_current_streak()
    streak = result.get_or_default(0)

    label = result.map(lambda n: f"{n} days").recover(lambda err: "n/a")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from studytimer.enums.study import ErrorKind

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class DomainError:
    """
    A failed domain operation.

    Attributes:
        kind: Which error this is.
        message: Human-readable description.
        cause: Underlying exception (DATABASE, NETWORK, UNKNOWN).
        field: Offending input field (VALIDATION).
        feature: Gated feature name (PREMIUM_REQUIRED).
    """

    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None
    field: Optional[str] = None
    feature: Optional[str] = None

    @classmethod
    def database(cls, message: str, cause: Optional[BaseException] = None) -> DomainError:
        return cls(ErrorKind.DATABASE, message, cause=cause)

    @classmethod
    def not_found(cls, message: str) -> DomainError:
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def validation(cls, message: str, field: Optional[str] = None) -> DomainError:
        return cls(ErrorKind.VALIDATION, message, field=field)

    @classmethod
    def network(cls, message: str, cause: Optional[BaseException] = None) -> DomainError:
        return cls(ErrorKind.NETWORK, message, cause=cause)

    @classmethod
    def premium_required(cls, feature: str) -> DomainError:
        return cls(
            ErrorKind.PREMIUM_REQUIRED,
            f"Premium subscription required for {feature}",
            feature=feature,
        )

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> DomainError:
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def unknown(cls, message: str, cause: Optional[BaseException] = None) -> DomainError:
        return cls(ErrorKind.UNKNOWN, message, cause=cause)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view (the cause is reduced to its type and text)."""
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.field:
            data["field"] = self.field
        if self.feature:
            data["feature"] = self.feature
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class DomainException(Exception):
    """Carries a DomainError across a transaction boundary."""

    def __init__(self, error: DomainError):
        super().__init__(error.message)
        self.error = error


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful result holding a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def error(self) -> None:
        return None

    def map(self, fn: Callable[[T], U]) -> Success[U]:
        return Success(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        return fn(self.value)

    def recover(self, fn: Callable[[DomainError], T]) -> Success[T]:
        return self

    def get_or_default(self, default: T) -> T:
        return self.value

    def get_or_none(self) -> Optional[T]:
        return self.value

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed result holding a DomainError."""

    error: DomainError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def map(self, fn: Callable[[Any], Any]) -> Failure:
        return self

    def flat_map(self, fn: Callable[[Any], Any]) -> Failure:
        return self

    def recover(self, fn: Callable[[DomainError], T]) -> Success[T]:
        return Success(fn(self.error))

    def get_or_default(self, default: T) -> T:
        return default

    def get_or_none(self) -> None:
        return None

    def unwrap(self) -> Any:
        """Raise the error so an enclosing transaction rolls back."""
        raise DomainException(self.error)


Result = Union[Success[T], Failure]
