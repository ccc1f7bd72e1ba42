from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """
    Outcome of a fetch by identity: either ``found`` with a value, or
    absent.  Storage failures are raised, never folded into a Lookup,
    so each caller decides for itself whether absence is an error.
    """

    value: T | None = None

    @property
    def found(self) -> bool:
        return self.value is not None

    def or_none(self) -> T | None:
        return self.value

    def or_raise(self, error: Exception) -> T:
        if self.value is None:
            raise error
        return self.value
