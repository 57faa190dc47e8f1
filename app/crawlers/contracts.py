"""Typed fetch contracts shared by the network clients."""

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FetchState(str, enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class FetchResult(Generic[T]):
    """Outcome of one remote fetch; clients return this instead of raising on HTTP failures."""

    state: FetchState
    data: Optional[T] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == FetchState.OK
