from __future__ import annotations

import enum
from contextlib import contextmanager
from typing import Iterator, Optional, TypeVar, Union

from .errors import ResolutionCycleError

T = TypeVar("T")


class Unset(enum.Enum):
    """Tags for a lazy field that holds no concrete value.

    UNRESOLVED means not looked up yet; ABSENT means looked up (or known) to
    have no value. Only UNRESOLVED ever triggers a lookup.
    """

    UNRESOLVED = "unresolved"
    ABSENT = "absent"

    def __repr__(self) -> str:
        return f"<{self.value}>"


UNRESOLVED = Unset.UNRESOLVED
ABSENT = Unset.ABSENT

Lazy = Union[T, Unset]


def is_known(value: object) -> bool:
    return not isinstance(value, Unset)


def value_or_none(value: Lazy[T]) -> Optional[T]:
    return None if isinstance(value, Unset) else value


def absent_if_none(value: Optional[T]) -> Lazy[T]:
    return ABSENT if value is None else value


class ResolveGuard:
    """Marks an entity as mid-resolution so a recursive read fails loudly."""

    def __init__(self, owner: object):
        self._owner = owner
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @contextmanager
    def __call__(self, what: str) -> Iterator[None]:
        if self._active:
            raise ResolutionCycleError(f"{what} of {self._owner!r} read while being resolved")
        self._active = True
        try:
            yield
        finally:
            self._active = False
