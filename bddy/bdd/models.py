from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Callable, List, Optional

from ..errors import PendingException


class Status(str, Enum):
    """Flags a feature, scenario or step can carry."""

    IGNORE = "IGNORE"
    SKIP = "SKIP"
    WIP = "WIP"


class Severity(str, Enum):
    """Terminal outcome of a reported node."""

    PASS = "PASS"
    FAIL = "FAIL"
    FATAL = "FATAL"
    SKIP = "SKIP"


class GherkinKeyword(str, Enum):
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"
    AND = "And"
    FEATURE = "Feature"
    SCENARIO = "Scenario"
    BACKGROUND = "Background"

    @classmethod
    def parse(cls, value: "str | GherkinKeyword") -> "GherkinKeyword":
        if isinstance(value, GherkinKeyword):
            return value
        for keyword in cls:
            if keyword.value.lower() == str(value).strip().lower():
                return keyword
        raise ValueError(f"Unknown keyword {value!r}. Must be one of: {', '.join(k.value for k in cls)}.")


class Statusable:
    """Fluent status flags for anything exposing a ``status`` list.

    The list acts as an insertion-ordered set: flags are only ever added.
    """

    def _add_status(self, flag: Status):
        if flag not in self.status:
            self.status.append(flag)
        return self

    def ignore(self):
        return self._add_status(Status.IGNORE)

    def wip(self):
        return self._add_status(Status.WIP)

    def skip(self):
        return self._add_status(Status.SKIP)

    def has_status(self, flag: Status) -> bool:
        return flag in self.status

    @property
    def categories(self) -> List[str]:
        return [flag.value for flag in self.status]


# ─── Behaviors ───

class Behavior:
    """What a step does when it runs.

    Three variants: ``Nullary`` wraps a callable taking nothing, ``Unary``
    wraps a callable taking the outline datum, and ``Pending`` marks a step
    that has not been written yet.
    """

    def run(self, data: Any = None) -> None:
        raise NotImplementedError


class Nullary(Behavior):
    def __init__(self, fn: Callable[[], Any]):
        self.fn = fn

    def run(self, data: Any = None) -> None:
        self.fn()

    def __repr__(self) -> str:
        return f"Nullary({getattr(self.fn, '__name__', self.fn)!s})"


class Unary(Behavior):
    def __init__(self, fn: Callable[[Any], Any]):
        self.fn = fn

    def run(self, data: Any = None) -> None:
        self.fn(data)

    def __repr__(self) -> str:
        return f"Unary({getattr(self.fn, '__name__', self.fn)!s})"


class Pending(Behavior):
    def run(self, data: Any = None) -> None:
        raise PendingException()

    def __repr__(self) -> str:
        return "PENDING"


PENDING = Pending()


def _takes_no_argument(fn: Callable) -> bool:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            return False
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD) and param.default is param.empty:
            return False
    return True


def as_behavior(value: Any) -> Optional[Behavior]:
    """Turn a builder argument into a Behavior.

    None stays None. A callable accepting no positional argument becomes
    ``Nullary``, any other callable becomes ``Unary``.
    """
    if value is None or isinstance(value, Behavior):
        return value
    if not callable(value):
        raise TypeError(f"Step behavior must be callable, got {type(value).__name__}")
    if _takes_no_argument(value):
        return Nullary(value)
    return Unary(value)


def to_unary(behavior: Optional[Behavior]) -> Optional[Behavior]:
    """Convert a plain-step behavior into one that accepts (and ignores) a datum."""
    if behavior is None or isinstance(behavior, (Pending, Unary)):
        return behavior
    if isinstance(behavior, Nullary):
        fn = behavior.fn

        def _discard(_data: Any) -> None:
            fn()

        _discard.__name__ = getattr(fn, "__name__", "_discard")
        return Unary(_discard)
    raise TypeError(f"Unsupported behavior {behavior!r}")
