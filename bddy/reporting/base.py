from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Union

from ..bdd.models import GherkinKeyword

Message = Union[str, BaseException]


class ReportElement(ABC):
    """One reported node (feature, scenario, outline, example or step)."""

    @abstractmethod
    def pass_(self, description: str) -> None:
        ...

    @abstractmethod
    def fail(self, message: Message) -> None:
        ...

    @abstractmethod
    def fatal(self, message: Message) -> None:
        ...

    @abstractmethod
    def skip(self, message: Message) -> None:
        ...

    @abstractmethod
    def assign_category(self, *categories: str) -> None:
        ...


class Reporter(ABC):
    """Factory of report elements.

    Implementations track nesting themselves: a scenario belongs to the
    last reported feature, a step to the last reported scenario or outline
    example. ``show_status`` controls whether node status flags are
    assigned as categories.
    """

    show_status: bool = True

    @abstractmethod
    def feature(self, description: str) -> ReportElement:
        ...

    @abstractmethod
    def scenario(self, description: str) -> ReportElement:
        ...

    @abstractmethod
    def scenario_outline(self, description: str) -> ReportElement:
        ...

    @abstractmethod
    def scenario_outline_data(self, description: str, data: Any) -> ReportElement:
        ...

    @abstractmethod
    def step(self, keyword: GherkinKeyword, description: str) -> ReportElement:
        ...

    @abstractmethod
    def finish_report(self) -> Any:
        ...


def describe(message: Message) -> str:
    """Render a description or an exception as report text."""
    if isinstance(message, BaseException):
        text = str(message)
        return f"{type(message).__name__}: {text}" if text else type(message).__name__
    return message


class _NullElement(ReportElement):
    """Stands in for an element when no reporter is set."""

    def pass_(self, description: str) -> None:
        pass

    def fail(self, message: Message) -> None:
        pass

    def fatal(self, message: Message) -> None:
        pass

    def skip(self, message: Message) -> None:
        pass

    def assign_category(self, *categories: str) -> None:
        pass


NULL_ELEMENT = _NullElement()
