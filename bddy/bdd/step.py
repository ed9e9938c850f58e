from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import PendingException, StepError, StepException
from ..reporting.base import NULL_ELEMENT, ReportElement
from .models import Behavior, GherkinKeyword, Status, Statusable, Unary, as_behavior, to_unary

logger = logging.getLogger(__name__)


class Step(Statusable, BaseModel):
    """A single Given/When/Then/And step with its behavior.

    ``behavior`` may be None, in which case running the step does nothing.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    keyword: GherkinKeyword
    description: str
    behavior: Optional[Behavior] = None
    status: List[Status] = Field(default_factory=list)
    reporter: Any = Field(default=None, exclude=True, repr=False)

    @field_validator("keyword", mode="before")
    @classmethod
    def parse_keyword(cls, value: Any) -> GherkinKeyword:
        return GherkinKeyword.parse(value)

    @field_validator("behavior", mode="before")
    @classmethod
    def check_behavior(cls, value: Any) -> Optional[Behavior]:
        behavior = as_behavior(value)
        if isinstance(behavior, Unary):
            raise ValueError("A plain step cannot take a behavior that expects data")
        return behavior

    def _set_up_reporter(self) -> ReportElement:
        if self.reporter is None:
            return NULL_ELEMENT
        element = self.reporter.step(self.keyword, self.description)
        if self.status and getattr(self.reporter, "show_status", True):
            element.assign_category(*self.categories)
        return element

    def _execute(self) -> None:
        if self.behavior is not None:
            self.behavior.run()

    def test(self) -> None:
        """Run the step once and report the outcome.

        Raises:
            StepError: the behavior failed an assertion (reported as fail)
            StepException: the behavior raised any other exception (reported as fatal)
            PendingException: the behavior is pending (reported as skip)
        """
        if self.has_status(Status.IGNORE):
            return
        element = self._set_up_reporter()
        if self.has_status(Status.SKIP):
            logger.debug("Skipping step: %s %s", self.keyword.value, self.description)
            element.skip(self.description)
            return

        logger.debug("Running step: %s %s", self.keyword.value, self.description)
        try:
            self._execute()
        except AssertionError as e:
            element.fail(e)
            raise StepError(e) from e
        except PendingException as e:
            element.skip(e)
            raise
        except Exception as e:
            element.fatal(e)
            raise StepException(e) from e
        element.pass_(self.description)

    def skip_step(self) -> None:
        """Report the step as skipped without running it."""
        if self.has_status(Status.IGNORE):
            return
        self._set_up_reporter().skip(self.description)

    def copy_step(self) -> "Step":
        return self.model_copy(update={"status": list(self.status)})


class TypedStep(Step):
    """A step whose behavior receives the datum of a scenario outline."""

    data: Any = Field(default=None, exclude=True)

    @field_validator("behavior", mode="before")
    @classmethod
    def check_behavior(cls, value: Any) -> Optional[Behavior]:
        return to_unary(as_behavior(value))

    @classmethod
    def from_step(cls, step: Step) -> "TypedStep":
        return cls(
            keyword=step.keyword,
            description=step.description,
            behavior=step.behavior,
            status=list(step.status),
            reporter=step.reporter,
        )

    def with_data(self, data: Any) -> "TypedStep":
        self.data = data
        return self

    def _execute(self) -> None:
        if self.behavior is not None:
            self.behavior.run(self.data)
