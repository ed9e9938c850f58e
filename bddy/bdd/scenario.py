from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

from ..errors import PendingException, StepError, StepException
from ..reporting.base import NULL_ELEMENT, ReportElement
from .models import Status, Statusable
from .steps import AbstractSteps, Background, PostStep, Steps, TypedSteps, as_background, as_post_step

logger = logging.getLogger(__name__)


def conclude(
    element: ReportElement,
    description: str,
    step_exception: Optional[StepException],
    step_error: Optional[StepError],
) -> None:
    """Report the latched outcome on ``element`` and raise it.

    A StepException wins over a StepError.
    """
    if step_exception is not None:
        element.fatal(step_exception.cause)
        raise step_exception
    if step_error is not None:
        element.fail(step_error.cause)
        raise step_error
    element.pass_(description)


class Scenario(Statusable):
    """A named test case made of one Steps container."""

    def __init__(self, description: str, steps: Optional[Steps] = None):
        if description is None:
            raise ValueError("Scenario description is required")
        self.description = description
        self.steps = steps if steps is not None else Steps()
        self.status: List[Status] = []
        self.reporter = None

    def __repr__(self) -> str:
        return f"Scenario({self.description!r}, steps={len(self.steps)})"

    def background(self, steps) -> "Scenario":
        self.steps.add_backgrounds([as_background(steps)])
        return self

    def post_step(self, steps) -> "Scenario":
        self.steps.add_post_steps([as_post_step(steps)])
        return self

    def _set_up_reporter(self) -> ReportElement:
        if self.reporter is None:
            return NULL_ELEMENT
        element = self.reporter.scenario(self.description)
        if self.status and getattr(self.reporter, "show_status", True):
            element.assign_category(*self.categories)
        return element

    def _propagate_reporter(self) -> None:
        if self.steps.reporter is None:
            self.steps.reporter = self.reporter

    def _skip(self, element: ReportElement) -> None:
        self._propagate_reporter()
        self.steps.skip_steps()
        element.skip(self.description)

    def test(
        self,
        backgrounds: Sequence[Background] = (),
        post_steps: Sequence[PostStep] = (),
    ) -> None:
        """Run the scenario.

        ``backgrounds`` and ``post_steps`` are handed down by the owning
        feature for this run only. A pending step leaves the scenario
        skipped without raising.
        """
        if self.has_status(Status.IGNORE):
            return
        element = self._set_up_reporter()
        if self.has_status(Status.SKIP):
            self._skip(element)
            return

        self._propagate_reporter()
        logger.info("Scenario: %s", self.description)
        try:
            self.steps.test(backgrounds, post_steps)
        except StepException as e:
            element.fatal(e.cause)
            raise
        except StepError as e:
            element.fail(e.cause)
            raise
        except PendingException as e:
            logger.info("Scenario pending: %s", self.description)
            element.skip(e)
            return
        element.pass_(self.description)

    def skip_scenario(self) -> None:
        if self.has_status(Status.IGNORE):
            return
        self._skip(self._set_up_reporter())


class ScenarioOutline(Statusable):
    """A scenario run once for every datum in ``data``.

    Each run is reported as a nested example. A failing datum does not stop
    the remaining ones; the first StepException and StepError are raised
    once all data has run. When every datum is pending the outline is
    reported as skipped.
    """

    def __init__(self, description: str, steps: Optional[AbstractSteps] = None, data: Iterable[Any] = ()):
        if description is None:
            raise ValueError("Scenario outline description is required")
        if steps is None:
            steps = TypedSteps()
        elif not isinstance(steps, TypedSteps):
            steps = TypedSteps().given(steps).add_backgrounds(steps.backgrounds).add_post_steps(steps.post_steps)
        self.description = description
        self.steps: TypedSteps = steps
        self.data: List[Any] = list(data)
        self.status: List[Status] = []
        self.reporter = None

    def __repr__(self) -> str:
        return f"ScenarioOutline({self.description!r}, steps={len(self.steps)}, data={len(self.data)})"

    def background(self, steps) -> "ScenarioOutline":
        self.steps.add_backgrounds([as_background(steps)])
        return self

    def post_step(self, steps) -> "ScenarioOutline":
        self.steps.add_post_steps([as_post_step(steps)])
        return self

    def examples(self, *data: Any) -> "ScenarioOutline":
        self.data.extend(data)
        return self

    def _assign_status(self, element: ReportElement) -> ReportElement:
        if self.status and getattr(self.reporter, "show_status", True):
            element.assign_category(*self.categories)
        return element

    def _set_up_reporter(self) -> ReportElement:
        if self.reporter is None:
            return NULL_ELEMENT
        return self._assign_status(self.reporter.scenario_outline(self.description))

    def _set_up_example(self, data: Any) -> ReportElement:
        if self.reporter is None:
            return NULL_ELEMENT
        return self._assign_status(self.reporter.scenario_outline_data(self.description, data))

    def _prepare(self, data: Any) -> None:
        if self.steps.reporter is None:
            self.steps.reporter = self.reporter
        self.steps.with_data(data)

    def _skip(self, element: ReportElement) -> None:
        for data in self.data:
            example = self._set_up_example(data)
            self._prepare(data)
            self.steps.skip_steps()
            example.skip(self.description)
        element.skip(self.description)

    def test(
        self,
        backgrounds: Sequence[Background] = (),
        post_steps: Sequence[PostStep] = (),
    ) -> None:
        if self.has_status(Status.IGNORE):
            return
        element = self._set_up_reporter()
        if self.has_status(Status.SKIP):
            self._skip(element)
            return

        step_exception: Optional[StepException] = None
        step_error: Optional[StepError] = None
        pending = 0
        for data in self.data:
            example = self._set_up_example(data)
            self._prepare(data)
            logger.info("Scenario outline: %s [%r]", self.description, data)
            try:
                self.steps.test(backgrounds, post_steps)
            except StepException as e:
                example.fatal(e.cause)
                if step_exception is None:
                    step_exception = e
            except StepError as e:
                example.fail(e.cause)
                if step_error is None:
                    step_error = e
            except PendingException as e:
                example.skip(e)
                pending += 1
            else:
                example.pass_(self.description)
        if self.data and pending == len(self.data):
            logger.info("Scenario outline pending: %s", self.description)
            element.skip(self.description)
            return
        conclude(element, self.description, step_exception, step_error)

    def skip_scenario(self) -> None:
        if self.has_status(Status.IGNORE):
            return
        self._skip(self._set_up_reporter())
