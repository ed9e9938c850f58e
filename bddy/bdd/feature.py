from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from ..errors import StepError, StepException
from ..reporting.base import NULL_ELEMENT, ReportElement
from .models import Status, Statusable
from .scenario import Scenario, ScenarioOutline, conclude
from .steps import Background, PostStep, as_background, as_post_step

logger = logging.getLogger(__name__)

Child = Union[Scenario, ScenarioOutline]


class Feature(Statusable):
    """A named suite of scenarios and scenario outlines.

    Feature backgrounds and post-steps are handed to every child on each
    run; the children's own containers are never modified, so running a
    feature twice does not duplicate them.
    """

    def __init__(
        self,
        description: str,
        children: Optional[List[Child]] = None,
        backgrounds: Optional[List[Background]] = None,
        post_steps: Optional[List[PostStep]] = None,
    ):
        if description is None:
            raise ValueError("Feature description is required")
        self.description = description
        self.children: List[Child] = list(children or [])
        self.backgrounds: List[Background] = list(backgrounds or [])
        self.post_steps: List[PostStep] = list(post_steps or [])
        self.status: List[Status] = []
        self.reporter = None
        self._check_children(self.children)

    def __repr__(self) -> str:
        return f"Feature({self.description!r}, children={len(self.children)})"

    def add(self, *children: Child) -> "Feature":
        for child in children:
            if not isinstance(child, (Scenario, ScenarioOutline)):
                raise TypeError(f"A feature holds scenarios and outlines, got {type(child).__name__}")
        self._check_children(children)
        self.children.extend(children)
        return self

    scenario = add

    def background(self, steps) -> "Feature":
        background = as_background(steps)
        self._check_children(self.children, backgrounds=[background])
        self.backgrounds.append(background)
        return self

    def post_step(self, steps) -> "Feature":
        post_step = as_post_step(steps)
        self._check_children(self.children, post_steps=[post_step])
        self.post_steps.append(post_step)
        return self

    def _check_children(
        self,
        children: Sequence[Child],
        backgrounds: Sequence[Background] = (),
        post_steps: Sequence[PostStep] = (),
    ) -> None:
        """Raise TypeError if a feature background or post-step cannot run in a child."""
        for child in children:
            child.steps.check_adoptable([*self.backgrounds, *backgrounds, *self.post_steps, *post_steps])

    def _set_up_reporter(self) -> ReportElement:
        if self.reporter is None:
            return NULL_ELEMENT
        element = self.reporter.feature(self.description)
        if self.status and getattr(self.reporter, "show_status", True):
            element.assign_category(*self.categories)
        return element

    def _propagate_reporter(self, child: Child) -> None:
        if child.reporter is None:
            child.reporter = self.reporter

    def test(self) -> None:
        """Run every child in order.

        Raises the first StepException of any child, otherwise the first
        StepError, once all children ran.
        """
        if self.has_status(Status.IGNORE):
            return
        self._check_children(self.children)
        element = self._set_up_reporter()
        logger.info("Feature: %s", self.description)
        if self.has_status(Status.SKIP):
            for child in self.children:
                self._propagate_reporter(child)
                child.skip_scenario()
            element.skip(self.description)
            return

        step_exception: Optional[StepException] = None
        step_error: Optional[StepError] = None
        for child in self.children:
            self._propagate_reporter(child)
            try:
                child.test(backgrounds=self.backgrounds, post_steps=self.post_steps)
            except StepException as e:
                logger.info("Scenario %r raised %s", child.description, e)
                if step_exception is None:
                    step_exception = e
            except StepError as e:
                logger.info("Scenario %r failed: %s", child.description, e)
                if step_error is None:
                    step_error = e
        conclude(element, self.description, step_exception, step_error)
