from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ..errors import PendingException, StepError, StepException
from .models import GherkinKeyword, Unary, as_behavior
from .step import Step, TypedStep

logger = logging.getLogger(__name__)


class AbstractSteps:
    """Ordered steps of one scenario plus the driver that runs them.

    Backgrounds and post-steps are kept apart from the container's own
    steps; every run builds a fresh effective list
    ``backgrounds ++ steps ++ post_steps`` so running twice reports the
    same sequence twice.
    """

    def __init__(
        self,
        steps: Optional[List[Step]] = None,
        backgrounds: Optional[List["Background"]] = None,
        post_steps: Optional[List["PostStep"]] = None,
    ):
        self.steps: List[Step] = steps if steps is not None else []
        self.backgrounds: List[Background] = []
        self.post_steps: List[PostStep] = []
        self.reporter = None
        self.add_backgrounds(backgrounds or [])
        self.add_post_steps(post_steps or [])

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(steps={len(self.steps)}, "
            f"backgrounds={len(self.backgrounds)}, post_steps={len(self.post_steps)})"
        )

    # ─── Building ───

    def _make_step(self, keyword: GherkinKeyword, description: str, behavior: Any) -> Step:
        raise NotImplementedError

    def _adopt(self, step: Step) -> Step:
        """Copy a step from another container into this one's step type."""
        raise NotImplementedError

    def add_step(self, keyword: GherkinKeyword, description: Any, behavior: Any):
        if isinstance(description, AbstractSteps):
            if behavior is not None:
                raise TypeError("A behavior cannot be given together with a Steps container")
            for step in description.steps:
                self.steps.append(self._adopt(step))
            return self
        self.steps.append(self._make_step(keyword, description, behavior))
        return self

    def given(self, description, behavior=None):
        return self.add_step(GherkinKeyword.GIVEN, description, behavior)

    def when(self, description, behavior=None):
        return self.add_step(GherkinKeyword.WHEN, description, behavior)

    def then(self, description, behavior=None):
        return self.add_step(GherkinKeyword.THEN, description, behavior)

    def and_(self, description, behavior=None):
        return self.add_step(GherkinKeyword.AND, description, behavior)

    def check_adoptable(self, holders: Iterable[Any]) -> None:
        """Raise TypeError if a background or post-step cannot run in this container."""
        for holder in holders:
            for step in holder.steps:
                self._adopt(step)

    def add_backgrounds(self, backgrounds: Iterable["Background"]):
        backgrounds = list(backgrounds)
        self.check_adoptable(backgrounds)
        self.backgrounds.extend(backgrounds)
        return self

    def add_post_steps(self, post_steps: Iterable["PostStep"]):
        post_steps = list(post_steps)
        self.check_adoptable(post_steps)
        self.post_steps.extend(post_steps)
        return self

    # ─── Status of the last added step ───

    def _last_step(self) -> Step:
        if not self.steps:
            raise ValueError(f"{type(self).__name__} has no step to mark")
        return self.steps[-1]

    def ignore(self):
        self._last_step().ignore()
        return self

    def wip(self):
        self._last_step().wip()
        return self

    def skip(self):
        self._last_step().skip()
        return self

    # ─── Running ───

    def effective_steps(
        self,
        backgrounds: Sequence["Background"] = (),
        post_steps: Sequence["PostStep"] = (),
    ) -> List[Step]:
        """Steps in run order.

        Inherited ``backgrounds`` come before the container's own, inherited
        ``post_steps`` after the container's own.
        """
        steps: List[Step] = []
        for background in [*backgrounds, *self.backgrounds]:
            steps.extend(self._adopt(step) for step in background.steps)
        steps.extend(self.steps)
        for post_step in [*self.post_steps, *post_steps]:
            steps.extend(self._adopt(step) for step in post_step.steps)
        return steps

    def _inject_reporter(self, steps: Iterable[Step]) -> None:
        if self.reporter is None:
            return
        for step in steps:
            if step.reporter is None:
                step.reporter = self.reporter

    def _run_step(self, step: Step) -> None:
        step.test()

    def _skip_step(self, step: Step) -> None:
        step.skip_step()

    def test(
        self,
        backgrounds: Sequence["Background"] = (),
        post_steps: Sequence["PostStep"] = (),
    ) -> None:
        """Run every step, skipping the rest once one fails.

        Raises the first StepException if any step raised one, otherwise the
        first StepError, otherwise the PendingException of a pending step.
        """
        steps = self.effective_steps(backgrounds, post_steps)
        self._inject_reporter(steps)

        step_exception: Optional[StepException] = None
        step_error: Optional[StepError] = None
        pending: Optional[PendingException] = None
        for step in steps:
            if step_exception is not None or step_error is not None or pending is not None:
                try:
                    self._skip_step(step)
                except Exception:
                    logger.warning("Could not report skipped step %r", step.description, exc_info=True)
                continue
            try:
                self._run_step(step)
            except StepException as e:
                step_exception = e
            except StepError as e:
                step_error = e
            except PendingException as e:
                pending = e

        if step_exception is not None:
            raise step_exception
        if step_error is not None:
            raise step_error
        if pending is not None:
            raise pending

    def skip_steps(self) -> None:
        """Report every own step as skipped; backgrounds and post-steps are left out."""
        self._inject_reporter(self.steps)
        for step in self.steps:
            self._skip_step(step)


class Steps(AbstractSteps):
    """Container of plain steps, whose behaviors take no argument."""

    def _make_step(self, keyword: GherkinKeyword, description: str, behavior: Any) -> Step:
        behavior = as_behavior(behavior)
        if isinstance(behavior, Unary):
            raise TypeError(
                f"Step {description!r} expects data; build it on TypedSteps or a scenario outline"
            )
        return Step(keyword=keyword, description=description, behavior=behavior)

    def _adopt(self, step: Step) -> Step:
        if isinstance(step, TypedStep):
            raise TypeError(f"Step {step.description!r} expects data and cannot be added to plain Steps")
        return step.copy_step()


class TypedSteps(AbstractSteps):
    """Container of steps that receive the current outline datum.

    Plain steps and behaviors taking no argument are accepted too; they are
    wrapped to ignore the datum.
    """

    def __init__(
        self,
        steps: Optional[List[TypedStep]] = None,
        backgrounds: Optional[List["Background"]] = None,
        post_steps: Optional[List["PostStep"]] = None,
    ):
        super().__init__(steps, backgrounds, post_steps)
        self.data: Any = None

    def _make_step(self, keyword: GherkinKeyword, description: str, behavior: Any) -> TypedStep:
        return TypedStep(keyword=keyword, description=description, behavior=behavior)

    def _adopt(self, step: Step) -> TypedStep:
        if isinstance(step, TypedStep):
            return step.copy_step()
        return TypedStep.from_step(step)

    def with_data(self, data: Any) -> "TypedSteps":
        self.data = data
        return self

    def _run_step(self, step: TypedStep) -> None:
        step.with_data(self.data).test()

    def _skip_step(self, step: TypedStep) -> None:
        step.with_data(self.data).skip_step()


class Background(BaseModel):
    """Steps run before the steps of every scenario of its owner."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    steps: AbstractSteps

    def __init__(self, steps: AbstractSteps, **kwargs):
        super().__init__(steps=steps, **kwargs)


class PostStep(BaseModel):
    """Steps run after the steps of every scenario of its owner."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    steps: AbstractSteps

    def __init__(self, steps: AbstractSteps, **kwargs):
        super().__init__(steps=steps, **kwargs)


def as_background(steps: Any) -> Background:
    return steps if isinstance(steps, Background) else Background(steps)


def as_post_step(steps: Any) -> PostStep:
    return steps if isinstance(steps, PostStep) else PostStep(steps)
