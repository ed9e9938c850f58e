"""
Fluent entry points for writing executable BDD specifications.

Example usage:
    from bddy.api import feature, given, scenario, scenario_outline

    def test_calculator():
        calc = Calculator()

        def result_is_five():
            assert calc.result == 5

        def double_is_even(n):
            assert calc.double(n) % 2 == 0

        feature(
            "Calculator",
            scenario(
                "Adding",
                given("a calculator", calc.clear)
                .when("I add 2 and 3", lambda: calc.add(2, 3))
                .then("the result is 5", result_is_five),
            ),
            scenario_outline(
                "Doubling",
                given("a number", lambda n: calc.enter(n))
                .then("its double is even", double_is_even),
                [1, 2, 3],
            ),
        ).test()

Behaviors taking no argument build plain ``Steps``; behaviors taking the
outline datum build ``TypedSteps``. The container type is fixed by the first
step, so a plain chain rejects a later step that takes the datum with
``TypeError``. Start an outline chain with a step taking the datum, or with
``TypedSteps()`` explicitly:

    TypedSteps().given("a calculator", calc.clear).when("I enter a number", calc.enter)

``pending()`` marks a step that has not been written yet.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from .bdd.feature import Feature
from .bdd.models import PENDING, Behavior, GherkinKeyword, Unary, as_behavior
from .bdd.scenario import Scenario, ScenarioOutline
from .bdd.steps import AbstractSteps, Background, PostStep, Steps, TypedSteps


def feature(description: str, *children) -> Feature:
    return Feature(description).add(*children)


def scenario(description: str, steps: Optional[Steps] = None) -> Scenario:
    return Scenario(description, steps)


def scenario_outline(description: str, steps: Optional[AbstractSteps] = None, data: Iterable[Any] = ()) -> ScenarioOutline:
    return ScenarioOutline(description, steps, data)


def _start(keyword: GherkinKeyword, description: Any, behavior: Any) -> AbstractSteps:
    if isinstance(description, AbstractSteps):
        container = TypedSteps() if isinstance(description, TypedSteps) else Steps()
    else:
        behavior = as_behavior(behavior)
        container = TypedSteps() if isinstance(behavior, Unary) else Steps()
    return container.add_step(keyword, description, behavior)


def given(description, behavior=None) -> AbstractSteps:
    return _start(GherkinKeyword.GIVEN, description, behavior)


def when(description, behavior=None) -> AbstractSteps:
    return _start(GherkinKeyword.WHEN, description, behavior)


def then(description, behavior=None) -> AbstractSteps:
    return _start(GherkinKeyword.THEN, description, behavior)


def and_(description, behavior=None) -> AbstractSteps:
    return _start(GherkinKeyword.AND, description, behavior)


def pending() -> Behavior:
    """Behavior of a step that is not implemented yet."""
    return PENDING


def background(steps: AbstractSteps) -> Background:
    return Background(steps)


def post_step(steps: AbstractSteps) -> PostStep:
    return PostStep(steps)
