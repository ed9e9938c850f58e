"""Tests for the Steps and TypedSteps containers."""

import pytest

from bddy.bdd.models import PENDING, GherkinKeyword, Pending, Severity, Status, Unary
from bddy.bdd.step import Step, TypedStep
from bddy.bdd.steps import Background, PostStep, Steps, TypedSteps
from bddy.errors import PendingException, StepError, StepException
from bddy.reporting.recording import RecordingReporter


class TestStepsBuilding:
    """Tests for the fluent builders."""

    def test_can_contain_no_step(self):
        assert Steps().steps == []

    def test_keeps_given_list(self):
        step_list = []
        steps = Steps(step_list)
        assert steps.steps is step_list

    def test_none_list_is_initialized(self):
        steps = Steps(None)
        steps.given("A given step")
        assert len(steps.steps) == 1

    @pytest.mark.parametrize(
        "method, keyword",
        [
            ("given", GherkinKeyword.GIVEN),
            ("when", GherkinKeyword.WHEN),
            ("then", GherkinKeyword.THEN),
            ("and_", GherkinKeyword.AND),
        ],
    )
    def test_builder_adds_step_with_keyword(self, method, keyword):
        steps = getattr(Steps(), method)("A step", None)
        assert len(steps.steps) == 1
        step = steps.steps[0]
        assert step.keyword is keyword
        assert step.description == "A step"
        assert step.behavior is None
        assert step.status == []

    def test_builders_chain_in_order(self):
        steps = Steps().given("a").when("b").then("c").and_("d")
        assert [s.description for s in steps] == ["a", "b", "c", "d"]

    def test_plain_steps_reject_unary_behavior(self):
        with pytest.raises(TypeError, match="expects data"):
            Steps().given("a", lambda data: None)

    def test_merge_copies_steps(self, recorder):
        other = Steps().given("x", recorder.ok("x")).then("y").wip()
        steps = Steps().given("a").and_(other)
        assert [(s.keyword, s.description) for s in steps] == [
            (GherkinKeyword.GIVEN, "a"),
            (GherkinKeyword.GIVEN, "x"),
            (GherkinKeyword.THEN, "y"),
        ]
        assert steps.steps[1] is not other.steps[0]
        assert steps.steps[1].behavior is other.steps[0].behavior
        assert steps.steps[2].status == [Status.WIP]

    def test_merge_rejects_behavior(self):
        with pytest.raises(TypeError):
            Steps().given(Steps().given("a"), lambda: None)

    def test_plain_steps_reject_typed_steps(self):
        with pytest.raises(TypeError):
            Steps().given(TypedSteps().given("a", lambda d: None))

    def test_status_marks_last_step(self):
        steps = Steps().given("a").when("b").skip().wip()
        assert steps.steps[0].status == []
        assert steps.steps[1].status == [Status.SKIP, Status.WIP]

    def test_status_on_empty_container_fails(self):
        with pytest.raises(ValueError, match="no step"):
            Steps().ignore()


class TestStepsTest:
    """Tests for the Steps.test() state machine."""

    def _run(self, steps, reporter):
        steps.reporter = reporter
        steps.test()

    def test_all_steps_pass(self, reporter, recorder):
        steps = Steps().given("a", recorder.ok("a")).when("b", recorder.ok("b")).then("c", recorder.ok("c"))
        self._run(steps, reporter)
        assert recorder.calls == ["a", "b", "c"]
        assert [e[2] for e in reporter.outcomes()] == [Severity.PASS] * 3

    def test_error_skips_remaining_steps(self, reporter, recorder):
        steps = (
            Steps()
            .given("a", recorder.ok("a"))
            .when("b", recorder.fails("b"))
            .then("c", recorder.ok("c"))
            .and_("d", recorder.ok("d"))
        )
        with pytest.raises(StepError):
            self._run(steps, reporter)
        assert recorder.calls == ["a", "b"]
        assert reporter.outcomes() == [
            ("step", "a", Severity.PASS),
            ("step", "b", Severity.FAIL),
            ("step", "c", Severity.SKIP),
            ("step", "d", Severity.SKIP),
        ]

    def test_exception_skips_remaining_steps(self, reporter, recorder):
        steps = Steps().given("a", recorder.raises("a")).when("b", recorder.fails("b"))
        with pytest.raises(StepException):
            self._run(steps, reporter)
        assert recorder.calls == ["a"]
        assert reporter.outcomes() == [
            ("step", "a", Severity.FATAL),
            ("step", "b", Severity.SKIP),
        ]

    def test_pending_skips_remaining_steps(self, reporter, recorder):
        steps = Steps().given("a", PENDING).when("b", recorder.ok("b"))
        with pytest.raises(PendingException):
            self._run(steps, reporter)
        assert recorder.calls == []
        assert [e[2] for e in reporter.outcomes()] == [Severity.SKIP, Severity.SKIP]

    def test_one_event_per_step(self, reporter, recorder):
        steps = Steps().given("a", recorder.fails("a")).when("b").then("c").ignore()
        with pytest.raises(StepError):
            self._run(steps, reporter)
        assert [n.description for n in reporter.find("step")] == ["a", "b"]
        assert len(reporter.events) == 2

    def test_skipped_step_does_not_stop_the_run(self, reporter, recorder):
        steps = Steps().given("a", recorder.ok("a")).skip().when("b", recorder.ok("b"))
        self._run(steps, reporter)
        assert recorder.calls == ["b"]
        assert [e[2] for e in reporter.outcomes()] == [Severity.SKIP, Severity.PASS]

    def test_unexpected_exception_from_skip_step_is_swallowed(self, recorder):
        class BrokenElementReporter(RecordingReporter):
            def step(self, keyword, description):
                if description == "b":
                    raise RuntimeError("reporter broke")
                return super().step(keyword, description)

        steps = Steps().given("a", recorder.fails("a")).when("b").then("c")
        reporter = BrokenElementReporter()
        with pytest.raises(StepError):
            self._run(steps, reporter)
        assert [e[1] for e in reporter.outcomes()] == ["a", "c"]

    def test_reporter_is_injected_only_where_missing(self, reporter):
        own = RecordingReporter()
        steps = Steps().given("a").when("b")
        steps.steps[1].reporter = own
        self._run(steps, reporter)
        assert steps.steps[0].reporter is reporter
        assert steps.steps[1].reporter is own
        assert [e[1] for e in reporter.outcomes()] == ["a"]
        assert [e[1] for e in own.outcomes()] == ["b"]

    def test_runs_without_reporter(self, recorder):
        steps = Steps().given("a", recorder.ok("a")).then("b", recorder.ok("b"))
        steps.test()
        assert recorder.calls == ["a", "b"]


class TestBackgroundsAndPostSteps:
    """Tests for splicing backgrounds and post-steps around the steps."""

    def test_order_of_backgrounds_steps_and_post_steps(self, reporter, recorder):
        steps = Steps(
            backgrounds=[
                Background(Steps().given("bg1", recorder.ok("bg1")).and_("bg2", recorder.ok("bg2"))),
                Background(Steps().given("bg3", recorder.ok("bg3"))),
            ],
            post_steps=[
                PostStep(Steps().then("post1", recorder.ok("post1"))),
                PostStep(Steps().then("post2", recorder.ok("post2"))),
            ],
        ).when("own", recorder.ok("own"))
        steps.reporter = reporter
        steps.test()
        assert recorder.calls == ["bg1", "bg2", "bg3", "own", "post1", "post2"]
        assert [e[1] for e in reporter.outcomes()] == recorder.calls

    def test_inherited_backgrounds_come_first(self, recorder):
        steps = Steps(backgrounds=[Background(Steps().given("own bg", recorder.ok("own bg")))])
        steps.when("step", recorder.ok("step"))
        steps.add_post_steps([PostStep(Steps().then("own post", recorder.ok("own post")))])
        steps.test(
            backgrounds=[Background(Steps().given("feature bg", recorder.ok("feature bg")))],
            post_steps=[PostStep(Steps().then("feature post", recorder.ok("feature post")))],
        )
        assert recorder.calls == ["feature bg", "own bg", "step", "own post", "feature post"]

    def test_failing_background_skips_own_steps(self, reporter, recorder):
        steps = Steps().when("own", recorder.ok("own"))
        steps.add_backgrounds([Background(Steps().given("bg", recorder.fails("bg")))])
        steps.reporter = reporter
        with pytest.raises(StepError):
            steps.test()
        assert reporter.outcomes() == [("step", "bg", Severity.FAIL), ("step", "own", Severity.SKIP)]

    def test_rerun_does_not_duplicate(self, recorder):
        steps = Steps().when("own", recorder.ok("own"))
        steps.add_backgrounds([Background(Steps().given("bg", recorder.ok("bg")))])
        steps.add_post_steps([PostStep(Steps().then("post", recorder.ok("post")))])
        steps.test()
        steps.test()
        assert recorder.calls == ["bg", "own", "post"] * 2
        assert len(steps.steps) == 1

    def test_skip_steps_leaves_out_backgrounds(self, reporter, recorder):
        steps = Steps().when("own", recorder.ok("own")).then("more")
        steps.add_backgrounds([Background(Steps().given("bg"))])
        steps.add_post_steps([PostStep(Steps().then("post"))])
        steps.reporter = reporter
        steps.skip_steps()
        assert recorder.calls == []
        assert reporter.outcomes() == [("step", "own", Severity.SKIP), ("step", "more", Severity.SKIP)]


    def test_typed_background_rejected_when_added(self):
        steps = Steps().given("a")
        with pytest.raises(TypeError, match="expects data"):
            steps.add_backgrounds([Background(TypedSteps().given("bg", lambda data: None))])
        assert steps.backgrounds == []

    def test_typed_post_step_rejected_in_constructor(self):
        with pytest.raises(TypeError):
            Steps(post_steps=[PostStep(TypedSteps().then("post", lambda data: None))])


class TestTypedSteps:
    """Tests for TypedSteps."""

    def test_builders_create_typed_steps(self):
        steps = TypedSteps().given("a", lambda d: None).when("b", lambda: None).then("c", PENDING)
        assert all(isinstance(s, TypedStep) for s in steps)
        assert isinstance(steps.steps[0].behavior, Unary)
        assert isinstance(steps.steps[1].behavior, Unary)
        assert isinstance(steps.steps[2].behavior, Pending)

    def test_accepts_plain_steps(self, recorder):
        plain = Steps().given("a", recorder.ok("a")).when("b", PENDING).then("c")
        steps = TypedSteps().and_(plain)
        assert [s.keyword for s in steps] == [GherkinKeyword.GIVEN, GherkinKeyword.WHEN, GherkinKeyword.THEN]
        assert isinstance(steps.steps[0].behavior, Unary)
        assert isinstance(steps.steps[1].behavior, Pending)
        assert steps.steps[2].behavior is None

    def test_accepts_typed_steps(self, recorder):
        other = TypedSteps().given("a", recorder.ok_with_data("a"))
        steps = TypedSteps().then(other)
        assert steps.steps[0] is not other.steps[0]
        steps.with_data(5).test()
        assert recorder.calls == [("a", 5)]

    def test_data_reaches_every_step(self, recorder):
        steps = TypedSteps().given("a", recorder.ok_with_data("a")).then("b", recorder.ok_with_data("b"))
        steps.with_data("x").test()
        steps.with_data("y").test()
        assert recorder.calls == [("a", "x"), ("b", "x"), ("a", "y"), ("b", "y")]

    def test_plain_backgrounds_run_with_typed_steps(self, recorder):
        steps = TypedSteps(backgrounds=[Background(Steps().given("bg", recorder.ok("bg")))])
        steps.when("own", recorder.ok_with_data("own"))
        steps.with_data(1).test()
        assert recorder.calls == ["bg", ("own", 1)]

    def test_error_skips_remaining_steps(self, reporter, recorder):
        steps = TypedSteps().given("a", recorder.fails("a")).then("b", recorder.ok_with_data("b"))
        steps.reporter = reporter
        with pytest.raises(StepError):
            steps.with_data(1).test()
        assert recorder.calls == ["a"]
        assert reporter.outcomes() == [("step", "a", Severity.FAIL), ("step", "b", Severity.SKIP)]

    def test_skip_steps_binds_data_without_running(self, reporter, recorder):
        steps = TypedSteps().given("a", recorder.ok_with_data("a"))
        steps.add_backgrounds([Background(Steps().given("bg"))])
        steps.reporter = reporter
        steps.with_data(9).skip_steps()
        assert recorder.calls == []
        assert steps.steps[0].data == 9
        assert reporter.outcomes() == [("step", "a", Severity.SKIP)]


class TestBackgroundModel:
    """Tests for the Background and PostStep holders."""

    def test_background_wraps_steps(self):
        inner = Steps().given("a")
        assert Background(inner).steps is inner
        assert PostStep(inner).steps is inner

    def test_background_requires_steps(self):
        with pytest.raises(ValueError):
            Background("not steps")

    def test_step_copies_are_independent(self):
        original = Step(keyword="Given", description="a")
        copy = original.copy_step()
        copy.skip()
        assert original.status == []
