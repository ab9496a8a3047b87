# Copyright (c) Syntropy Systems
"""Tests for candidate classification."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from conftest import Recorder, raiser

from crosscheck import Experiment, Observation, Operation, Result
from crosscheck.classify import classify, ignoring, matching
from crosscheck.observation import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable


def obs(experiment: Experiment, name: str, value: Any = None, error: Exception | None = None) -> Observation:  # noqa: ANN401
    """Build an observation by hand."""
    return Observation(experiment=experiment, name=name, started_at=utcnow(), value=value, error=error)


class TestMatching:
    """Tests for matching()."""

    def test_equal_values_match(self) -> None:
        """Default comparator uses ==."""
        e = Experiment("m")
        assert matching(e, obs(e, "control", 1), obs(e, "candidate", 1))
        assert not matching(e, obs(e, "control", 1), obs(e, "candidate", 2))

    def test_custom_comparator(self) -> None:
        """The comparator decides value matches."""
        e = Experiment("m", comparator=lambda a, b: a.lower() == b.lower())
        assert matching(e, obs(e, "control", "ABC"), obs(e, "candidate", "abc"))

    def test_same_error_text_matches_without_comparator(self) -> None:
        """Two errors with equal messages match; the comparator is not called."""
        calls: list[tuple[object, object]] = []

        def comparator(a: object, b: object) -> bool:
            calls.append((a, b))
            return False

        e = Experiment("m", comparator=comparator)
        control = obs(e, "control", 1, ValueError("ok"))
        candidate = obs(e, "candidate", 1, RuntimeError("ok"))

        assert matching(e, control, candidate)
        assert calls == []

    def test_different_error_text_mismatches(self) -> None:
        """Errors with different messages do not match."""
        e = Experiment("m")
        assert not matching(
            e,
            obs(e, "control", error=ValueError("a")),
            obs(e, "candidate", error=ValueError("b")),
        )

    def test_error_never_matches_value(self) -> None:
        """One-sided errors never match, even with a permissive comparator."""
        e = Experiment("m", comparator=lambda a, b: True)
        assert not matching(e, obs(e, "control", 1), obs(e, "candidate", 1, ValueError("try")))
        assert not matching(e, obs(e, "control", 1, ValueError("try")), obs(e, "candidate", 1))

    def test_comparator_error_propagates(self) -> None:
        """matching() leaves comparator errors for the caller to record."""

        def comparator(a: object, b: object) -> bool:
            msg = "cannot compare"
            raise TypeError(msg)

        e = Experiment("m", comparator=comparator)
        with pytest.raises(TypeError, match="cannot compare"):
            _ = matching(e, obs(e, "control", 1), obs(e, "candidate", 2))


class TestIgnoring:
    """Tests for ignoring()."""

    def test_no_predicates(self) -> None:
        """Without predicates nothing is ignored."""
        e = Experiment("i")
        assert not ignoring(e, obs(e, "control", 1), obs(e, "candidate", 2))

    def test_first_true_wins(self) -> None:
        """Predicates run in registration order and stop at the first True."""
        calls: list[str] = []

        def make(label: str, answer: bool) -> Callable[[object, object], bool]:  # noqa: FBT001
            def predicate(a: object, b: object) -> bool:
                calls.append(label)
                return answer

            return predicate

        e = Experiment("i", ignores=[make("first", False), make("second", True), make("third", True)])

        assert ignoring(e, obs(e, "control", 1), obs(e, "candidate", 2))
        assert calls == ["first", "second"]

    def test_predicate_receives_values(self) -> None:
        """Predicates see control and candidate values in that order."""
        seen: list[tuple[object, object]] = []
        e = Experiment("i")
        _ = e.ignore(lambda a, b: seen.append((a, b)) is not None)

        _ = ignoring(e, obs(e, "control", "c"), obs(e, "candidate", "x"))

        assert seen == [("c", "x")]


class TestClassify:
    """Tests for classify() bookkeeping."""

    def test_match_goes_nowhere(self) -> None:
        """Exact matches are in neither list."""
        e = Experiment("c")
        r = Result(experiment=e)
        classify(r, obs(e, "control", 1), obs(e, "candidate", 1))

        assert r.ignored == []
        assert r.mismatched == []
        assert r.is_matched()

    def test_ignored(self) -> None:
        """An accepted mismatch lands in ignored."""
        e = Experiment("c", ignores=[lambda a, b: b == 2])
        r = Result(experiment=e)
        candidate = obs(e, "candidate", 2)
        classify(r, obs(e, "control", 1), candidate)

        assert r.ignored == [candidate]
        assert r.mismatched == []
        assert r.is_ignored()
        assert not r.is_matched()

    def test_ignore_not_consulted_on_match(self) -> None:
        """Ignore predicates only run for mismatches."""
        calls: list[bool] = []
        e = Experiment("c", ignores=[lambda a, b: calls.append(True) or True])
        r = Result(experiment=e)
        classify(r, obs(e, "control", 1), obs(e, "candidate", 1))

        assert calls == []

    def test_comparator_error_is_mismatch(self) -> None:
        """A comparator failure counts as a mismatch and is recorded."""

        def comparator(a: object, b: object) -> bool:
            msg = "compare"
            raise ValueError(msg)

        e = Experiment("c", comparator=comparator)
        r = Result(experiment=e)
        candidate = obs(e, "candidate", 1)
        classify(r, obs(e, "control", 1), candidate)

        assert r.mismatched == [candidate]
        assert [err.operation for err in r.errors] == [Operation.COMPARE]
        assert r.errors[0].experiment == "c"
        assert str(r.errors[0]) == "compare"

    def test_comparator_error_can_still_be_ignored(self) -> None:
        """After a comparator failure the ignore predicates still run."""

        def comparator(a: object, b: object) -> bool:
            msg = "compare"
            raise ValueError(msg)

        e = Experiment("c", comparator=comparator, ignores=[lambda a, b: True])
        r = Result(experiment=e)
        candidate = obs(e, "candidate", 1)
        classify(r, obs(e, "control", 1), candidate)

        assert r.ignored == [candidate]
        assert [err.operation for err in r.errors] == [Operation.COMPARE]

    def test_ignore_error_is_not_ignored(self) -> None:
        """A failing predicate stops ignore evaluation; candidate mismatches."""
        later: list[bool] = []

        def broken(a: object, b: object) -> bool:
            msg = "ignore"
            raise KeyError(msg)

        e = Experiment("c", ignores=[broken, lambda a, b: later.append(True) or True])
        r = Result(experiment=e)
        candidate = obs(e, "candidate", 2)
        classify(r, obs(e, "control", 1), candidate)

        assert r.mismatched == [candidate]
        assert r.ignored == []
        assert later == []
        assert [err.operation for err in r.errors] == [Operation.IGNORE]

    def test_compare_and_ignore_errors_both_recorded(self) -> None:
        """Both failures accumulate and the candidate is mismatched."""

        def comparator(a: object, b: object) -> bool:
            msg = "compare"
            raise ValueError(msg)

        def broken(a: object, b: object) -> bool:
            msg = "ignore"
            raise RuntimeError(msg)

        e = Experiment("c", comparator=comparator, ignores=[broken])
        r = Result(experiment=e)
        candidate = obs(e, "candidate", 1)
        classify(r, obs(e, "control", 1), candidate)

        assert r.mismatched == [candidate]
        assert [err.operation for err in r.errors] == [Operation.COMPARE, Operation.IGNORE]


class TestClassifyThroughRun:
    """Classification as seen from a full run."""

    def test_error_vs_value_mismatches(
        self, make_experiment: Callable[..., Experiment], recorder: Recorder
    ) -> None:
        """A candidate error with a control value is mismatched despite the comparator."""
        e = make_experiment("skip-compare", comparator=lambda a, b: True)
        _ = e.use(lambda: 1)
        _ = e.candidate(raiser("try"))

        assert e.run() == 1
        assert not recorder.result.is_matched()

    def test_permissive_comparator_matches_values(
        self, make_experiment: Callable[..., Experiment], recorder: Recorder
    ) -> None:
        """The comparator can accept differing values."""
        e = make_experiment("skip-compare", comparator=lambda a, b: True)
        _ = e.use(lambda: 1)
        _ = e.candidate(lambda: 2)

        assert e.run() == 1
        assert not recorder.result.is_mismatched()

    def test_same_errors_match(
        self, make_experiment: Callable[..., Experiment], recorder: Recorder
    ) -> None:
        """Control and candidate failing the same way match; control error is raised."""
        e = make_experiment("same-errors", comparator=lambda a, b: False)
        _ = e.use(raiser("ok"))
        _ = e.candidate(raiser("ok"))

        with pytest.raises(RuntimeError, match="ok"):
            _ = e.run()

        assert not recorder.result.is_mismatched()

    @pytest.mark.parametrize("concurrent", [False, True])
    def test_every_candidate_classified_once(
        self,
        make_experiment: Callable[..., Experiment],
        recorder: Recorder,
        concurrent: bool,  # noqa: FBT001
    ) -> None:
        """Each candidate is matched, ignored or mismatched exactly once."""
        e = make_experiment("mixed", ignores=[lambda a, b: b == "ignore-me"])
        _ = e.use(lambda: "value")
        _ = e.behavior("same", lambda: "value")
        _ = e.behavior("ignorable", lambda: "ignore-me")
        _ = e.behavior("different", lambda: "other")
        if concurrent:
            e.enable_concurrency()

        _ = e.run()

        result = recorder.result
        assert [c.name for c in result.candidates] == ["same", "ignorable", "different"]
        assert [c.name for c in result.ignored] == ["ignorable"]
        assert [c.name for c in result.mismatched] == ["different"]
