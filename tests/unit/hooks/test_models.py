"""Tests for reconciliation models and run summaries."""

from pathlib import Path

import pytest

from leakguard.hooks.models import (
    HookState,
    ReconciliationOutcome,
    ReconciliationResult,
    RepositoryRef,
    RunSummary,
)


def result(name, outcome):
    return ReconciliationResult(repo=RepositoryRef(Path("/src") / name), outcome=outcome)


class TestRunSummary:
    def test_empty_summary(self):
        summary = RunSummary()

        assert summary.found == 0
        assert summary.exit_code == 0

    def test_counts_per_outcome(self):
        summary = RunSummary()
        for name, outcome in [
            ("a", ReconciliationOutcome.UPDATED),
            ("b", ReconciliationOutcome.UPDATED),
            ("c", ReconciliationOutcome.UNCHANGED),
            ("d", ReconciliationOutcome.SKIPPED),
        ]:
            summary.record(result(name, outcome))

        assert summary.found == 4
        assert summary.updated == 2
        assert summary.unchanged == 1
        assert summary.skipped == 1
        assert summary.failed == 0
        assert summary.exit_code == 0

    def test_any_failure_sets_exit_code(self):
        summary = RunSummary()
        summary.record(result("a", ReconciliationOutcome.UPDATED))
        summary.record(result("b", ReconciliationOutcome.FAILED))

        assert summary.exit_code == 1

    def test_skipped_alone_does_not_fail_the_run(self):
        summary = RunSummary()
        summary.record(result("a", ReconciliationOutcome.SKIPPED))

        assert summary.exit_code == 0

    def test_merge_keeps_both_and_leaves_inputs_alone(self):
        first, second = RunSummary(), RunSummary()
        first.record(result("a", ReconciliationOutcome.UPDATED))
        second.record(result("b", ReconciliationOutcome.FAILED))

        merged = first.merge(second)

        assert merged.found == 2
        assert merged.failed == 1
        assert first.found == 1
        assert second.found == 1


@pytest.mark.parametrize(
    "outcome, success",
    [
        (ReconciliationOutcome.UPDATED, True),
        (ReconciliationOutcome.UNCHANGED, True),
        (ReconciliationOutcome.FAILED, False),
        (ReconciliationOutcome.SKIPPED, False),
    ],
)
def test_outcome_success(outcome, success):
    assert outcome.is_success is success


def test_every_state_has_a_strategy():
    for state in HookState:
        assert state.strategy


def test_result_strategy_before_classification():
    assert result("a", ReconciliationOutcome.SKIPPED).strategy == "-"


def test_repository_ref_paths_and_ordering():
    a, b = RepositoryRef(Path("/src/a")), RepositoryRef(Path("/src/b"))

    assert a.native_hooks_dir == Path("/src/a/.git/hooks")
    assert str(a) == "/src/a"
    assert sorted([b, a]) == [a, b]
    assert len({a, RepositoryRef(Path("/src/a"))}) == 1
