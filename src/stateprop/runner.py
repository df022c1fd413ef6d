"""Execution harness: generate, run, shrink, report.

TestRunner runs up to ``cases`` independent trials of a model against fresh
systems under test. The first failing trial (in trial order) is minimized
with the sequence shrink search and reported as a TestOutcome together with
the error it raised and the seed that regenerates it.

Reproducibility:
    The master seed fixes every per-trial seed up front. A trial's sequence
    depends only on its own seed, so results do not depend on ``workers``
    and ``replay_plan(..., seed=outcome.trial_seed)`` regenerates the
    original failing sequence and shrinks it again.

Thread Safety:
    Trials may run on a thread pool (``PlanConfig.workers``). Each trial
    owns its model clone, its SUT instance and its ``Random``. The template
    model is only read (deep-copied). The SUT factory must be callable from
    several threads when ``workers > 1``. Shrinking always runs on the
    calling thread.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Generator, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from itertools import islice
from random import Random, SystemRandom

from stateprop.builder import CommandSequenceStrategy
from stateprop.config import PlanConfig
from stateprop.constants import SEED_BITS
from stateprop.diagnostics import (
    Diagnostic,
    ErrorTemplate,
    ExecutionError,
    GenerationError,
    StatefulError,
    StatefulTestFailure,
    format_outcome,
)
from stateprop.model import StateMachine, SutFactory
from stateprop.sequence import CommandSequence
from stateprop.shrink import CommandSequenceTree

__all__ = [
    "Status",
    "TestOutcome",
    "TestRunner",
    "TrialResult",
    "check_plan",
    "execute_plan",
    "replay_plan",
]

logger = logging.getLogger(__name__)


class Status(StrEnum):
    """Overall result of a run."""

    PASSED = "passed"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class TestOutcome:
    """Result of executing a plan.

    Attributes:
        status: PASSED, FAILED (counterexample found) or ABORTED (generation error)
        seed: Master seed of the run
        cases_run: Trials up to and including the failing one
        trial_seed: Seed of the failing or aborted trial; pass it to
            ``replay_plan`` to reproduce
        counterexample: Minimal failing sequence (FAILED only)
        error: Error raised by the counterexample, or the generation error
        original_error: Error raised by the sequence as first generated
        original_length: Length of the sequence as first generated
        shrink_iterations: Candidate executions spent shrinking
    """

    __test__ = False

    status: Status
    seed: int
    cases_run: int
    trial_seed: int | None = None
    counterexample: CommandSequence[object, object] | None = None
    error: StatefulError | None = None
    original_error: StatefulError | None = None
    original_length: int = 0
    shrink_iterations: int = 0

    @property
    def passed(self) -> bool:
        """True if every trial passed."""
        return self.status is Status.PASSED

    @property
    def failure_changed(self) -> bool:
        """True if shrinking settled on a different kind of failure.

        Any failure of a smaller candidate is accepted while shrinking, so
        the reported error can differ from the one first observed.
        """
        if not isinstance(self.error, ExecutionError):
            return False
        if not isinstance(self.original_error, ExecutionError):
            return False
        return self.error.kind() != self.original_error.kind()

    @property
    def diagnostic(self) -> Diagnostic | None:
        """Summary diagnostic of a failed or aborted run, None if it passed."""
        if self.status is Status.PASSED or self.trial_seed is None:
            return None
        if self.status is Status.ABORTED:
            return ErrorTemplate.generation_aborted(self.trial_seed, str(self.error))
        length = 0 if self.counterexample is None else len(self.counterexample)
        return ErrorTemplate.counterexample_found(length, self.trial_seed, str(self.error))

    def raise_for_failure(self) -> None:
        """Raise StatefulTestFailure unless the run passed."""
        if not self.passed:
            raise StatefulTestFailure(self)

    def __str__(self) -> str:
        return format_outcome(self)


@dataclass(frozen=True, slots=True)
class TrialResult:
    """One generate-then-run attempt."""

    index: int
    seed: int
    tree: CommandSequenceTree[object, object] | None
    error: StatefulError | None


class TestRunner[C, R]:
    """Runs trials of one model against fresh systems under test.

    Example:
        >>> runner = TestRunner(CacheModel(10), lambda: SqliteCache(10), PlanConfig(seed=1))
        >>> outcome = runner.run()
        >>> outcome.passed
        True
    """

    __test__ = False

    __slots__ = ("_config", "_model", "_strategy", "_sut_factory")

    def __init__(
        self,
        model: StateMachine[C, R],
        sut_factory: SutFactory[C, R],
        config: PlanConfig | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            model: Reference model; used as a template and never mutated
            sut_factory: Builds a fresh system under test; called once per
                trial and once per shrink candidate
            config: Run configuration (default: PlanConfig())
        """
        self._model = model
        self._sut_factory = sut_factory
        self._config = config or PlanConfig()
        self._strategy = CommandSequenceStrategy.from_config(model, self._config)

    @property
    def config(self) -> PlanConfig:
        """Configuration this runner was built with."""
        return self._config

    def run(self) -> TestOutcome:
        """Run up to ``cases`` trials, shrinking the first failure.

        Returns:
            Outcome of the run. Failing and aborted runs are reported as
            values; only bugs in the model or factory propagate.
        """
        seed = self._config.seed
        if seed is None:
            seed = SystemRandom().getrandbits(SEED_BITS)
        master = Random(seed)
        trial_seeds = [master.getrandbits(SEED_BITS) for _ in range(self._config.cases)]

        logger.info(
            "Running %d case(s) with seed %d (sequence size %d..%d, workers=%d)",
            self._config.cases,
            seed,
            self._config.min_sequence_size,
            self._config.max_sequence_size,
            self._config.workers,
        )

        trials = self._run_trials(trial_seeds)
        try:
            failed = next((trial for trial in trials if trial.error is not None), None)
        finally:
            # Drains the pool before shrinking starts.
            trials.close()
        if failed is not None:
            return self._conclude(failed, seed)

        logger.info("Passed %d case(s) (seed %d)", self._config.cases, seed)
        return TestOutcome(status=Status.PASSED, seed=seed, cases_run=self._config.cases)

    def replay(self, trial_seed: int) -> TestOutcome:
        """Regenerate and rerun the single trial identified by ``trial_seed``.

        Args:
            trial_seed: ``TestOutcome.trial_seed`` of an earlier run

        Returns:
            Outcome of that one trial, shrunk again if it fails
        """
        logger.info("Replaying trial seed %d", trial_seed)
        trial = self.run_trial(trial_seed)
        if trial.error is None:
            return TestOutcome(status=Status.PASSED, seed=trial_seed, cases_run=1)
        return self._conclude(trial, trial_seed)

    def run_trial(self, trial_seed: int, index: int = 0) -> TrialResult:
        """Generate one sequence from ``trial_seed`` and run it on a fresh SUT."""
        rng = Random(trial_seed)
        try:
            tree = self._strategy.new_tree(rng)
        except GenerationError as exc:
            logger.debug("Case %d aborted during generation: %s", index, exc)
            return TrialResult(index=index, seed=trial_seed, tree=None, error=exc)

        error = self._execute(tree.current())
        if error is None:
            logger.debug("Case %d passed (%d command(s))", index, tree.num_elements)
        return TrialResult(index=index, seed=trial_seed, tree=tree, error=error)

    def shrink(
        self, tree: CommandSequenceTree[C, R], error: ExecutionError
    ) -> tuple[CommandSequence[C, R], ExecutionError, int]:
        """Minimize a failing sequence.

        Alternates ``simplify()`` and candidate execution on a fresh SUT:
        a failing candidate is kept and simplified further, a passing one
        is reverted with ``complicate()``. Stops when the search is
        exhausted, a revert is impossible, or the shrink budget is spent.

        Args:
            tree: Tree positioned at the failing sequence
            error: Error the failing sequence raised

        Returns:
            (last failing sequence executed, its error, candidates executed)
        """
        best = tree.current()
        best_error = error
        budget = self._config.max_shrink_iters
        iterations = 0

        if budget > 0 and tree.simplify():
            while True:
                if iterations >= budget:
                    logger.warning(
                        "Shrink budget of %d iteration(s) exhausted; counterexample may not be minimal",
                        budget,
                    )
                    break
                iterations += 1
                candidate = tree.current()
                failure = self._execute(candidate)
                if failure is not None:
                    best, best_error = candidate, failure
                    if not tree.simplify():
                        break
                elif not tree.complicate():
                    break

        return best, best_error, iterations

    def _conclude(self, trial: TrialResult, seed: int) -> TestOutcome:
        """Turn a failed or aborted trial into an outcome."""
        if trial.tree is None or not isinstance(trial.error, ExecutionError):
            outcome = TestOutcome(
                status=Status.ABORTED,
                seed=seed,
                cases_run=trial.index + 1,
                trial_seed=trial.seed,
                error=trial.error,
            )
            logger.error(
                "Generation aborted in case %d (trial seed %d): %s",
                trial.index,
                trial.seed,
                trial.error,
            )
            return outcome

        original_length = trial.tree.num_elements
        logger.info(
            "Case %d failed with %d command(s) (trial seed %d): %s",
            trial.index,
            original_length,
            trial.seed,
            trial.error,
        )
        counterexample, error, iterations = self.shrink(trial.tree, trial.error)
        outcome = TestOutcome(
            status=Status.FAILED,
            seed=seed,
            cases_run=trial.index + 1,
            trial_seed=trial.seed,
            counterexample=counterexample,
            error=error,
            original_error=trial.error,
            original_length=original_length,
            shrink_iterations=iterations,
        )
        logger.info(
            "Shrunk counterexample from %d to %d command(s) in %d iteration(s)",
            original_length,
            len(counterexample),
            iterations,
        )
        if outcome.failure_changed:
            logger.warning(
                "Shrinking settled on a different failure (%s) than the original (%s)",
                error.kind(),
                trial.error.kind(),
            )
        return outcome

    def _execute(self, sequence: CommandSequence[C, R]) -> ExecutionError | None:
        """Run ``sequence`` on a fresh SUT; return its error, if any."""
        sut = self._sut_factory()
        try:
            sequence.run(sut)
        except ExecutionError as exc:
            return exc
        return None

    def _run_trials(self, trial_seeds: Iterable[int]) -> Generator[TrialResult]:
        """Yield trials in index order, on a thread pool when configured.

        At most ``workers`` trials are in flight. The next trial is only
        submitted after the consumer has taken a result, so closing the
        generator stops new trials and waits for the running ones.
        """
        workers = self._config.workers
        if workers == 1:
            for index, trial_seed in enumerate(trial_seeds):
                yield self.run_trial(trial_seed, index)
            return

        pending_seeds = enumerate(trial_seeds)
        in_flight: deque[Future[TrialResult]] = deque()
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stateprop-trial")
        try:
            for index, trial_seed in islice(pending_seeds, workers):
                in_flight.append(pool.submit(self.run_trial, trial_seed, index))
            while in_flight:
                yield in_flight.popleft().result()
                for index, trial_seed in islice(pending_seeds, 1):
                    in_flight.append(pool.submit(self.run_trial, trial_seed, index))
        finally:
            pool.shutdown(wait=True, cancel_futures=True)


def execute_plan[C, R](
    model: StateMachine[C, R],
    sut_factory: SutFactory[C, R],
    config: PlanConfig | None = None,
) -> TestOutcome:
    """Run a stateful plan and return its outcome.

    Args:
        model: Reference model
        sut_factory: Builds a fresh system under test
        config: Run configuration (default: PlanConfig())

    Returns:
        TestOutcome; inspect ``status`` or call ``raise_for_failure()``

    Example:
        >>> outcome = execute_plan(CounterModel(), Counter, PlanConfig(cases=50))
        >>> if not outcome.passed:
        ...     print(outcome)
    """
    return TestRunner(model, sut_factory, config).run()


def check_plan[C, R](
    model: StateMachine[C, R],
    sut_factory: SutFactory[C, R],
    config: PlanConfig | None = None,
) -> TestOutcome:
    """Run a stateful plan, raising on failure. Convenient inside pytest tests.

    Raises:
        StatefulTestFailure: If a counterexample was found or generation aborted
    """
    outcome = execute_plan(model, sut_factory, config)
    outcome.raise_for_failure()
    return outcome


def replay_plan[C, R](
    model: StateMachine[C, R],
    sut_factory: SutFactory[C, R],
    seed: int,
    config: PlanConfig | None = None,
) -> TestOutcome:
    """Rerun the single trial identified by ``seed`` (``TestOutcome.trial_seed``).

    The sequence, size and shrink settings of ``config`` must match the
    original run for the same sequence to be regenerated.
    """
    return TestRunner(model, sut_factory, config).replay(seed)
