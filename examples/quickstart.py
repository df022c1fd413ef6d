"""Quickstart example for stateprop.

Tests a small counter against a reference model. The counter has a bug that
only shows up for large increments; stateprop finds it and shrinks the
failing sequence down to a single command.

Run: python examples/quickstart.py
"""

import logging
from dataclasses import dataclass

from stateprop import PlanConfig, PostconditionError, execute_plan, replay_plan
from stateprop.strategy import builds, integers, just


@dataclass(frozen=True)
class Inc:
    amount: int


@dataclass(frozen=True)
class Dec:
    pass


class CounterModel:
    """Reference model: the counter is just an int."""

    def __init__(self) -> None:
        self.value = 0

    def reset(self) -> None:
        self.value = 0

    def commands(self):
        options = [(3, builds(Inc, integers(1, 100)))]
        # Only decrement a positive counter.
        if self.value > 0:
            options.append((1, just(Dec())))
        return options

    def postcondition(self, cmd, result) -> None:
        expected = self.value + cmd.amount if isinstance(cmd, Inc) else self.value - 1
        if result != expected:
            raise PostconditionError(cmd, expected, result)

    def next_state(self, cmd) -> None:
        self.value += cmd.amount if isinstance(cmd, Inc) else -1


class Counter:
    """The real system. Increments above 90 are off by one."""

    def __init__(self) -> None:
        self.value = 0

    def run(self, cmd) -> int:
        if isinstance(cmd, Inc):
            self.value += cmd.amount + (1 if cmd.amount > 90 else 0)
        else:
            self.value -= 1
        return self.value


logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

# Example 1: find and shrink a counterexample
print("=" * 50)
print("Example 1: Shrinking a Failure")
print("=" * 50)

config = PlanConfig(cases=100, seed=1, shrink_commands=True)
outcome = execute_plan(CounterModel(), Counter, config)
print(outcome)
# Found minimal failing case: 1 command(s) ...
#   #0 Inc(amount=91)

# Example 2: replay the failing trial from its seed
print("\n" + "=" * 50)
print("Example 2: Replaying a Trial")
print("=" * 50)

if outcome.trial_seed is not None:
    replayed = replay_plan(CounterModel(), Counter, outcome.trial_seed, config)
    print(f"Replayed status: {replayed.status}")
    print(f"Same counterexample: {replayed.counterexample == outcome.counterexample}")
