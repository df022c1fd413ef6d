"""Fuzz testing infrastructure for stateprop.

This package contains:
- test_shrink_tree_state_machine: RuleBasedStateMachine driving the
  sequence shrink search against a shadow copy of its state
- test_plan_oracle: whole plans against the SQLite cache for many seeds

Python 3.13+.
"""
