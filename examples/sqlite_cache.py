"""Model-based testing of a bounded cache backed by SQLite.

The cache under test follows these rules:

* Values can be read by searching for their key
* The cache can be emptied on demand
* The cache holds at most ``size`` entries
* Once full, writing a new key replaces the oldest written entry
* Overwriting a key, even with a new value, keeps its position

``FaultyCache`` breaks the last rule by re-inserting overwritten keys. The
reference model keeps a dict of entries tagged with their insertion index
and predicts every ``get``; only a write that evicts after an overwrite
reveals the difference.

Run: python examples/sqlite_cache.py
"""

from __future__ import annotations

import sqlite3
import sys
from dataclasses import dataclass

from stateprop import PlanConfig, PostconditionError, execute_plan
from stateprop.strategy import builds, integers, just, one_of

CACHE_SIZE = 3
MAX_COMMANDS = 100


@dataclass(frozen=True)
class Get:
    key: int


@dataclass(frozen=True)
class Put:
    key: int
    value: int


@dataclass(frozen=True)
class Flush:
    pass


class Cache:
    """In-memory SQLite table with FIFO eviction."""

    def __init__(self, size: int) -> None:
        self.size = size
        self.conn = sqlite3.connect(":memory:")
        self.conn.execute(
            "create table cache (id integer primary key, key integer unique, val integer)"
        )

    def get(self, key: int) -> int | None:
        row = self.conn.execute("select val from cache where key = ?", (key,)).fetchone()
        return None if row is None else row[0]

    def put(self, key: int, val: int) -> None:
        with self.conn:
            updated = self.conn.execute("update cache set val = ? where key = ?", (val, key))
            if updated.rowcount:
                return
            self._insert(key, val)

    def flush(self) -> None:
        with self.conn:
            self.conn.execute("delete from cache")

    def _insert(self, key: int, val: int) -> None:
        (count,) = self.conn.execute("select count(*) from cache").fetchone()
        if count >= self.size:
            self.conn.execute("delete from cache where id = (select min(id) from cache)")
        self.conn.execute("insert into cache (key, val) values (?, ?)", (key, val))

    def run(self, cmd: Get | Put | Flush) -> int | None:
        match cmd:
            case Get(key=key):
                return self.get(key)
            case Put(key=key, value=value):
                self.put(key, value)
            case Flush():
                self.flush()
        return None


class FaultyCache(Cache):
    """Overwrites move the key to the newest position."""

    def put(self, key: int, val: int) -> None:
        with self.conn:
            self.conn.execute("delete from cache where key = ?", (key,))
            self._insert(key, val)


class CacheModel:
    """Reference model: key -> (insertion index, value)."""

    def __init__(self, size: int) -> None:
        self.size = size
        self.entries: dict[int, tuple[int, int]] = {}
        self.counter = 0

    def reset(self) -> None:
        self.entries = {}
        self.counter = 0

    def commands(self):
        # Half of the keys collide on a small range so overwrites happen.
        keys = one_of(integers(1, self.size), integers(-(2**31), 2**31 - 1))
        options = [
            (1, builds(Get, keys)),
            (3, builds(Put, keys, integers(-(2**31), 2**31 - 1))),
        ]
        if self.entries:
            options.append((1, just(Flush())))
        return options

    def postcondition(self, cmd, result) -> None:
        if isinstance(cmd, Get):
            entry = self.entries.get(cmd.key)
            expected = None if entry is None else entry[1]
            if result != expected:
                raise PostconditionError(cmd, expected, result)

    def next_state(self, cmd) -> None:
        if isinstance(cmd, Flush):
            self.reset()
        elif isinstance(cmd, Put):
            if cmd.key in self.entries:
                index, _old = self.entries[cmd.key]
                self.entries[cmd.key] = (index, cmd.value)
                return
            if len(self.entries) >= self.size:
                oldest = min(self.entries, key=lambda k: self.entries[k][0])
                del self.entries[oldest]
            self.entries[cmd.key] = (self.counter, cmd.value)
            self.counter += 1


def check(name: str, factory) -> bool:
    """Run one plan and print its report."""
    config = PlanConfig(max_sequence_size=MAX_COMMANDS, max_shrink_iters=500, seed=2021)
    outcome = execute_plan(CacheModel(CACHE_SIZE), factory, config)
    print(f"--- {name} ---")
    print(outcome)
    return outcome.passed


def main() -> int:
    correct = check("Cache", lambda: Cache(CACHE_SIZE))
    faulty = check("FaultyCache", lambda: FaultyCache(CACHE_SIZE))
    return 0 if correct and not faulty else 1


if __name__ == "__main__":
    sys.exit(main())
