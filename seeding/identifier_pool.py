"""
SHOPSEED — Identifier Pool
Per entity type, the ordered primary keys produced so far in this run.
Later phases draw foreign keys from here instead of re-reading the store.
"""

from collections.abc import Iterable

import numpy as np

from seeding.errors import EmptyPool, InsufficientPopulation, UndeclaredDependency


class IdentifierPool:
    """Append-only id collections keyed by entity type."""

    def __init__(self, rng: np.random.Generator | None = None, seed: int | None = None):
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._ids: dict[str, list] = {}

    # ---- writes ------------------------------------------------------
    def add(self, entity: str, record_id) -> None:
        if record_id is None:
            raise ValueError(f"cannot add a null id to pool '{entity}'")
        self._ids.setdefault(entity, []).append(record_id)

    def register(self, entity: str) -> None:
        """Make an entity known with zero ids (a phase that produced nothing)."""
        self._ids.setdefault(entity, [])

    # ---- reads -------------------------------------------------------
    def ids(self, entity: str) -> tuple:
        return tuple(self._ids.get(entity, ()))

    def size(self, entity: str) -> int:
        return len(self._ids.get(entity, ()))

    def sizes(self) -> dict[str, int]:
        return {entity: len(ids) for entity, ids in self._ids.items()}

    def __contains__(self, entity: str) -> bool:
        return entity in self._ids

    def pick_one(self, entity: str):
        ids = self._ids.get(entity)
        if not ids:
            raise EmptyPool(entity)
        return ids[int(self._rng.integers(len(ids)))]

    def pick_distinct(self, entity: str, k: int) -> list:
        if k < 0:
            raise ValueError(f"k must be >= 0, got {k}")
        ids = self._ids.get(entity, [])
        if k > len(ids):
            if not ids:
                raise EmptyPool(entity)
            raise InsufficientPopulation(entity, k, len(ids))
        if k == 0:
            return []
        positions = self._rng.choice(len(ids), size=k, replace=False)
        return [ids[int(p)] for p in positions]

    def pick_one_or_null(self, entity: str, null_probability: float):
        if not 0.0 <= null_probability <= 1.0:
            raise ValueError(f"null_probability must be in [0, 1], got {null_probability}")
        if self._rng.random() < null_probability:
            return None
        return self.pick_one(entity)

    def draw_count(self, low: int, high: int) -> int:
        """Inclusive integer in [low, high], from the same random stream."""
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        return int(self._rng.integers(low, high + 1))


class PoolView:
    """Read-only window on a pool, limited to a phase's prerequisites."""

    def __init__(self, pool: IdentifierPool, phase: str, allowed: Iterable[str]):
        self._pool = pool
        self._phase = phase
        self._allowed = frozenset(allowed)

    def _check(self, entity: str) -> None:
        if entity not in self._allowed:
            raise UndeclaredDependency(self._phase, entity)

    def ids(self, entity: str) -> tuple:
        self._check(entity)
        return self._pool.ids(entity)

    def size(self, entity: str) -> int:
        self._check(entity)
        return self._pool.size(entity)

    def pick_one(self, entity: str):
        self._check(entity)
        return self._pool.pick_one(entity)

    def pick_distinct(self, entity: str, k: int) -> list:
        self._check(entity)
        return self._pool.pick_distinct(entity, k)

    def pick_one_or_null(self, entity: str, null_probability: float):
        self._check(entity)
        return self._pool.pick_one_or_null(entity, null_probability)
