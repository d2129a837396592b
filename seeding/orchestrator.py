"""
SHOPSEED — Phase Orchestrator
Probe the store, then run every phase in dependency order over a single
connection. Each phase either fills its pool or the run fails with
PhaseFailed naming the phase.

    IDLE → PROBING → GENERATING → COMPLETED
                  ↘            ↘
                    FAILED       FAILED
"""

import time
from collections.abc import Iterable
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from functools import partial

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from seeding.conflict_policy import ConflictPolicy
from seeding.errors import DependencyError, PhaseFailed, StoreUnreachable
from seeding.fake_values import FakeValueProvider
from seeding.graph import DependencyGraph
from seeding.identifier_pool import IdentifierPool
from seeding.phases import PHASES, Phase, PhaseContext
from seeding.readiness import wait_until_ready
from seeding.settings import SeedSettings
from seeding.store import InsertionEngine
from utils.logging_config import get_logger

log = get_logger("orchestrator")


class RunState(str, Enum):
    IDLE = "idle"
    PROBING = "probing"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PhaseResult:
    entity: str
    table: str
    inserted: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())


@dataclass
class RunReport:
    probe_attempts: int = 0
    phases: list[PhaseResult] = field(default_factory=list)
    pool_sizes: dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def inserted_total(self) -> int:
        return sum(p.inserted for p in self.phases)

    @property
    def skipped_total(self) -> int:
        return sum(p.skipped_total for p in self.phases)

    def phase(self, entity: str) -> PhaseResult:
        for result in self.phases:
            if result.entity == entity:
                return result
        raise KeyError(entity)


class SeedRun:
    """One seeding run against one store. Not reusable."""

    def __init__(
        self,
        engine: Engine,
        settings: SeedSettings | None = None,
        phases: Iterable[Phase] | None = None,
        only: Iterable[str] | None = None,
        fake: FakeValueProvider | None = None,
        sleep=time.sleep,
    ):
        self.engine = engine
        self.settings = settings or SeedSettings()
        self.graph = DependencyGraph(phases if phases is not None else PHASES)
        self.plan = self.graph.subset(list(only)) if only else self.graph.order()
        self.pools = IdentifierPool(seed=self.settings.seed)
        self.fake = fake or FakeValueProvider(seed=self.settings.seed)
        self.sleep = sleep
        self.state = RunState.IDLE
        self.current_phase: str | None = None
        self.report = RunReport()

    # ---- public ------------------------------------------------------
    def run(self) -> RunReport:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"run already {self.state.value}")
        started = time.monotonic()

        self.state = RunState.PROBING
        try:
            self.report.probe_attempts = wait_until_ready(
                self.engine,
                self.settings.max_attempts,
                self.settings.delay,
                sleep=self.sleep,
            )
        except StoreUnreachable:
            self.state = RunState.FAILED
            raise

        self.state = RunState.GENERATING
        log.info("Running %d phase(s): %s", len(self.plan),
                 " → ".join(p.entity for p in self.plan))
        try:
            conn = self._connect()
            with conn:
                self._run_phases(conn)
        except Exception:
            self.state = RunState.FAILED
            raise
        finally:
            self.report.pool_sizes = self.pools.sizes()
            self.report.elapsed = time.monotonic() - started

        self.state = RunState.COMPLETED
        self.current_phase = None
        log.info("Seed complete: %d row(s) in %d phase(s), %d skipped, %.1fs",
                 self.report.inserted_total, len(self.report.phases),
                 self.report.skipped_total, self.report.elapsed)
        return self.report

    # ---- private -----------------------------------------------------
    def _connect(self) -> Connection:
        # the store can still drop between a successful probe and this call
        try:
            return self.engine.connect()
        except DBAPIError as exc:
            log.error("Store lost after readiness probe: %s", exc.orig or exc)
            raise StoreUnreachable(self.report.probe_attempts, exc) from exc

    def _run_phases(self, conn: Connection) -> None:
        store = InsertionEngine(conn)
        atomic = self.settings.atomic
        with conn.begin() if atomic else nullcontext():
            for i, phase in enumerate(self.plan, 1):
                self.current_phase = phase.entity
                log.info("[%d/%d] %s...", i, len(self.plan), phase.entity)
                try:
                    # atomic: one SAVEPOINT per phase inside the run transaction
                    with conn.begin_nested() if atomic else conn.begin():
                        result = self._run_phase(phase, conn, store)
                except Exception as exc:
                    log.error("Phase '%s' failed: %s", phase.entity, exc)
                    raise PhaseFailed(phase.entity, exc) from exc
                self.report.phases.append(result)

    def _check_prerequisites(self, phase: Phase) -> None:
        for parent in phase.requires:
            if parent not in self.pools:
                raise DependencyError(
                    f"phase '{phase.entity}' started before '{parent}' completed"
                )

    def _run_phase(self, phase: Phase, conn: Connection, store: InsertionEngine) -> PhaseResult:
        self._check_prerequisites(phase)
        started = time.monotonic()
        ctx = PhaseContext(phase, self.pools, self.fake, store, self.settings)
        policy = ConflictPolicy(phase.entity, phase.tolerable)
        result = PhaseResult(phase.entity, phase.table)

        for row in phase.build(ctx):
            outcome = policy.attempt(
                partial(store.insert, phase.table, row, returning=phase.id_column),
                conn=conn,
            )
            if not outcome.ok:
                continue
            result.inserted += 1
            if not phase.is_junction:
                self.pools.add(phase.entity, outcome.value)

        # a phase with zero rows still counts as completed for its dependents
        self.pools.register(phase.entity)
        result.skipped = {kind.value: n for kind, n in policy.skipped.items()}
        result.elapsed = time.monotonic() - started

        log.info("  ✓ %s: %d row(s) inserted", phase.table, result.inserted)
        if result.skipped_total:
            log.info("    %d tolerated conflict(s) skipped: %s",
                     result.skipped_total,
                     ", ".join(f"{k}={n}" for k, n in sorted(result.skipped.items())))
        return result


def seed(engine: Engine, settings: SeedSettings | None = None, **kwargs) -> RunReport:
    """Convenience wrapper: build a SeedRun and run it."""
    return SeedRun(engine, settings, **kwargs).run()
