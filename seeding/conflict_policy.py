"""
SHOPSEED — Conflict Policy for junction phases.

A junction row rejected for an expected reason (duplicate pairing, unmet
business rule) is skipped and counted; any other rejection aborts the run.
Each attempt runs inside a SAVEPOINT so a rejected row leaves the phase
transaction usable.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from sqlalchemy.engine import Connection

from seeding.errors import ErrorKind, StoreWriteError, TolerableConflict
from utils.logging_config import get_logger

log = get_logger("conflicts")


@dataclass
class Outcome:
    value: object = None
    skipped: TolerableConflict | None = None

    @property
    def ok(self) -> bool:
        return self.skipped is None


class ConflictPolicy:
    """Classify junction insert failures as tolerable or fatal."""

    def __init__(self, relation: str, tolerable: Iterable[ErrorKind] = ()):
        self.relation = relation
        self.tolerable = frozenset(tolerable)
        self.skipped: dict[ErrorKind, int] = {}

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    def is_tolerable(self, error: StoreWriteError) -> bool:
        return error.kind in self.tolerable

    def attempt(self, action: Callable[[], object], conn: Connection | None = None) -> Outcome:
        """Run *action*; absorb tolerable StoreWriteErrors, re-raise the rest.

        With *conn* given and tolerable kinds declared, the action is wrapped
        in ``conn.begin_nested()`` so that the store discards only the
        rejected row.
        """
        try:
            if conn is not None and self.tolerable:
                with conn.begin_nested():
                    return Outcome(value=action())
            return Outcome(value=action())
        except StoreWriteError as err:
            if not self.is_tolerable(err):
                raise
            conflict = TolerableConflict(self.relation, err)
            self.skipped[err.kind] = self.skipped.get(err.kind, 0) + 1
            log.debug("%s", conflict)
            return Outcome(skipped=conflict)
