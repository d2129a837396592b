"""
SHOPSEED — Error taxonomy and store error classification.

Fatal conditions unwind the whole run; TolerableConflict is recovered
locally by the junction phases (see conflict_policy.py).
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Structured reason attached to a failed write."""

    UNIQUE_VIOLATION = "unique_violation"
    BUSINESS_RULE = "business_rule"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    CHECK_VIOLATION = "check_violation"
    NOT_NULL_VIOLATION = "not_null_violation"
    CONNECTION = "connection"
    OTHER = "other"


class SeedError(Exception):
    """Base class for every seeding failure."""


class StoreUnreachable(SeedError):
    """The readiness probe ran out of attempts."""

    def __init__(self, attempts: int, cause: BaseException | None = None):
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"store unreachable after {attempts} attempt(s): {cause}")


class StoreWriteError(SeedError):
    """An insert was rejected by the store."""

    def __init__(self, table: str, kind: ErrorKind, cause: BaseException):
        self.table = table
        self.kind = kind
        self.cause = cause
        super().__init__(f"insert into {table} failed ({kind.value}): {_first_line(cause)}")


class InsufficientPopulation(SeedError):
    """A phase asked for more distinct identifiers than a pool holds."""

    def __init__(self, entity: str, requested: int, available: int):
        self.entity = entity
        self.requested = requested
        self.available = available
        super().__init__(
            f"pool '{entity}' holds {available} id(s), {requested} requested"
        )


class EmptyPool(InsufficientPopulation):
    """A pool was read before any phase populated it."""

    def __init__(self, entity: str):
        super().__init__(entity, 1, 0)


class UndeclaredDependency(SeedError):
    """A phase read a pool it did not list among its prerequisites."""

    def __init__(self, phase: str, entity: str):
        self.phase = phase
        self.entity = entity
        super().__init__(f"phase '{phase}' read pool '{entity}' without declaring it")


class DependencyError(SeedError):
    """The phase table cannot be ordered (cycle, unknown or duplicate phase)."""


class TolerableConflict(SeedError):
    """A junction insert was rejected for an expected reason and skipped."""

    def __init__(self, relation: str, error: StoreWriteError):
        self.relation = relation
        self.error = error
        super().__init__(f"{relation}: skipped ({error.kind.value})")


class PhaseFailed(SeedError):
    """Raised by the orchestrator; names the phase that aborted the run."""

    def __init__(self, phase: str, cause: BaseException):
        self.phase = phase
        self.cause = cause
        super().__init__(f"phase '{phase}' failed: {cause}")


def _first_line(exc: BaseException) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


# ═════════════════════════════════════════════════════════════════════
#  NATIVE ERROR CODES → ErrorKind
# ═════════════════════════════════════════════════════════════════════
# PostgreSQL SQLSTATE (psycopg / psycopg2)
_PG_SQLSTATE = {
    "23505": ErrorKind.UNIQUE_VIOLATION,
    "P0001": ErrorKind.BUSINESS_RULE,       # RAISE EXCEPTION in a trigger
    "23503": ErrorKind.FOREIGN_KEY_VIOLATION,
    "23514": ErrorKind.CHECK_VIOLATION,
    "23502": ErrorKind.NOT_NULL_VIOLATION,
}

# MySQL / MariaDB server and client error numbers (PyMySQL)
_MYSQL_ERRNO = {
    1062: ErrorKind.UNIQUE_VIOLATION,       # ER_DUP_ENTRY
    1586: ErrorKind.UNIQUE_VIOLATION,       # ER_DUP_ENTRY_WITH_KEY_NAME
    1644: ErrorKind.BUSINESS_RULE,          # ER_SIGNAL_EXCEPTION
    1451: ErrorKind.FOREIGN_KEY_VIOLATION,
    1452: ErrorKind.FOREIGN_KEY_VIOLATION,
    3819: ErrorKind.CHECK_VIOLATION,
    1048: ErrorKind.NOT_NULL_VIOLATION,
    2003: ErrorKind.CONNECTION,
    2006: ErrorKind.CONNECTION,
    2013: ErrorKind.CONNECTION,
}

# SQLite extended result codes (sqlite3)
_SQLITE_CODE = {
    2067: ErrorKind.UNIQUE_VIOLATION,       # SQLITE_CONSTRAINT_UNIQUE
    1555: ErrorKind.UNIQUE_VIOLATION,       # SQLITE_CONSTRAINT_PRIMARYKEY
    1811: ErrorKind.BUSINESS_RULE,          # SQLITE_CONSTRAINT_TRIGGER
    787: ErrorKind.FOREIGN_KEY_VIOLATION,   # SQLITE_CONSTRAINT_FOREIGNKEY
    275: ErrorKind.CHECK_VIOLATION,         # SQLITE_CONSTRAINT_CHECK
    1299: ErrorKind.NOT_NULL_VIOLATION,     # SQLITE_CONSTRAINT_NOTNULL
}


def classify(error: BaseException) -> ErrorKind:
    """Map a driver exception (or SQLAlchemy wrapper) to an ErrorKind.

    Only the structured code the driver attaches is consulted:
    ``sqlstate``/``pgcode`` for PostgreSQL, ``args[0]`` for MySQL and
    ``sqlite_errorcode`` for SQLite. Unknown codes are ``OTHER``, or
    ``CONNECTION`` when SQLAlchemy flagged the connection as invalidated.
    """
    orig = getattr(error, "orig", None) or error

    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        if sqlstate in _PG_SQLSTATE:
            return _PG_SQLSTATE[sqlstate]
        if sqlstate.startswith("08"):
            return ErrorKind.CONNECTION
        return ErrorKind.OTHER

    sqlite_code = getattr(orig, "sqlite_errorcode", None)
    if sqlite_code is not None:
        return _SQLITE_CODE.get(sqlite_code, ErrorKind.OTHER)

    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int) and args[0] in _MYSQL_ERRNO:
        return _MYSQL_ERRNO[args[0]]

    if getattr(error, "connection_invalidated", False):
        return ErrorKind.CONNECTION
    return ErrorKind.OTHER
