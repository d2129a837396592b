"""
SHOPSEED — Readiness Probe
Waits for the target store to answer before any phase runs. This is the
only retry loop in the seeder; inserts themselves are never retried.
"""

import time
from collections.abc import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from seeding.errors import StoreUnreachable
from utils.db import ping
from utils.logging_config import get_logger

log = get_logger("readiness")


def wait_until_ready(
    engine: Engine,
    max_attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
    probe: Callable[[Engine], None] = ping,
) -> int:
    """Probe the store until it answers; return the successful attempt number.

    Makes at most ``max_attempts`` tries with ``delay`` seconds between
    consecutive tries. Raises StoreUnreachable once every try has failed.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if delay < 0:
        raise ValueError(f"delay must be >= 0, got {delay}")

    last_error: DBAPIError | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            probe(engine)
        except DBAPIError as exc:
            last_error = exc
            log.warning("Store not ready (attempt %d/%d): %s",
                        attempt, max_attempts, exc.orig or exc)
            if attempt < max_attempts:
                sleep(delay)
            continue
        log.info("Store ready after %d attempt(s)", attempt)
        return attempt

    log.error("Store unreachable after %d attempt(s)", max_attempts)
    raise StoreUnreachable(max_attempts, last_error)
