"""
SHOPSEED — Seed Runner
Orchestrates: readiness probe → dependency-ordered seeding → verification.
"""

import sys, os, argparse, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

import config
from seeding.aggregates import satisfies_order_identity
from seeding.errors import PhaseFailed, SeedError, StoreUnreachable
from seeding.graph import DependencyGraph
from seeding.orchestrator import SeedRun
from seeding.phases import PHASES
from seeding.settings import SeedSettings, parse_count
from seeding.store import InsertionEngine
from utils.db import check_connection, get_engine
from utils.logging_config import get_logger, set_console_level

log = get_logger("runner")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNREACHABLE = 2


def banner(msg: str):
    log.info("=" * 60)
    log.info("  %s", msg)
    log.info("=" * 60)


def step_seed(engine, settings: SeedSettings, only=None):
    """Probe the store, then run every phase in dependency order."""
    banner("Step 1/2 — Seed Data")
    run = SeedRun(engine, settings, only=only)
    report = run.run()
    log.info("  %-20s %10s %10s", "Phase", "Inserted", "Skipped")
    log.info("  %s", "-" * 42)
    for result in report.phases:
        log.info("  %-20s %10s %10s", result.entity,
                 f"{result.inserted:,}", f"{result.skipped_total:,}")
    return report


def find_bad_orders(conn, tax_rate: float) -> list:
    """Order ids whose stored amounts break the aggregate identity."""
    order = conn.dialect.identifier_preparer.quote("order")
    rows = conn.execute(text(
        "SELECT order_id, subtotal, tax_amount, shipping_cost, discount_amount, "
        f"total_amount FROM {order}"
    )).fetchall()
    return [r[0] for r in rows if not satisfies_order_identity(*r[1:], tax_rate)]


def step_verify(engine, settings: SeedSettings, phases=None) -> bool:
    """Verify row counts per phase table and the order aggregate identity."""
    banner("Step 2/2 — Verification")
    phases = phases or DependencyGraph(PHASES).order()
    ok = True
    missing = set()

    log.info("  %-20s %10s", "Table", "Count")
    log.info("  %s", "-" * 32)
    for phase in phases:
        # own connection per table: a failed read can poison a transaction
        with engine.connect() as conn:
            try:
                count = InsertionEngine(conn).count(phase.table)
            except DBAPIError:
                log.warning("  %-20s %10s  MISSING", phase.table, "N/A")
                ok = False
                missing.add(phase.entity)
                continue
        status = "OK" if count > 0 else "!! EMPTY"
        log.info("  %-20s %10s  %s", phase.table, f"{count:,}", status)

    if any(p.entity == "order" for p in phases) and "order" not in missing:
        with engine.connect() as conn:
            bad = find_bad_orders(conn, settings.tax_rate)
        if bad:
            ok = False
            log.error("  %d order(s) break total = subtotal + tax + shipping - discount: %s",
                      len(bad), bad[:10])
        else:
            log.info("  Order totals: all rows satisfy the aggregate identity")

    return ok


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SHOPSEED e-commerce seeder")
    parser.add_argument("--database-url", default=None,
                        help="SQLAlchemy URL (default: built from DB_* env vars)")
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED,
                        help="Random seed for values and id selection")
    parser.add_argument("--max-attempts", type=int, default=config.READINESS_MAX_ATTEMPTS,
                        help="Readiness probe attempts before giving up")
    parser.add_argument("--delay", type=float, default=config.READINESS_DELAY_SECONDS,
                        help="Seconds between readiness probe attempts")
    parser.add_argument("--atomic", action="store_true", default=config.SEED_ATOMIC,
                        help="Run all phases in one transaction (nothing persists on abort)")
    parser.add_argument("--count", action="append", default=[], metavar="PHASE=N|LOW:HIGH",
                        help="Override a phase record count (repeatable)")
    parser.add_argument("--only", action="append", default=None, metavar="PHASE",
                        help="Run only PHASE and the phases it depends on (repeatable)")
    parser.add_argument("--verify-only", action="store_true",
                        help="Only run verification")
    parser.add_argument("--skip-verify", action="store_true",
                        help="Skip the verification step")
    parser.add_argument("--quiet", action="store_true",
                        help="Only warnings and errors on the console (log file keeps everything)")
    return parser


def parse_overrides(items) -> dict:
    overrides = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise ValueError(f"expected PHASE=N or PHASE=LOW:HIGH, got '{item}'")
        overrides[name.strip()] = parse_count(raw.strip())
    return overrides


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.quiet:
        set_console_level(logging.WARNING)
    try:
        overrides = parse_overrides(args.count)
    except ValueError as exc:
        parser.error(str(exc))

    settings = SeedSettings(
        seed=args.seed,
        max_attempts=args.max_attempts,
        delay=args.delay,
        atomic=args.atomic,
    ).with_counts(overrides)

    url = args.database_url or config.DATABASE_URL
    banner("SHOPSEED — Seed Runner")
    log.info("  Database: %s", config.masked_url(url))
    log.info("  Seed: %s   Atomic: %s", settings.seed, settings.atomic)

    engine = get_engine(url)
    try:
        if args.verify_only:
            if not check_connection(engine):
                log.error("Store unreachable: %s", config.masked_url(url))
                return EXIT_UNREACHABLE
            return EXIT_OK if step_verify(engine, settings) else EXIT_FAILED

        try:
            report = step_seed(engine, settings, only=args.only)
        except StoreUnreachable as exc:
            log.error("Aborted before any phase ran: %s", exc)
            return EXIT_UNREACHABLE
        except PhaseFailed as exc:
            log.error("Aborted in phase '%s': %s", exc.phase, exc.cause)
            if not settings.atomic:
                log.error("Rows from completed phases were kept (no rollback)")
            return EXIT_FAILED
        except SeedError as exc:
            log.error("Aborted: %s", exc)
            return EXIT_FAILED

        if not args.skip_verify:
            phases = [p for p in PHASES if p.entity in report.pool_sizes]
            if not step_verify(engine, settings, phases):
                return EXIT_FAILED

        banner(f"Seed Complete — {report.inserted_total:,} rows, {report.elapsed:.1f}s")
        return EXIT_OK
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
