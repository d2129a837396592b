"""
SHOPSEED — Run settings.
Collects the config.py values one run needs, with per-run overrides.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

import config

Count = int | tuple[int, int]


def parse_count(raw: str) -> Count:
    """'5' → 5, '1:3' → (1, 3)."""
    if ":" in raw:
        low, high = (int(part) for part in raw.split(":", 1))
        count = (low, high)
    else:
        count = int(raw)
    validate_count("<cli>", count)
    return count


def validate_count(entity: str, count: Count) -> None:
    if isinstance(count, tuple):
        low, high = count
        if low < 0 or high < low:
            raise ValueError(f"invalid count range for '{entity}': {count}")
    elif isinstance(count, int):
        if count < 0:
            raise ValueError(f"invalid count for '{entity}': {count}")
    else:
        raise TypeError(f"count for '{entity}' must be int or (low, high), got {count!r}")


@dataclass(frozen=True)
class SeedSettings:
    counts: Mapping[str, Count] = field(default_factory=lambda: dict(config.SEED_COUNTS))
    tax_rate: float = config.TAX_RATE
    currency: str = config.CURRENCY
    null_address_probability: float = config.NULL_ADDRESS_PROBABILITY
    null_warranty_probability: float = config.NULL_WARRANTY_PROBABILITY
    seed: int | None = config.RANDOM_SEED
    max_attempts: int = config.READINESS_MAX_ATTEMPTS
    delay: float = config.READINESS_DELAY_SECONDS
    atomic: bool = config.SEED_ATOMIC

    def __post_init__(self):
        for entity, count in self.counts.items():
            validate_count(entity, count)
        if not 0 <= self.tax_rate < 1:
            raise ValueError(f"tax_rate must be in [0, 1), got {self.tax_rate}")

    def with_counts(self, overrides: Mapping[str, Count]) -> "SeedSettings":
        merged = dict(self.counts)
        merged.update(overrides)
        return replace(self, counts=merged)
