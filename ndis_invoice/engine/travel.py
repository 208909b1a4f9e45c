"""Travel distance apportionment.

The billed total is always the sum over billable days of
``travel_km_override`` or the default per-day distance. The daily log can
optionally be randomized for display; ``settle_breakdown`` then corrects the
random values so their sum equals the billed total exactly.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ndis_invoice.formatting import format_date_display, format_quantity
from ndis_invoice.models import DayRecord, DaySchedule, TravelDay

logger = logging.getLogger(__name__)

RANDOM_SPREAD_KM = Decimal("5")


def daily_distances(
    days: Sequence[tuple[DayRecord, DaySchedule]],
    default_km: Decimal,
) -> list[TravelDay]:
    """Exact per-day distances: the override where set, else the default."""
    return [
        TravelDay(
            date=record.date,
            km=schedule.travel_km_override if schedule.travel_km_override is not None else default_km,
        )
        for record, schedule in days
    ]


def total_distance(breakdown: Sequence[TravelDay]) -> Decimal:
    return sum((d.km for d in breakdown), Decimal("0"))


def random_distances(count: int, default_km: Decimal, rng: random.Random) -> list[Decimal]:
    """Whole-km values drawn from uniform(default - 5, default + 5), clamped at 0."""
    low = float(default_km - RANDOM_SPREAD_KM)
    high = float(default_km + RANDOM_SPREAD_KM)
    values = []
    for _ in range(count):
        km = Decimal(round(rng.uniform(low, high)))
        values.append(max(km, Decimal("0")))
    return values


def settle_breakdown(values: Sequence[Decimal], target: Decimal) -> list[Decimal]:
    """Adjust ``values`` so they sum to ``target`` exactly.

    Whole-km residual is spread one km per day, earliest day first, wrapping
    around as often as needed; days below 1 km are skipped when subtracting.
    Whatever is left (a fraction of a km) is added to the first day, or taken
    from the earliest days that still have distance to give.
    Deterministic: the same input always gives the same output.
    """
    kms = [Decimal(v) for v in values]
    if target < 0:
        raise ValueError(f"Travel total must be >= 0, got {target}")
    if any(km < 0 for km in kms):
        raise ValueError("Daily travel distances must be >= 0")
    if not kms:
        if target != 0:
            raise ValueError(f"Cannot apportion {target} km over zero days")
        return []

    whole = int(target - sum(kms, Decimal("0")))  # truncates toward zero
    step = Decimal(1) if whole > 0 else Decimal(-1)
    remaining = abs(whole)
    idle = 0
    i = 0
    while remaining and idle < len(kms):
        idx = i % len(kms)
        if step > 0 or kms[idx] >= 1:
            kms[idx] += step
            remaining -= 1
            idle = 0
        else:
            idle += 1
        i += 1

    remainder = target - sum(kms, Decimal("0"))
    if remainder > 0:
        kms[0] += remainder
    elif remainder < 0:
        for idx, km in enumerate(kms):
            take = min(km, -remainder)
            kms[idx] = km - take
            remainder += take
            if remainder == 0:
                break
    return kms


def randomized_breakdown(
    dates: Sequence[date],
    default_km: Decimal,
    seed: Optional[int] = None,
) -> list[TravelDay]:
    """Plausible-looking daily log whose sum equals ``len(dates) * default_km``.

    Uses its own ``random.Random`` per call so concurrent invoices never share
    generator state.
    """
    rng = random.Random(seed)
    target = default_km * len(dates)
    settled = settle_breakdown(random_distances(len(dates), default_km, rng), target)
    logger.debug("Randomized travel over %d day(s), target %s km", len(dates), target)
    return [TravelDay(date=d, km=km) for d, km in zip(dates, settled)]


def apportion_travel(
    days: Sequence[tuple[DayRecord, DaySchedule]],
    default_km: Decimal,
    randomize: bool = False,
    seed: Optional[int] = None,
) -> list[TravelDay]:
    """Daily travel breakdown for the billable days.

    Randomization only applies when no day carries a travel override.
    """
    exact = daily_distances(days, default_km)
    if randomize and all(schedule.travel_km_override is None for _, schedule in days):
        return randomized_breakdown([d.date for d in exact], default_km, seed)
    return exact


def format_breakdown(breakdown: Sequence[TravelDay]) -> str:
    return ", ".join(f"{format_date_display(d.date)}: {format_quantity(d.km)}km" for d in breakdown)
