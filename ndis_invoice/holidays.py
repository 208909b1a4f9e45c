"""Static public holiday table.

Victoria, Australia. Source: business.vic.gov.au public holidays list.
The Friday before the AFL Grand Final is only added once it is announced.
"""

from __future__ import annotations

from ndis_invoice.models import HolidayEntry

_VIC = "VIC"

_VIC_HOLIDAYS: list[tuple[str, str]] = [
    # 2024
    ("2024-01-01", "New Year's Day"),
    ("2024-01-26", "Australia Day"),
    ("2024-03-11", "Labour Day"),
    ("2024-03-29", "Good Friday"),
    ("2024-03-30", "Saturday before Easter Sunday"),
    ("2024-03-31", "Easter Sunday"),
    ("2024-04-01", "Easter Monday"),
    ("2024-04-25", "ANZAC Day"),
    ("2024-06-10", "King's Birthday"),
    ("2024-09-27", "Friday before AFL Grand Final"),
    ("2024-11-05", "Melbourne Cup Day"),
    ("2024-12-25", "Christmas Day"),
    ("2024-12-26", "Boxing Day"),
    # 2025
    ("2025-01-01", "New Year's Day"),
    ("2025-01-27", "Australia Day"),  # 26th falls on a Sunday
    ("2025-03-10", "Labour Day"),
    ("2025-04-18", "Good Friday"),
    ("2025-04-19", "Saturday before Easter Sunday"),
    ("2025-04-20", "Easter Sunday"),
    ("2025-04-21", "Easter Monday"),
    ("2025-04-25", "ANZAC Day"),
    ("2025-06-09", "King's Birthday"),
    ("2025-09-26", "Friday before AFL Grand Final"),
    ("2025-11-04", "Melbourne Cup Day"),
    ("2025-12-25", "Christmas Day"),
    ("2025-12-26", "Boxing Day"),
    # 2026
    ("2026-01-01", "New Year's Day"),
    ("2026-01-26", "Australia Day"),
    ("2026-03-09", "Labour Day"),
    ("2026-04-03", "Good Friday"),
    ("2026-04-04", "Saturday before Easter Sunday"),
    ("2026-04-05", "Easter Sunday"),
    ("2026-04-06", "Easter Monday"),
    ("2026-04-25", "ANZAC Day"),  # Saturday, no replacement day
    ("2026-06-08", "King's Birthday"),
    ("2026-11-03", "Melbourne Cup Day"),
    ("2026-12-25", "Christmas Day"),
    ("2026-12-26", "Boxing Day"),
    ("2026-12-28", "Boxing Day (observed)"),
    # 2027
    ("2027-01-01", "New Year's Day"),
    ("2027-01-26", "Australia Day"),
    ("2027-03-08", "Labour Day"),
    ("2027-03-26", "Good Friday"),
    ("2027-03-27", "Saturday before Easter Sunday"),
    ("2027-03-28", "Easter Sunday"),
    ("2027-03-29", "Easter Monday"),
    ("2027-04-25", "ANZAC Day"),
    ("2027-06-14", "King's Birthday"),
    ("2027-11-02", "Melbourne Cup Day"),
    ("2027-12-25", "Christmas Day"),
    ("2027-12-26", "Boxing Day"),
    ("2027-12-27", "Christmas Day (observed)"),
    ("2027-12-28", "Boxing Day (observed)"),
]

PUBLIC_HOLIDAYS: dict[str, dict[str, HolidayEntry]] = {
    _VIC: {iso: HolidayEntry(iso_date=iso, name=name, region=_VIC) for iso, name in _VIC_HOLIDAYS},
}


def holidays_for_region(region: str) -> dict[str, HolidayEntry]:
    """Holiday entries keyed by ISO date. Unknown regions have no static holidays."""
    return PUBLIC_HOLIDAYS.get(region.upper(), {})
