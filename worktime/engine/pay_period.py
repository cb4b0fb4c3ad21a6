"""
Pay-period bounds per employee cutoff type.

Cutoff ``10`` pays the 11th of the prior month through the 10th of the
target month; every other cutoff pays the 21st through the 20th.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

CUTOFF_10 = "10"
CUTOFF_20 = "20"


@dataclass(frozen=True)
class PayPeriod:
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


def parse_year_month(value: str) -> tuple[int, int]:
    match = _MONTH_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Expected YYYY-MM, got {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range in {value!r}")
    return year, month


def resolve_pay_period(cutoff_type: str | int | None, year_month: str) -> PayPeriod:
    year, month = parse_year_month(year_month)
    prev_year, prev_month = (year - 1, 12) if month == 1 else (year, month - 1)

    cutoff = 10 if str(cutoff_type).strip() == CUTOFF_10 else 20
    return PayPeriod(
        start=date(prev_year, prev_month, cutoff + 1),
        end=date(year, month, cutoff),
    )
