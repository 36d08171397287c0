import logging
import re
from dataclasses import dataclass
from datetime import date as GDate
from typing import Optional

from zhdate import ZhDate

from ttdl_lunar.errors import LunarConversionError

'''
Function: lunar_to_solar(year, month, day)

Input format:

 year / month / day: integers of a Chinese lunar calendar date.
 Leap months are not addressed; month N always means the regular month N.
 Supported epoch: lunar 1900-01-01 .. 2100-12-29.

Output format:

 The Gregorian ("solar") date as "YYYY-MM-DD" (zero-padded month and day).
 Raises LunarConversionError with a human-readable reason when the lunar date
 is outside the supported epoch or does not exist.

Function: parse_lunar_date(text)

 Accepts exactly "YYYY-MM-DD": three "-" separated integers, month and day
 non-zero. Returns None for anything else. Whether the date exists is decided
 by lunar_to_solar, not here.
'''

logger = logging.getLogger(__name__)

LUNAR_DATE_SEPARATOR = "-"

MIN_LUNAR_YEAR = 1900
MAX_LUNAR_YEAR = 2100
MAX_LUNAR_DAY = 30  # lunar months have 29 or 30 days

_SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT_RE = re.compile(r"\+?[0-9]+")

# Components wider than a 32-bit integer are a format error, not a range error
INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
UINT32_MAX = 2 ** 32 - 1


@dataclass(frozen=True)
class LunarDate:
    year: int
    month: int
    day: int

    def __str__(self) -> str:
        return _fmt_yyyy_mm_dd(self.year, self.month, self.day)


def _fmt_yyyy_mm_dd(y: int, m: int, d: int) -> str:
    return f"{y:04d}-{m:02d}-{d:02d}"


def _parse_int(token: str, signed: bool) -> Optional[int]:
    pattern = _SIGNED_INT_RE if signed else _UNSIGNED_INT_RE
    if not pattern.fullmatch(token):
        return None
    value = int(token)
    low, high = (INT32_MIN, INT32_MAX) if signed else (0, UINT32_MAX)
    if not low <= value <= high:
        return None
    return value


def parse_lunar_date(text: str) -> Optional[LunarDate]:
    items = text.split(LUNAR_DATE_SEPARATOR)
    if len(items) != 3:
        return None

    y = _parse_int(items[0], signed=True)
    m = _parse_int(items[1], signed=False)
    d = _parse_int(items[2], signed=False)
    if y is None or not m or not d:
        return None
    return LunarDate(year=y, month=m, day=d)


def format_solar_date(g: GDate) -> str:
    return _fmt_yyyy_mm_dd(g.year, g.month, g.day)


# -----------------------------
# Calendar primitives
# -----------------------------

def _lunar_to_gregorian(y: int, m: int, d: int) -> GDate:
    return ZhDate(y, m, d).to_datetime().date()


def lunar_to_solar(year: int, month: int, day: int) -> str:
    """
    Convert a lunar date to its solar (Gregorian) "YYYY-MM-DD" string.

    The range checks run before the table lookup so the reasons stay stable
    whatever wording the calendar library uses for its own failures.
    """
    lunar = _fmt_yyyy_mm_dd(year, month, day)
    if not MIN_LUNAR_YEAR <= year <= MAX_LUNAR_YEAR:
        raise LunarConversionError(
            f"lunar year {year} is out of the supported range "
            f"{MIN_LUNAR_YEAR}-{MAX_LUNAR_YEAR}"
        )
    if not 1 <= month <= 12:
        raise LunarConversionError(f"lunar month {month} does not exist")
    if not 1 <= day <= MAX_LUNAR_DAY:
        raise LunarConversionError(f"lunar day {day} does not exist")

    try:
        g = _lunar_to_gregorian(year, month, day)
    except (TypeError, ValueError) as e:
        logger.debug("🌙 lunar_to_solar: %s rejected by calendar table: %s", lunar, e)
        raise LunarConversionError(
            f"lunar date {lunar} does not exist or is out of the supported range"
        ) from e

    solar = format_solar_date(g)
    logger.debug("🌙 lunar_to_solar: %s → %s", lunar, solar)
    return solar
