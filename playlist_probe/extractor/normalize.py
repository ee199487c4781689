"""Conversions between the duration, count and date shapes the sources produce.

All functions are pure and never raise on malformed text; each documents the
value it falls back to.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone


_MACHINE_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)

_COUNT_SUFFIX_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*([KMB])(?![A-Z])", re.IGNORECASE)
_COUNT_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}

# Portuguese three-letter month abbreviations as YouTube renders them ("10 de jan. de 2023").
MONTHS_PT = {
    "jan": 1,
    "fev": 2,
    "mar": 3,
    "abr": 4,
    "mai": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "set": 9,
    "out": 10,
    "nov": 11,
    "dez": 12,
}

_LOCALIZED_DATE_RE = re.compile(
    r"(\d{1,2})\s+(?:de\s+)?([a-z]{3})\.?\s+(?:de\s+)?(\d{4})",
    re.IGNORECASE,
)

# Prefixes YouTube puts in front of the date on watch pages.
_DATE_PREFIX_RE = re.compile(
    r"^(?:premiered|streamed live on|published on|estreou em|transmitido ao vivo em|publicado em)\s+",
    re.IGNORECASE,
)

_STRPTIME_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y/%m/%d",
    "%d/%m/%Y",
)


def parse_machine_duration(text: str | None) -> int:
    """Parse an ISO-8601 duration such as ``PT1H2M3S`` into seconds (0 when unparseable)."""
    if not text:
        return 0
    m = _MACHINE_DURATION_RE.match(str(text).strip())
    if not m:
        return 0
    days, hours, minutes, seconds = m.groups()
    total = int(days or 0) * 86400 + int(hours or 0) * 3600 + int(minutes or 0) * 60
    if seconds:
        total += int(float(seconds))
    return total


def parse_display_duration(text: str | None) -> int:
    """Parse ``SS``, ``MM:SS`` or ``HH:MM:SS`` into seconds (0 for any other shape)."""
    if not text:
        return 0
    parts = str(text).strip().split(":")
    if not 1 <= len(parts) <= 3:
        return 0
    values: list[int] = []
    for p in parts:
        p = p.strip()
        if not p.isdigit():
            return 0
        values.append(int(p))
    total = 0
    for v in values:
        total = total * 60 + v
    return total


def format_duration(seconds: int | float | None) -> str:
    """``H:MM:SS``, or ``M:SS`` when the hour field is zero."""
    s = max(0, int(seconds or 0))
    hours, rem = divmod(s, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_abbreviated_count(text: str | None) -> int:
    """Parse "1.2K", "4.5M", "1,234 views" and friends; 0 when nothing numeric is found."""
    if text is None:
        return 0
    s = str(text).strip()
    if not s:
        return 0
    m = _COUNT_SUFFIX_RE.search(s)
    if m:
        mantissa = float(m.group(1).replace(",", "."))
        return int(math.floor(mantissa * _COUNT_MULTIPLIERS[m.group(2).upper()] + 0.5))
    digits = re.sub(r"\D", "", s)
    return int(digits) if digits else 0


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_localized_date(text: str | None, now: datetime | None = None) -> datetime:
    """Parse a publish date into an aware UTC datetime.

    Accepts ISO strings, a few English renderings, and the Portuguese
    ``<day> de <mon>. de <year>`` phrase. Anything else yields ``now`` (current
    UTC time unless given).
    """
    fallback = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    if not text:
        return fallback
    s = _DATE_PREFIX_RE.sub("", str(text).strip())
    if not s:
        return fallback

    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        return _as_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in _STRPTIME_FORMATS:
        try:
            return _as_utc(datetime.strptime(s, fmt))
        except ValueError:
            continue

    m = _LOCALIZED_DATE_RE.search(s)
    if m:
        month = MONTHS_PT.get(m.group(2).lower())
        if month:
            try:
                return datetime(int(m.group(3)), month, int(m.group(1)), tzinfo=timezone.utc)
            except ValueError:
                return fallback
    return fallback


def format_date(value: datetime, fmt: str = "%d/%m/%Y") -> str:
    return value.strftime(fmt)


def format_count(value: int) -> str:
    return f"{int(value):,}"
