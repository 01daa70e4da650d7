# ============================================================================
# salon_scheduling/services/availability/rule_expander.py
# Turns one recurring availability rule into concrete working intervals
# ============================================================================
"""
Availability rules are stored as iCalendar recurrence text, e.g.

    DTSTART:20250106T090000
    RRULE:FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR
    X-SALON-DURATION-MINUTES:480

The occurrence length comes from (in order) an X-...-DURATION-MINUTES
property, a DURATION property, DTEND - DTSTART, or the caller's fallback.
A floating DTSTART is wall-clock time in the rule's timezone.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser
from dateutil.rrule import rrulestr

from salon_scheduling.config.settings import get_settings
from salon_scheduling.utils.time_utils import Interval, add_minutes

logger = logging.getLogger(__name__)

_CUSTOM_DURATION_RE = re.compile(r"X-[A-Z-]*DURATION-MINUTES:(\d+)", re.IGNORECASE)
_DURATION_LINE_RE = re.compile(r"^DURATION:(.+)$", re.IGNORECASE | re.MULTILINE)
_ISO_DURATION_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$", re.IGNORECASE)
_DTSTART_RE = re.compile(r"^DTSTART([^:\n]*):([^\n]+)$", re.IGNORECASE | re.MULTILINE)
_DTEND_RE = re.compile(r"^DTEND([^:\n]*):([^\n]+)$", re.IGNORECASE | re.MULTILINE)

# Properties dateutil understands; everything else is stripped before parsing
_RECURRENCE_PROPERTIES = ("DTSTART", "RRULE", "RDATE", "EXRULE", "EXDATE")


def parse_iso_duration_minutes(value: str) -> Optional[int]:
    """Minutes in an ISO-8601 duration such as PT8H or P1DT30M (seconds round up)."""
    match = _ISO_DURATION_RE.match(value.strip())
    if not match:
        return None
    days, hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    total = days * 24 * 60 + hours * 60 + minutes + -(-seconds // 60)
    return total if total > 0 else None


def _parse_ical_datetime(value: str) -> Optional[datetime]:
    try:
        return date_parser.parse(value.strip())
    except (ValueError, OverflowError):
        return None


def extract_duration_minutes(rrule_text: str) -> Optional[int]:
    """Explicit occurrence length encoded in the rule text, if any."""
    custom = _CUSTOM_DURATION_RE.search(rrule_text)
    if custom:
        minutes = int(custom.group(1))
        return minutes if minutes > 0 else None

    duration_line = _DURATION_LINE_RE.search(rrule_text)
    if duration_line:
        minutes = parse_iso_duration_minutes(duration_line.group(1))
        if minutes:
            return minutes

    dtstart = _DTSTART_RE.search(rrule_text)
    dtend = _DTEND_RE.search(rrule_text)
    if dtstart and dtend:
        start = _parse_ical_datetime(dtstart.group(2))
        end = _parse_ical_datetime(dtend.group(2))
        if start and end and (start.tzinfo is None) == (end.tzinfo is None):
            minutes = int((end - start) / timedelta(minutes=1))
            if minutes > 0:
                return minutes

    return None


def _is_floating(rrule_text: str) -> bool:
    """True when DTSTART carries neither a UTC marker nor a TZID."""
    match = _DTSTART_RE.search(rrule_text)
    if not match:
        return True
    params, value = match.group(1), match.group(2).strip()
    return not value.upper().endswith("Z") and "TZID=" not in params.upper()


def _recurrence_lines(rrule_text: str) -> str:
    lines = []
    for raw in rrule_text.replace("\r\n", "\n").split("\n"):
        line = raw.strip()
        name = re.split(r"[:;]", line, maxsplit=1)[0].upper()
        if name in _RECURRENCE_PROPERTIES:
            lines.append(line)
    return "\n".join(lines)


def expand_rule(
        rule,
        window_start: datetime,
        window_end: datetime,
        fallback_duration_min: int,
        default_timezone: Optional[str] = None
) -> List[Interval]:
    """
    Concrete working intervals of `rule` that overlap [window_start, window_end).

    Occurrences starting up to one duration before the window are considered so
    a shift already under way at window_start is kept. A rule that cannot be
    parsed contributes nothing; it is logged and never fails the caller.
    """
    rrule_text = rule.rrule_text or ""
    duration_min = extract_duration_minutes(rrule_text) or fallback_duration_min
    if not duration_min or duration_min <= 0:
        return []

    try:
        lookback_start = window_start - timedelta(minutes=duration_min)
        schedule = rrulestr(_recurrence_lines(rrule_text), forceset=True)

        if _is_floating(rrule_text):
            tz = ZoneInfo(rule.tz or default_timezone or get_settings().DEFAULT_TIMEZONE)
            local_after = lookback_start.astimezone(tz).replace(tzinfo=None)
            local_before = window_end.astimezone(tz).replace(tzinfo=None)
            starts = [
                occurrence.replace(tzinfo=tz).astimezone(timezone.utc)
                for occurrence in schedule.between(local_after, local_before, inc=True)
            ]
        else:
            starts = [
                occurrence.astimezone(timezone.utc)
                for occurrence in schedule.between(lookback_start, window_end, inc=True)
            ]

        intervals = []
        for start in starts:
            end = add_minutes(start, duration_min)
            if end <= start or end < window_start:
                continue
            intervals.append(Interval(start=start, end=end))
    except (ValueError, TypeError, OverflowError, ZoneInfoNotFoundError) as e:
        logger.warning(f"Failed to expand availability rule {getattr(rule, 'id', None)}: {e}")
        return []

    return intervals
