"""Period window resolution and snapshot selection."""

import calendar
import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from ..exceptions import InvalidPeriodTypeError
from ..models.snapshot import MetricSnapshot, PeriodType
from .models import DateRange, PeriodWindow

logger = logging.getLogger(__name__)

WINDOW_PERIOD_TYPES = (PeriodType.WEEKLY, PeriodType.MONTHLY)


def coerce_period_type(
    value: PeriodType | str, allowed: Iterable[PeriodType] = tuple(PeriodType)
) -> PeriodType:
    """Normalize a period type, rejecting anything outside ``allowed``.

    Raises:
        InvalidPeriodTypeError: For unknown or disallowed values.
    """
    allowed = tuple(allowed)
    try:
        period_type = PeriodType(value)
    except ValueError:
        period_type = None
    if period_type not in allowed:
        raise InvalidPeriodTypeError(value, [p.value for p in allowed])
    return period_type


def _localize(anchor: date | datetime, tz: str | None) -> datetime:
    if not isinstance(anchor, datetime):
        anchor = datetime.combine(anchor, time.min)
    if tz is None:
        return anchor
    zone = ZoneInfo(tz)
    if anchor.tzinfo is None:
        return anchor.replace(tzinfo=zone)
    return anchor.astimezone(zone)


def resolve_period(
    anchor: date | datetime,
    period_type: PeriodType | str,
    tz: str | None = None,
) -> PeriodWindow:
    """Map an anchor date to its current and previous period windows.

    Weeks start on Monday. Months respect their actual length, so the
    previous window of March 2024 is 2024-02-01 .. 2024-02-29.

    Args:
        anchor: Any moment inside the wanted period
        period_type: WEEKLY or MONTHLY
        tz: Optional IANA zone. Aware anchors are converted to it, naive
            anchors are read as wall-clock time in it. Without it the
            anchor's own tzinfo (or lack of one) is kept.

    Returns:
        PeriodWindow with inclusive bounds at 00:00:00 and 23:59:59.999999.

    Raises:
        InvalidPeriodTypeError: If period_type is DAILY or unknown.
    """
    period_type = coerce_period_type(period_type, WINDOW_PERIOD_TYPES)
    moment = _localize(anchor, tz)
    tzinfo = moment.tzinfo
    day = moment.date()

    if period_type is PeriodType.WEEKLY:
        first = day - timedelta(days=day.weekday())
        last = first + timedelta(days=6)
        prev_first = first - timedelta(days=7)
        prev_last = last - timedelta(days=7)
    else:
        first = day.replace(day=1)
        last = day.replace(day=calendar.monthrange(day.year, day.month)[1])
        prev_last = first - timedelta(days=1)
        prev_first = prev_last.replace(day=1)

    return PeriodWindow(
        period_type=period_type,
        start=datetime.combine(first, time.min, tzinfo),
        end=datetime.combine(last, time.max, tzinfo),
        prev_start=datetime.combine(prev_first, time.min, tzinfo),
        prev_end=datetime.combine(prev_last, time.max, tzinfo),
    )


def trailing_windows(
    anchor: date | datetime,
    period_type: PeriodType | str,
    count: int,
    tz: str | None = None,
) -> list[PeriodWindow]:
    """The ``count`` most recent windows ending with the anchor's, oldest first."""
    windows: list[PeriodWindow] = []
    cursor: date | datetime = anchor
    for _ in range(count):
        window = resolve_period(cursor, period_type, tz)
        windows.append(window)
        cursor = window.prev_start
    windows.reverse()
    return windows


def select_snapshots(
    snapshots: Iterable[MetricSnapshot],
    period_type: PeriodType | str,
    start: datetime,
    end: datetime,
) -> list[MetricSnapshot]:
    """Snapshots feeding one window.

    Keeps snapshots of the requested type or DAILY whose period_start lies
    in ``[start, end]``. DAILY snapshots roll up only for connections that
    have no snapshot of the requested type in the window, so a weekly
    total and its own daily breakdown are never counted together.
    """
    period_type = coerce_period_type(period_type)
    window = DateRange(start, end)
    accepted = {period_type, PeriodType.DAILY}

    in_window = [
        s for s in snapshots if s.period_type in accepted and window.contains(s.period_start)
    ]
    covered = {s.connection_key for s in in_window if s.period_type is period_type}

    selected = [
        s for s in in_window if s.period_type is period_type or s.connection_key not in covered
    ]
    if len(selected) < len(in_window):
        logger.debug(
            f"Dropped {len(in_window) - len(selected)} DAILY snapshots "
            f"superseded by {period_type.value} data"
        )
    return selected
