"""Daily application credits.

A user may submit ``DAILY_APPLICATION_LIMIT`` applications per calendar day,
where the day is taken in the user's own timezone and rolls over at local
midnight. :func:`compute_remaining_credits` is the read-only view the client
polls; :func:`reserve_daily_credit` is the authoritative gate that runs inside
the transaction creating the application.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable

from dateutil import tz
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from .config import settings
from .errors import QuotaExceededError
from .models import Application, DailyCreditUsage, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditWindow:
    remaining: int
    used: int
    limit: int
    day: date
    reset_at: datetime
    reset_in: timedelta


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the zone for ``name``, or the server's local zone."""
    if name:
        zone = tz.gettz(name)
        if zone is not None:
            return zone
        logger.warning("Unknown timezone '%s' - falling back to server local time", name)
    return tz.tzlocal()


def as_utc(moment: datetime) -> datetime:
    # SQLite hands timestamps back naive; they were written as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz.UTC)
    return moment.astimezone(tz.UTC)


def local_day(moment: datetime, zone: tzinfo) -> date:
    return as_utc(moment).astimezone(zone).date()


def next_local_midnight(now: datetime, zone: tzinfo) -> datetime:
    tomorrow = local_day(now, zone) + timedelta(days=1)
    return tz.resolve_imaginary(datetime.combine(tomorrow, time.min, tzinfo=zone))


def compute_remaining_credits(
    user: User,
    applications: Iterable[Application],
    now: datetime,
    limit: int | None = None,
) -> CreditWindow:
    limit = settings.DAILY_APPLICATION_LIMIT if limit is None else limit
    zone = resolve_timezone(user.timezone)
    today = local_day(now, zone)

    used = sum(1 for a in applications if local_day(a.applied_at, zone) == today)

    reset_at = next_local_midnight(now, zone)
    # subtract in UTC: aware datetimes sharing a tzinfo subtract as wall clock
    reset_in = as_utc(reset_at) - as_utc(now)

    return CreditWindow(
        remaining=max(0, limit - used),
        used=used,
        limit=limit,
        day=today,
        reset_at=reset_at,
        reset_in=reset_in,
    )


def _upsert(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(DailyCreditUsage)
    return sqlite.insert(DailyCreditUsage)


def reserve_daily_credit(db: Session, user: User, now: datetime, limit: int | None = None) -> int:
    """Consume one credit for the user's local day or raise QuotaExceededError.

    Single conditional upsert, so two concurrent applies near the limit cannot
    both succeed. Must run in the same transaction as the application insert.
    Returns the number of credits used today including this one.
    """
    limit = settings.DAILY_APPLICATION_LIMIT if limit is None else limit
    day = local_day(now, resolve_timezone(user.timezone)).isoformat()

    stmt = _upsert(db).values(user_id=user.id, day=day, used=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[DailyCreditUsage.user_id, DailyCreditUsage.day],
        set_={"used": DailyCreditUsage.used + 1},
        where=DailyCreditUsage.used < limit,
    ).returning(DailyCreditUsage.used)

    used = db.execute(stmt).scalar_one_or_none()
    if used is None or used > limit:
        logger.info("Quota reached for user %s on %s: %d/%d", user.id, day, limit, limit)
        raise QuotaExceededError(limit)
    return used

