"""
Activity Enricher.

Computes the derived snapshot fields of each activity once per analysis run:

    durationDays = max(0, ceil(end - start in calendar days))   level 2 only
    baselineCost = cost                                          copy at enrichment

Malformed or missing dates degrade to durationDays = 0 instead of failing, so
the orchestrator never aborts on a single bad activity.
"""

import math
from datetime import date, datetime, timezone
from typing import Iterable, Optional

import structlog

from riskbehavior.schemas.inputs import Activity, ActivityLevel

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY: float = 86400.0


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime string into an aware UTC datetime.

    Date-only values are taken as UTC midnight. Returns None for empty or
    unparsable values.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_duration_days(start: Optional[str], end: Optional[str]) -> int:
    """Calendar days between start and end, rounded up, never negative."""
    start_dt = parse_date(start)
    end_dt = parse_date(end)
    if start_dt is None or end_dt is None:
        return 0
    days = (end_dt - start_dt).total_seconds() / SECONDS_PER_DAY
    return max(0, math.ceil(days))


def enrich_activity(activity: Activity) -> Activity:
    if activity.level == ActivityLevel.ACTIVITY:
        duration = calculate_duration_days(activity.start, activity.end)
    else:
        duration = 0
    return activity.model_copy(update={
        "duration_days": duration,
        "baseline_cost": activity.cost,
    })


def enrich_activities(activities: Iterable[Activity]) -> list[Activity]:
    """
    Return enriched copies of the activities.

    Idempotent: enriching an enriched list recomputes the same values from
    the same source dates and costs.
    """
    enriched = [enrich_activity(a) for a in activities]
    logger.debug(
        "activities_enriched",
        n_activities=len(enriched),
        n_scheduled=sum(1 for a in enriched if a.duration_days),
    )
    return enriched
