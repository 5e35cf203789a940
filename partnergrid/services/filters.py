"""Local re-filtering and ranking of an already-fetched result set."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from partnergrid.domain.models import ExperienceLevel, ResultSet, SearchFilters, UserRecord
from partnergrid.utils.datetime import utc_now

DAYS_PER_YEAR = 365
JUNIOR_MAX_YEARS = 2.5
JUNIOR_MAX_REPOS = 15
SENIOR_MIN_YEARS = 5
SENIOR_MIN_REPOS = 60

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def account_age_years(created_at: datetime | None, now: datetime | None = None) -> float | None:
    if created_at is None:
        return None
    now = now or utc_now()
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (now - created_at).total_seconds() / (DAYS_PER_YEAR * 24 * 60 * 60)


def calculate_experience_level(
    created_at: datetime | None, public_repos: int, now: datetime | None = None
) -> ExperienceLevel:
    """Junior is checked before senior; either sub-condition is enough for a tier.

    An unknown account age satisfies neither age condition, so the repo count decides.
    """

    years = account_age_years(created_at, now)
    if (years is not None and years <= JUNIOR_MAX_YEARS) or public_repos <= JUNIOR_MAX_REPOS:
        return "junior"
    if (years is not None and years >= SENIOR_MIN_YEARS) or public_repos >= SENIOR_MIN_REPOS:
        return "senior"
    return "mid"


def matches_filters(user: UserRecord, filters: SearchFilters, now: datetime | None = None) -> bool:
    if filters.language:
        needle = filters.language.lower()
        bio = (user.bio or "").lower()
        if needle not in bio and needle not in user.login.lower():
            return False
    if filters.location:
        if filters.location.lower() not in (user.location or "").lower():
            return False
    if filters.min_repos and user.public_repos < filters.min_repos:
        return False
    if filters.min_followers and user.followers < filters.min_followers:
        return False
    if filters.experience_level:
        level = calculate_experience_level(user.created_at, user.public_repos, now)
        if level != filters.experience_level:
            return False
    return True


def _sort_key(filters: SearchFilters):
    if filters.sort_by == "repositories":
        return lambda user: user.public_repos
    if filters.sort_by == "joined":
        return lambda user: _aware(user.created_at) if user.created_at else _OLDEST
    return lambda user: user.followers


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def sort_users(users: Sequence[UserRecord], filters: SearchFilters) -> list[UserRecord]:
    """Stable sort, so ties keep their fetch order."""

    return sorted(users, key=_sort_key(filters), reverse=filters.order == "desc")


def apply_client_filters(
    result_set: ResultSet, filters: SearchFilters, now: datetime | None = None
) -> ResultSet:
    now = now or utc_now()
    kept = [user for user in result_set.items if matches_filters(user, filters, now)]
    return ResultSet(
        items=sort_users(kept, filters),
        total_count=result_set.total_count,
        incomplete=result_set.incomplete,
    )


def apply_client_only_filters(
    items: Sequence[UserRecord], filters: SearchFilters, now: datetime | None = None
) -> list[UserRecord]:
    """Filters the remote query cannot express (experience level); order is preserved."""

    if not filters.experience_level:
        return list(items)
    only_experience = SearchFilters(experience_level=filters.experience_level)
    return [user for user in items if matches_filters(user, only_experience, now)]


__all__ = [
    "account_age_years",
    "apply_client_filters",
    "apply_client_only_filters",
    "calculate_experience_level",
    "matches_filters",
    "sort_users",
]
