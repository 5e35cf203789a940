"""Translate structured search filters into GitHub's search qualifier dialect."""

from __future__ import annotations

from partnergrid.domain.models import SearchFilters

USER_TYPE_QUALIFIER = "type:user"


def build_query(filters: SearchFilters) -> str:
    """Return the ``q`` term for ``/search/users``.

    Sorting, ordering and paging travel as separate request parameters, and
    ``experience_level`` has no qualifier in the provider grammar at all.
    """

    parts: list[str] = []
    if filters.query:
        parts.append(filters.query)
    if filters.language:
        parts.append(f"language:{filters.language}")
    if filters.location:
        parts.append(f'location:"{filters.location}"')
    if filters.min_repos:
        parts.append(f"repos:>={filters.min_repos}")
    if filters.min_followers:
        parts.append(f"followers:>={filters.min_followers}")
    parts.append(USER_TYPE_QUALIFIER)
    return " ".join(parts)


__all__ = ["USER_TYPE_QUALIFIER", "build_query"]
