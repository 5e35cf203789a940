"""Tests for search qualifier construction."""

from __future__ import annotations

from partnergrid.domain.models import SearchFilters
from partnergrid.services.query_builder import build_query


def test_all_clauses_in_order():
    filters = SearchFilters(
        query="rust",
        language="Rust",
        location="San Francisco",
        min_repos=10,
        min_followers=50,
    )
    assert build_query(filters) == (
        'rust language:Rust location:"San Francisco" repos:>=10 followers:>=50 type:user'
    )


def test_bare_query_only_adds_user_type():
    assert build_query(SearchFilters(query="torvalds")) == "torvalds type:user"
    assert build_query(SearchFilters()) == "type:user"


def test_identical_filters_build_identical_queries():
    first = SearchFilters(query="go", language="Go", min_followers=5)
    second = SearchFilters(query="go", language="Go", min_followers=5)
    assert build_query(first) == build_query(second)


def test_optional_field_only_changes_its_own_clause():
    base = SearchFilters(query="ml", language="Python")
    with_location = SearchFilters(query="ml", language="Python", location="Berlin")

    assert build_query(with_location) == build_query(base).replace(
        " type:user", ' location:"Berlin" type:user'
    )


def test_experience_level_and_sorting_stay_out_of_query():
    filters = SearchFilters(
        query="java", experience_level="senior", sort_by="joined", order="asc"
    )
    assert build_query(filters) == "java type:user"


def test_blank_and_zero_values_are_unset():
    filters = SearchFilters(query="  ", language=" ", location="", min_repos=0, min_followers=0)
    assert build_query(filters) == "type:user"
    assert filters.has_active_filters() is False
