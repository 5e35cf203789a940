"""Profile insight helpers shown next to a developer's repositories."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Mapping, Protocol

from partnergrid.domain.models import RepoRecord
from partnergrid.logging import logger

COMPLEMENTARY_SKILLS: dict[str, list[str]] = {
    "JavaScript": ["Python", "Java", "Go", "Rust"],
    "TypeScript": ["Python", "Java", "Go", "Rust"],
    "Python": ["JavaScript", "TypeScript", "Go", "Rust"],
    "Java": ["JavaScript", "TypeScript", "Python", "Kotlin"],
    "Go": ["JavaScript", "TypeScript", "Python", "Rust"],
    "Rust": ["JavaScript", "TypeScript", "Python", "Go"],
    "React": ["Node.js", "Express", "GraphQL", "PostgreSQL"],
    "Vue": ["Node.js", "Express", "Laravel", "MongoDB"],
    "Angular": ["Node.js", "Spring Boot", "ASP.NET", "PostgreSQL"],
}


@dataclass(slots=True, frozen=True)
class LanguageShare:
    language: str
    bytes: int
    percentage: int


def analyze_language_stats(languages: Mapping[str, int]) -> list[LanguageShare]:
    """Break a ``/languages`` payload into shares, largest first."""

    total = sum(languages.values())
    if total <= 0:
        return []
    shares = [
        LanguageShare(
            language=language,
            bytes=size,
            percentage=int(size * 100 / total + 0.5),
        )
        for language, size in languages.items()
    ]
    shares.sort(key=lambda share: share.bytes, reverse=True)
    return shares


def complementary_skills(primary_language: str | None) -> list[str]:
    if not primary_language:
        return []
    return list(COMPLEMENTARY_SKILLS.get(primary_language, []))


class ProfileSource(Protocol):
    async def get_user_repos(
        self, login: str, page: int = 1, per_page: int = 100
    ) -> list[RepoRecord]: ...

    async def get_repo_languages(self, owner: str, repo: str) -> dict[str, int]: ...


@dataclass(slots=True, frozen=True)
class ProfileInsight:
    login: str
    primary_language: str | None
    top_repo: str | None
    languages: list[LanguageShare]
    suggested_skills: list[str]


def primary_language(repos: list[RepoRecord]) -> str | None:
    """Most frequent repository language; ties go to the language seen first."""

    counts = Counter(repo.language for repo in repos if repo.language)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


async def describe_profile(client: ProfileSource, login: str) -> ProfileInsight:
    """Summarise a developer from their recent repositories.

    Costs two calls: the repository list and the language breakdown of the
    most-starred repository. Client errors propagate to the caller.
    """

    repos = await client.get_user_repos(login)
    primary = primary_language(repos)
    top = max(repos, key=lambda repo: repo.stargazers_count, default=None)
    shares: list[LanguageShare] = []
    if top is not None:
        shares = analyze_language_stats(await client.get_repo_languages(login, top.name))
    logger.info(
        "profile_described",
        login=login,
        repos=len(repos),
        primary_language=primary,
        top_repo=top.name if top else None,
    )
    return ProfileInsight(
        login=login,
        primary_language=primary,
        top_repo=top.name if top else None,
        languages=shares,
        suggested_skills=complementary_skills(primary),
    )


__all__ = [
    "COMPLEMENTARY_SKILLS",
    "LanguageShare",
    "ProfileInsight",
    "ProfileSource",
    "analyze_language_stats",
    "complementary_skills",
    "describe_profile",
    "primary_language",
]
