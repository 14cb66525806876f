# src/ingest/identifiers.py — v1
"""Parsing of seed identifiers: LinkedIn URLs, GitHub URLs and logins."""

from __future__ import annotations

import re
from enum import Enum

LINKEDIN = "linkedin"
GITHUB = "github"

_LINKEDIN_PREFIX = re.compile(r"^(https?://)?(www\.)?linkedin\.com/(in/)?")
_GITHUB_URL = re.compile(r"^(https?://)?(www\.)?github\.com/([^/?#]+)")
_GITHUB_LOGIN = re.compile(r"^@?([a-z\d](?:[a-z\d-]{0,38}))$")


class IdentifierKind(str, Enum):
    LINKEDIN = "linkedin"
    GITHUB = "github"
    PROFILE_ID = "profile_id"


def normalize_linkedin_url(url: str) -> str:
    """Reduce a LinkedIn profile URL to its lower-case slug."""
    return _LINKEDIN_PREFIX.sub("", url.strip().lower()).split("?")[0].rstrip("/")


def parse_github_login(identifier: str) -> str | None:
    """GitHub login from a profile URL or bare login; None if neither."""
    text = identifier.strip().lower()
    match = _GITHUB_URL.match(text)
    if match:
        return match.group(3)
    match = _GITHUB_LOGIN.match(text)
    return match.group(1) if match else None


def classify_identifier(identifier: str) -> tuple[IdentifierKind, str]:
    """Kind of a seed identifier and its lookup key.

    Anything that is not a LinkedIn or GitHub URL is treated as a stored
    profile id first; the resolver falls back to a GitHub login lookup.
    """
    text = identifier.strip()
    lowered = text.lower()
    if "linkedin.com/" in lowered:
        return IdentifierKind.LINKEDIN, normalize_linkedin_url(text)
    if "github.com/" in lowered:
        login = parse_github_login(text)
        if login:
            return IdentifierKind.GITHUB, login
    return IdentifierKind.PROFILE_ID, text
