# tests/unit/ingest/test_unit_identifiers.py — v1
"""Tests for ingest/identifiers.py."""

from __future__ import annotations

import pytest

from candidaterank.ingest.identifiers import (
    IdentifierKind,
    classify_identifier,
    normalize_linkedin_url,
    parse_github_login,
)


class TestNormalizeLinkedinUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.linkedin.com/in/Jane-Doe/",
            "http://linkedin.com/in/jane-doe",
            "linkedin.com/in/jane-doe?trk=profile",
            "  www.linkedin.com/jane-doe  ",
        ],
    )
    def test_variants_share_slug(self, url):
        assert normalize_linkedin_url(url) == "jane-doe"


class TestParseGithubLogin:
    def test_url(self):
        assert parse_github_login("https://github.com/Octocat/hello-world") == "octocat"

    def test_bare_login(self):
        assert parse_github_login("@torvalds") == "torvalds"

    def test_invalid(self):
        assert parse_github_login("not a login") is None


class TestClassifyIdentifier:
    def test_linkedin(self):
        assert classify_identifier("https://www.linkedin.com/in/jane-doe") == (
            IdentifierKind.LINKEDIN,
            "jane-doe",
        )

    def test_github(self):
        assert classify_identifier("github.com/octocat") == (IdentifierKind.GITHUB, "octocat")

    def test_anything_else_is_profile_id(self):
        assert classify_identifier(" p_001 ") == (IdentifierKind.PROFILE_ID, "p_001")
