"""Tests for the link analyzer."""

import pytest
from bs4 import BeautifulSoup

from seoscan.link_analyzer import LinkAnalyzer
from seoscan.models import IssueType, Severity

PAGE_URL = "https://example.com/products/"


def analyze(body, url=PAGE_URL):
    html = f"<html><body>{body}</body></html>"
    return LinkAnalyzer().analyze(BeautifulSoup(html, "lxml"), url)


class TestLinkAnalyzer:
    """Test cases for LinkAnalyzer."""

    def test_skips_non_navigational_targets(self):
        result = analyze(
            '<a href="#top">Top</a>'
            '<a href="javascript:void(0)">Menu</a>'
            '<a href="mailto:sales@example.com">Email</a>'
            '<a href="tel:+15550100">Call</a>'
            '<a>No href</a>'
        )
        assert result.total == 0
        assert result.issues == []

    def test_internal_and_external_classification(self):
        result = analyze(
            '<a href="/about">About us</a>'
            '<a href="widgets">Widget catalogue</a>'
            '<a href="https://EXAMPLE.com/contact">Contact page</a>'
            '<a href="https://partner.example.org/">Partner site</a>'
        )

        assert result.internal_count == 3
        assert result.external_count == 1
        assert [link.href for link in result.internal] == [
            "https://example.com/about",
            "https://example.com/products/widgets",
            "https://EXAMPLE.com/contact",
        ]
        assert result.external[0].is_internal is False

    def test_nofollow_internal_is_warning(self):
        result = analyze(
            '<a href="/login" rel="nofollow">Sign in</a>'
            '<a href="https://ads.example.net/" rel="sponsored nofollow">Sponsor</a>'
        )
        nofollow_issues = [i for i in result.issues if i.type == IssueType.NOFOLLOW_INTERNAL]

        assert len(nofollow_issues) == 1
        assert nofollow_issues[0].severity == Severity.WARNING
        assert nofollow_issues[0].subject == "https://example.com/login"
        assert len(result.nofollow) == 1
        assert result.external[0].is_nofollow is True

    def test_empty_link(self):
        result = analyze(
            '<a href="/empty"></a>'
            '<a href="/logo"><img src="/logo.png" alt="Home"></a>'
        )
        empty = [i for i in result.issues if i.type == IssueType.EMPTY_LINK]

        assert len(empty) == 1
        assert empty[0].subject == "https://example.com/empty"

    @pytest.mark.parametrize("text", ["Click Here", "read more", "LEARN MORE", "here", "link", "More"])
    def test_generic_anchor_text(self, text):
        result = analyze(f'<a href="/page">{text}</a>')
        generic = [i for i in result.issues if i.type == IssueType.GENERIC_ANCHOR]

        assert len(generic) == 1
        assert generic[0].severity == Severity.INFO

    def test_descriptive_anchor_text_is_fine(self):
        result = analyze('<a href="/pricing">See our pricing plans</a>')
        assert result.issues == []

    def test_new_tab_flag(self):
        result = analyze('<a href="https://partner.example.org/" target="_blank">Partner</a>')
        assert result.external[0].is_new_tab is True

    def test_too_many_links(self):
        at_limit = "".join(f'<a href="/p{i}">Page {i}</a>' for i in range(100))
        assert analyze(at_limit).issues == []

        over_limit = at_limit + '<a href="/p100">Page 100</a>'
        result = analyze(over_limit)
        assert [i.type for i in result.issues] == [IssueType.TOO_MANY_LINKS]
        assert result.issues[0].severity == Severity.INFO
        assert result.issues[0].message.startswith("Page has 101 links")
