"""Tests for the meta tag analyzer."""

import pytest
from bs4 import BeautifulSoup

from seoscan.config import AnalysisThresholds
from seoscan.meta_analyzer import MetaTagAnalyzer
from seoscan.models import IssueType, Severity


def analyze(html, thresholds=None):
    return MetaTagAnalyzer(thresholds).analyze(BeautifulSoup(html, "lxml"), "https://example.com/")


def page(head="", html_attrs=' lang="en"'):
    return f"<html{html_attrs}><head>{head}</head><body></body></html>"


def issues_for(result, subject):
    return [issue for issue in result.issues if issue.subject == subject]


class TestMetaTagAnalyzer:
    """Test cases for MetaTagAnalyzer."""

    def test_clean_page_has_no_issues(self, clean_page):
        result = analyze(clean_page)

        assert result.issues == []
        assert result.title == "Acme Widgets - Durable Widgets for Every Workshop"
        assert result.title_length == 49
        assert result.robots == "index, follow"
        assert result.canonical == "https://example.com/"
        assert result.og_image == "https://example.com/og.png"
        assert result.twitter_card == "summary_large_image"
        assert result.viewport == "width=device-width, initial-scale=1"
        assert result.charset == "utf-8"
        assert result.language == "en"

    @pytest.mark.parametrize("length,expected", [
        (29, IssueType.TOO_SHORT),
        (30, None),
        (45, None),
        (60, None),
        (61, IssueType.TOO_LONG),
    ])
    def test_title_length_boundaries(self, length, expected):
        result = analyze(page(f"<title>{'a' * length}</title>"))
        title_issues = issues_for(result, "title")

        if expected is None:
            assert title_issues == []
        else:
            assert len(title_issues) == 1
            assert title_issues[0].type == expected
            assert title_issues[0].severity == Severity.WARNING

    def test_title_too_short_message(self):
        result = analyze(page("<title>Home</title>"))
        issue = issues_for(result, "title")[0]
        assert issue.message == "Title is too short (4 chars). Recommended: 30-60 characters"

    @pytest.mark.parametrize("length,expected", [
        (69, IssueType.TOO_SHORT),
        (70, None),
        (160, None),
        (161, IssueType.TOO_LONG),
    ])
    def test_description_length_boundaries(self, length, expected):
        result = analyze(page(f'<meta name="description" content="{"d" * length}">'))
        description_issues = issues_for(result, "description")

        if expected is None:
            assert description_issues == []
        else:
            assert [issue.type for issue in description_issues] == [expected]

    def test_missing_title_and_description_are_critical(self):
        result = analyze(page())

        title_issue = issues_for(result, "title")[0]
        description_issue = issues_for(result, "description")[0]
        assert title_issue.type == IssueType.MISSING
        assert title_issue.severity == Severity.CRITICAL
        assert title_issue.message == "Page is missing a title tag"
        assert description_issue.severity == Severity.CRITICAL
        assert description_issue.message == "Page is missing a meta description"

    def test_whitespace_title_counts_as_missing(self):
        result = analyze(page("<title>   </title>"))
        assert result.title is None
        assert result.title_length == 0
        assert issues_for(result, "title")[0].type == IssueType.MISSING

    def test_issue_order_on_empty_document(self):
        result = analyze(page(html_attrs=""))
        assert [issue.subject for issue in result.issues] == [
            "title",
            "description",
            "canonical",
            "open_graph",
            "viewport",
            "language",
        ]

    def test_partial_open_graph_yields_single_issue(self):
        result = analyze(page('<meta property="og:title" content="Only the title">'))
        og_issues = issues_for(result, "open_graph")

        assert len(og_issues) == 1
        assert og_issues[0].severity == Severity.INFO
        assert result.og_title == "Only the title"
        assert result.og_description is None

    def test_missing_viewport_is_critical(self):
        result = analyze(page())
        issue = issues_for(result, "viewport")[0]
        assert issue.severity == Severity.CRITICAL
        assert issue.message == "Page is missing viewport meta tag (important for mobile)"

    def test_missing_canonical_and_lang_are_warnings(self):
        result = analyze(page(html_attrs=""))
        assert issues_for(result, "canonical")[0].severity == Severity.WARNING
        language_issue = issues_for(result, "language")[0]
        assert language_issue.severity == Severity.WARNING
        assert language_issue.message == "HTML element is missing lang attribute"

    def test_charset_from_http_equiv(self):
        result = analyze(page(
            '<meta http-equiv="Content-Type" content="text/html; charset=ISO-8859-1">'
        ))
        assert result.charset == "ISO-8859-1"

    def test_custom_thresholds(self):
        thresholds = AnalysisThresholds(title_min=5, title_max=10)
        result = analyze(page("<title>Short</title>"), thresholds)
        assert issues_for(result, "title") == []
