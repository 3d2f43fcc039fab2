"""Tests for the command-line interface."""

import json
import logging
from unittest.mock import AsyncMock, Mock, patch

import pytest

from seoscan.cli import build_parser, main
from seoscan.crawler import FetchedDocument
from seoscan.exceptions import FetchError

URL = "https://example.com/"


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def patched_crawler(clean_page):
    crawler = Mock()
    crawler.fetch = AsyncMock(return_value=FetchedDocument(
        url=URL,
        final_url=URL,
        status_code=200,
        content_type="text/html",
        html=clean_page,
        load_time=120,
    ))
    with patch("seoscan.cli.WebCrawler", return_value=crawler):
        yield crawler


def run_cli(*argv):
    main(["--store", "memory", "--log-level", "ERROR", *argv])


class TestParser:

    def test_audit_arguments(self):
        args = build_parser().parse_args(
            ["audit", "https://example.com", "--tier", "agency", "--name", "Shop", "-o", "json", "-f", "out.json"]
        )

        assert args.command == "audit"
        assert args.url == "https://example.com"
        assert args.tier == "agency"
        assert args.name == "Shop"
        assert args.output == "json"
        assert args.output_file == "out.json"

    def test_defaults(self):
        args = build_parser().parse_args(["submit", "https://example.com"])

        assert args.tier == "basic"
        assert args.name is None
        assert args.user is None
        assert args.store is None

    def test_rejects_unknown_tier(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["submit", "https://example.com", "--tier", "gold"])


class TestCommands:

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: seoscan" in capsys.readouterr().out

    def test_submit_prints_id(self, capsys):
        run_cli("submit", "https://example.com")
        assert capsys.readouterr().out.strip().startswith("aud_")

    def test_submit_invalid_url(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli("submit", "example.com")

        assert exc_info.value.code == 1
        assert "Error: Invalid URL format" in capsys.readouterr().out

    def test_report_unknown_audit(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli("report", "aud_missing")

        assert exc_info.value.code == 1
        assert "Error: Audit not found: aud_missing" in capsys.readouterr().out

    def test_list_empty(self, capsys):
        run_cli("list")
        assert "No audits found" in capsys.readouterr().out

    def test_delete_unknown_audit(self, capsys):
        with pytest.raises(SystemExit):
            run_cli("delete", "aud_missing")
        assert "Error: Audit not found" in capsys.readouterr().out

    def test_analyze_text(self, patched_crawler, capsys):
        run_cli("analyze", URL)

        out = capsys.readouterr().out
        assert f"HTML Analysis for: {URL}" in out
        assert "Title (49 chars)" in out
        assert "Schema types: Organization" in out
        patched_crawler.fetch.assert_awaited_once_with(URL)

    def test_analyze_json_to_file(self, patched_crawler, tmp_path, capsys):
        output_file = tmp_path / "analysis.json"

        run_cli("analyze", URL, "-o", "json", "-f", str(output_file))

        assert f"Results written to {output_file}" in capsys.readouterr().out
        data = json.loads(output_file.read_text())
        assert data["url"] == URL
        assert data["meta_tags"]["title_length"] == 49

    def test_analyze_fetch_error(self, patched_crawler, capsys):
        patched_crawler.fetch.side_effect = FetchError("Failed to fetch https://example.com/: 503 Service Unavailable")

        with pytest.raises(SystemExit) as exc_info:
            run_cli("analyze", URL)

        assert exc_info.value.code == 1
        assert "Error: Failed to fetch" in capsys.readouterr().out

    def test_bad_numeric_env_is_reported_without_traceback(self, monkeypatch, capsys):
        monkeypatch.setenv("FETCH_TIMEOUT", "ten")

        with pytest.raises(SystemExit) as exc_info:
            run_cli("list")

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Error: Invalid FETCH_TIMEOUT: 'ten' (expected a number)" in out
        assert "Traceback" not in out

    def test_analyze_bad_numeric_env(self, monkeypatch, capsys):
        monkeypatch.setenv("MAX_RECOMMENDATIONS", "eight")

        with pytest.raises(SystemExit) as exc_info:
            run_cli("analyze", URL)

        assert exc_info.value.code == 1
        assert "Error: Invalid MAX_RECOMMENDATIONS" in capsys.readouterr().out
