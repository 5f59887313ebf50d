"""Tests for main.py entry point."""

import json

import pytest
from unittest.mock import AsyncMock, patch

from style_audit.engine.errors import SnapshotError
from style_audit.main import build_parser, cli, load_tree


@pytest.fixture
def snapshot_file(sample_tree, tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(sample_tree.to_json())
    return path


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("style_audit.main.configure_logging"):
        yield


class TestBuildParser:
    """Tests for argument parsing."""

    def test_snapshot_args(self):
        args = build_parser().parse_args(["--snapshot", "page.json", "--no-aaa", "-o", "report.json"])
        assert args.snapshot == "page.json"
        assert args.url is None
        assert args.no_aaa is True
        assert args.output == "report.json"
        assert args.browser == "chromium"

    def test_source_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_sources_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--snapshot", "a.json", "--url", "https://example.com"])


class TestLoadTree:
    @pytest.mark.asyncio
    async def test_from_snapshot(self, snapshot_file):
        tree = await load_tree(str(snapshot_file), None)
        assert tree.url == "https://example.com"

    @pytest.mark.asyncio
    async def test_from_url(self, sample_tree):
        with patch("style_audit.main.StyleTreeCapture") as mock_capture_cls:
            mock_capture_cls.return_value.capture_url = AsyncMock(return_value=sample_tree)

            tree = await load_tree(None, "https://example.com", "firefox")

        assert tree is sample_tree
        mock_capture_cls.return_value.capture_url.assert_awaited_once_with(
            "https://example.com", browser_type="firefox"
        )


class TestCli:
    """Tests for the cli function."""

    def test_writes_report(self, snapshot_file, tmp_path, settings, capsys):
        output = tmp_path / "out" / "report.json"

        with patch("style_audit.main.get_settings", return_value=settings):
            code = cli(["--snapshot", str(snapshot_file), "--output", str(output)])

        assert code == 0
        report = json.loads(output.read_text())
        assert report["url"] == "https://example.com"
        assert report["issues"][0]["rule_type"] == "contrast-aa"
        assert "STYLE AUDIT SUMMARY" in capsys.readouterr().out

    def test_fail_on_critical(self, snapshot_file, settings):
        with patch("style_audit.main.get_settings", return_value=settings):
            assert cli(["--snapshot", str(snapshot_file), "--fail-on-critical"]) == 1

    def test_no_aaa(self, snapshot_file, tmp_path, settings):
        output = tmp_path / "report.json"

        with patch("style_audit.main.get_settings", return_value=settings):
            cli(["--snapshot", str(snapshot_file), "--no-aaa", "-o", str(output)])

        rule_types = {issue["rule_type"] for issue in json.loads(output.read_text())["issues"]}
        assert "contrast-aaa" not in rule_types

    def test_save_snapshot(self, snapshot_file, tmp_path, settings):
        copy = tmp_path / "copy.json"

        with patch("style_audit.main.get_settings", return_value=settings):
            cli(["--snapshot", str(snapshot_file), "--save-snapshot", str(copy)])

        assert json.loads(copy.read_text())["root"]["tag_name"] == "html"

    def test_unreadable_snapshot(self, tmp_path, settings, capsys):
        with patch("style_audit.main.get_settings", return_value=settings):
            code = cli(["--snapshot", str(tmp_path / "missing.json")])

        assert code == 2
        assert "Error:" in capsys.readouterr().err

    def test_capture_failure(self, settings):
        with patch("style_audit.main.get_settings", return_value=settings):
            with patch("style_audit.main.load_tree", AsyncMock(side_effect=SnapshotError("boom"))):
                assert cli(["--url", "https://example.com"]) == 2
