"""Tests for the command line entry point."""
import asyncio
import json

import httpx
import pytest

import scan_cli
from privacy_advisor.api import ScanApiClient
from privacy_advisor.persistence import ScanHistory
from privacy_advisor.utils import ClientSettings


class TestParser:
    def test_scan_command(self):
        args = scan_cli.build_parser().parse_args(["scan", "https://a.example", "--force"])
        assert args.command == "scan"
        assert args.url == "https://a.example"
        assert args.force

    def test_report_export_options(self):
        args = scan_cli.build_parser().parse_args(["report", "abc", "--json", "--severity", "high"])
        assert args.json
        assert args.severity == "high"

    def test_unknown_severity_rejected(self):
        with pytest.raises(SystemExit):
            scan_cli.build_parser().parse_args(["report", "abc", "--severity", "urgent"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            scan_cli.build_parser().parse_args([])


class TestHistoryCommand:
    def test_prints_history(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        db = tmp_path / "history.db"
        monkeypatch.setenv("PRIVACY_ADVISOR_HISTORY_PATH", str(db))
        ScanHistory(str(db)).add({"slug": "abc", "domain": "a.example", "score": 91})

        assert asyncio.run(scan_cli.main(["history"])) == 0
        out = capsys.readouterr().out
        assert "a.example" in out
        assert "abc" in out


class TestReportCommand:
    def test_json_export(self, tmp_path, capsys, recorder, respond, current_report):
        settings = ClientSettings(api_origin="http://scan.test", history_path=str(tmp_path / "history.db"))
        handler = recorder({"/api/v2/report/shop-example": respond(200, current_report)})

        async def go():
            async with ScanApiClient.from_settings(settings, transport=httpx.MockTransport(handler)) as api:
                return await scan_cli.show_report(api, settings, "shop-example", as_json=True, severity="high")

        assert asyncio.run(go()) == 0
        exported = json.loads(capsys.readouterr().out)
        assert exported["filter"] == "high"
        assert exported["scan"]["slug"] == "shop-example"
        assert [e["id"] for e in exported["evidence"]] == ["ev-1"]
        assert [e.slug for e in ScanHistory(settings.history_path).read()] == ["shop-example"]
