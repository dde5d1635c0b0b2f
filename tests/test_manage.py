"""Tests for the management CLI commands."""

import json

import manage
from stockflow.core.exceptions import InsufficientStockError, SyncAlreadyRunningError


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


class TestErrorOutput:
    def test_domain_error_printed_as_error_response(self, capsys):
        code = manage._print_error(
            InsufficientStockError("P1", "W1", requested=5, available=2)
        )

        assert code == manage.EXIT_FAILED
        payload = _last_json_line(capsys.readouterr().out)
        assert payload["error"] == "INSUFFICIENT_STOCK"
        assert payload["details"]["available"] == 2

    def test_error_without_details(self, capsys):
        manage._print_error(SyncAlreadyRunningError("default"))
        payload = _last_json_line(capsys.readouterr().out)
        assert payload["error"] == "SYNC_ALREADY_RUNNING"
        assert "default" in payload["message"]


class TestStockCommand:
    async def test_limit_out_of_range_is_reported(self, capsys):
        code = await manage._stock(None, None, 5000)

        assert code == manage.EXIT_FAILED
        payload = _last_json_line(capsys.readouterr().out)
        assert payload["error"] == "VALIDATION_ERROR"
        assert payload["details"]["field"] == "limit"
        assert payload["details"]["value"] == "5000"

    async def test_report_on_empty_database(self, capsys):
        assert await manage._migrate() == manage.EXIT_OK
        assert await manage._stock(None, None, 10) == manage.EXIT_OK

        out = capsys.readouterr().out
        assert "No stock rows." in out
        assert "Pending sync entries: 0" in out
