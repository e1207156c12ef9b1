"""Tests for ogrelay.output -- stdout/stderr discipline and formats."""

from __future__ import annotations

import json

import pytest

from ogrelay.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    _to_json,
    get_output,
    reset_output,
    set_output,
)


class TestFormatResolution:
    def test_auto_resolves_to_plain_when_not_a_tty(self) -> None:
        output = OutputManager(format=OutputFormat.AUTO)
        assert output.format == OutputFormat.PLAIN

    def test_explicit_format_kept(self) -> None:
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color()

    def test_dumb_terminal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color()


class TestDataOutput:
    def test_json_goes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.JSON).format_response({"metal": 500})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"metal": 500}
        assert captured.err == ""

    def test_plain_dict_is_tab_separated(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).format_response({"metal": 500, "crystal": 250})
        assert capsys.readouterr().out == "metal\t500\ncrystal\t250\n"

    def test_plain_html_printed_verbatim(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).format_response("<html></html>", "text/html")
        assert capsys.readouterr().out == "<html></html>\n"

    def test_table_as_json_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.JSON).print_table(
            ["Name", "Path"], [["overview", "/game/index.php?page=ingame"]]
        )
        assert json.loads(capsys.readouterr().out) == [
            {"Name": "overview", "Path": "/game/index.php?page=ingame"}
        ]

    def test_to_json_passes_non_json_strings_through(self) -> None:
        assert _to_json("<html>") == "<html>"
        assert json.loads(_to_json('{"a": 1}')) == {"a": 1}


class TestDiagnostics:
    def test_info_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True).info("Logged in")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Logged in\n"

    def test_quiet_suppresses_info_not_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        output = OutputManager(no_color=True, quiet=True)
        output.info("hidden")
        output.success("hidden")
        output.warning("careful")
        output.error("boom")
        assert capsys.readouterr().err == "Warning: careful\nError: boom\n"

    def test_debug_requires_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True).debug("Cache hit")
        assert capsys.readouterr().err == ""
        OutputManager(no_color=True, verbose=True).debug("Cache hit")
        assert capsys.readouterr().err == "[debug] Cache hit\n"


class TestGlobalInstance:
    def test_set_and_reset(self) -> None:
        output = OutputManager(format=OutputFormat.JSON)
        set_output(output)
        assert get_output() is output
        reset_output()
        assert get_output() is not output
