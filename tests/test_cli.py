import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from labsite import cli
from labsite.core.google_clients import ConfigurationError


def run_command(argv, settings, transport):
    args = cli.build_parser().parse_args(argv)

    async def _run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await cli.run(args, settings, client)

    return asyncio.run(_run())


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])
    args = cli.build_parser().parse_args(["background", "--doc-id", "abc", "--format", "html"])
    assert (args.command, args.doc_id, args.format) == ("background", "abc", "html")


def test_protocols_json_applies_query(make_settings, sheet_transport, gviz):
    transport = sheet_transport({("gviz", None): gviz(["Title"], [["PCR Protocol"], ["Western Blot"]])})
    settings = make_settings(protocol_sheet_id="sheet")
    output = json.loads(run_command(["protocols", "--query", "blot"], settings, transport))
    assert output["sheetId"] == "sheet"
    assert [p["title"] for p in output["protocols"]] == ["Western Blot"]


def test_communication_html(make_settings, sheet_transport, gviz):
    transport = sheet_transport({("gviz", "4"): gviz(["Title"], [["Poster guide"]])})
    settings = make_settings(communication_sheet_id="c", communication_categories=[{"gid": "4", "title": "Posters"}])
    html = run_command(["communication", "--format", "html"], settings, transport)
    assert 'id="posters"' in html
    assert "Poster guide" in html


def test_background_json_uses_configured_doc(make_settings, sheet_transport):
    sections = [{"title": "Intro", "id": "intro", "blocks": ["<p>Hi</p>"], "subsections": []}]
    with patch("labsite.cli.load_background", new=AsyncMock(return_value=sections)) as loader:
        output = json.loads(run_command(["background"], make_settings(), sheet_transport({})))
    assert output == {"docId": make_settings().background_doc_id, "sections": sections}
    assert loader.await_args.args[0] == make_settings().background_doc_id


def test_background_rejects_text_format():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["background", "--format", "text"])


def test_main_prints_output(capsys):
    with patch("labsite.cli.run", new=AsyncMock(return_value='{"ok": true}')):
        assert cli.main(["communication"]) == 0
    assert capsys.readouterr().out.strip() == '{"ok": true}'


def test_main_reports_configuration_errors(capsys):
    failing = AsyncMock(side_effect=ConfigurationError("Google service account credentials are not configured."))
    with patch("labsite.cli.run", new=failing):
        assert cli.main(["background"]) == 1
    assert "credentials are not configured" in capsys.readouterr().err
