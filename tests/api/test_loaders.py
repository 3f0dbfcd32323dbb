import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from labsite.api.config import CommunicationCategory
from labsite.api.loaders import load_background, load_communication, load_protocols
from labsite.core.google_clients import GoogleCredentialHolder
from labsite.core.sheets import SheetClient


def run_with_sheets(transport, coro_factory):
    async def _run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await coro_factory(SheetClient(client))

    return asyncio.run(_run())


def test_load_protocols_without_sheet_is_empty(make_settings, sheet_transport):
    transport = sheet_transport({})
    records = run_with_sheets(transport, lambda sheets: load_protocols(sheets, make_settings(protocol_sheet_id=None)))
    assert records == []
    assert transport.calls == []


def test_load_protocols_uses_gid_for_both_formats(make_settings, sheet_transport, gviz):
    transport = sheet_transport({
        ("gviz", "9"): gviz(["Summary"], [["no title here"]]),
        ("csv", "9"): "Title\nPCR\n",
    })
    settings = make_settings(protocol_sheet_id="s", protocol_sheet_gid="9")
    records = run_with_sheets(transport, lambda sheets: load_protocols(sheets, settings))
    assert [r.title for r in records] == ["PCR"]
    assert transport.calls == [("gviz", "9"), ("csv", "9")]


def test_load_communication_gviz_empty_falls_back_to_csv(make_settings, sheet_transport, gviz):
    transport = sheet_transport({
        ("gviz", "3"): gviz(["Title"], []),
        ("csv", "3"): "Name,URL\nStyle guide,https://x.org/style\n",
    })
    settings = make_settings(
        communication_sheet_id="c",
        communication_categories=[{"gid": "3", "title": "Writing"}],
    )
    categories = run_with_sheets(transport, lambda sheets: load_communication(sheets, settings))
    assert categories == [{
        "id": "writing",
        "title": "Writing",
        "description": "",
        "accent": "",
        "resources": [{"title": "Style guide", "summary": "", "link": "https://x.org/style", "tags": ""}],
    }]


def test_load_communication_unconfigured(make_settings, sheet_transport):
    transport = sheet_transport({})
    settings = make_settings(communication_sheet_id=None)
    explicit = [CommunicationCategory(gid="1", title="A")]
    assert run_with_sheets(transport, lambda sheets: load_communication(sheets, settings, explicit)) == []
    assert transport.calls == []


def test_load_background_skips_token_without_inline_objects():
    holder = GoogleCredentialHolder("svc@example.com", "key")
    holder.access_token = AsyncMock(return_value="tok")
    document = {"body": {"content": [{"paragraph": {"elements": [{"textRun": {"content": "Hi\n"}}]}}]}}
    with patch("labsite.api.loaders.fetch_document", new=AsyncMock(return_value=document)):
        sections = asyncio.run(load_background("doc", holder, MagicMock()))
    assert sections == [{"title": "Overview", "id": "overview", "blocks": ["<p>Hi</p>"], "subsections": []}]
    holder.access_token.assert_not_awaited()
