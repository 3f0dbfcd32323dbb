"""
Command line entry point for previewing lab site content.

    labsite background [--doc-id ID] [--format json|html]
    labsite protocols [--query TEXT] [--format json|html]
    labsite communication [--format json|html]
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import httpx

from .api.app_logging import setup_logging
from .api.config import Settings
from .api.loaders import load_background, load_communication, load_protocols
from .core.google_clients import GoogleAPIError, GoogleCredentialHolder
from .core.rendering import filter_protocols, render_background, render_communication, render_protocols
from .core.sheets import SheetClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="labsite", description="Lab site content CLI")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging on stderr')
    subparsers = parser.add_subparsers(dest='command', required=True)

    background = subparsers.add_parser('background', help='Render the background primer document')
    background.add_argument('--doc-id', help='Google Doc ID (defaults to BACKGROUND_DOC_ID)')
    background.add_argument('--format', choices=('json', 'html'), default='json')

    protocols = subparsers.add_parser('protocols', help='List protocols from the protocol sheet')
    protocols.add_argument('--query', '-q', default='', help='Only show protocols whose title contains TEXT')
    protocols.add_argument('--format', choices=('json', 'html'), default='json')

    communication = subparsers.add_parser('communication', help='List communication resources by category')
    communication.add_argument('--format', choices=('json', 'html'), default='json')
    return parser


def _dump(payload) -> str:
    return json.dumps(payload, indent=2, default=str)


async def _run_background(args: argparse.Namespace, settings: Settings, client: httpx.AsyncClient) -> str:
    holder = GoogleCredentialHolder(settings.google_client_email, settings.google_private_key)
    doc_id = args.doc_id or settings.background_doc_id
    sections = await load_background(doc_id, holder, client)
    if args.format == 'html':
        return render_background(sections)
    return _dump({"docId": doc_id, "sections": sections})


async def _run_protocols(args: argparse.Namespace, settings: Settings, client: httpx.AsyncClient) -> str:
    records = await load_protocols(SheetClient(client), settings)
    if args.format == 'html':
        return render_protocols(records, query=args.query, default_image=settings.default_protocol_image)
    visible = filter_protocols(records, args.query).visible
    return _dump({"sheetId": settings.protocol_sheet_id, "protocols": [record.to_dict() for record in visible]})


async def _run_communication(args: argparse.Namespace, settings: Settings, client: httpx.AsyncClient) -> str:
    categories = await load_communication(SheetClient(client), settings)
    if args.format == 'html':
        return render_communication(categories)
    return _dump({"sheetId": settings.communication_sheet_id, "categories": categories})


COMMANDS = {
    'background': _run_background,
    'protocols': _run_protocols,
    'communication': _run_communication,
}


async def run(args: argparse.Namespace, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> str:
    handler = COMMANDS[args.command]
    if client is not None:
        return await handler(args, settings, client)
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as owned:
        return await handler(args, settings, owned)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else "WARNING", use_json=False, stream=sys.stderr)
    settings = Settings()
    try:
        output = asyncio.run(run(args, settings))
    except GoogleAPIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
