#!/usr/bin/env python3
"""
Unified CLI for the Fundraiser Toolkit.

Examples:
  - List the marketplace projection
    fundraisers list --limit 12 --cursor 0
    fundraisers --records snapshot.json list --json

  - Single campaign
    fundraisers campaign --campaign-id 7
    fundraisers campaign --campaign-id 7 --contract 0x... --chain-id 1043

  - HTTP API
    fundraisers serve --host 0.0.0.0 --port 8000
"""

import argparse
import asyncio
from typing import List, Optional

from rich.table import Table

from fundraiser_toolkit.campaigns.service import (
    DEFAULT_PAGE_SIZE,
    CampaignService,
)
from fundraiser_toolkit.commands.validation import (
    parse_cursor,
    parse_limit,
    validate_chain_id,
    validate_eth_address,
)
from fundraiser_toolkit.shared.config import Settings
from fundraiser_toolkit.shared.services.datastore import (
    CampaignDatastore,
    JsonFileDatastore,
    SupabaseDatastore,
)
from fundraiser_toolkit.shared.services.http_client import (
    aclose_async_client,
    configure_async_client,
)
from fundraiser_toolkit.utils.formatters import (
    add_campaign_to_table,
    campaign_detail_rows,
    console,
    create_campaigns_table,
    generate_timestamped_filename,
    save_json_output,
)


def _build_service(args: argparse.Namespace) -> CampaignService:
    settings = Settings.from_env()
    configure_async_client(
        settings.http_timeout,
        settings.http_connect_timeout,
        settings.http_user_agent,
    )
    datastore: CampaignDatastore
    if args.records:
        datastore = JsonFileDatastore(args.records)
    else:
        datastore = SupabaseDatastore(settings.supabase_url, settings.supabase_key)
    return CampaignService(settings, datastore)


def cmd_list(args: argparse.Namespace) -> None:
    service = _build_service(args)

    async def run():
        try:
            return await service.list_campaigns(
                limit=parse_limit(args.limit), cursor=parse_cursor(args.cursor)
            )
        finally:
            await aclose_async_client()

    listing = asyncio.run(run())

    if args.json:
        out = {**listing.to_dict(), "summary": listing.summary.to_dict()}
        filename = args.output or generate_timestamped_filename("campaigns")
        save_json_output(out, filename)
        return

    page = listing.page
    if not page.items:
        console.print("[yellow]No campaigns to show[/yellow]")
        return

    table = create_campaigns_table()
    for view in page.items:
        add_campaign_to_table(table, view)
    console.print(table)

    footer = f"Showing {len(page.items)} of {page.total}"
    if page.next_cursor is not None:
        footer += f" | next: --cursor {page.next_cursor}"
    console.print(f"[dim]{footer}[/dim]")

    summary = listing.summary
    if summary.onchain_failures or summary.records_excluded:
        console.print(
            f"[yellow]{summary.onchain_failures} on-chain read(s) fell back to "
            f"cached data, {summary.records_excluded} record(s) excluded[/yellow]"
        )


def cmd_campaign(args: argparse.Namespace) -> None:
    service = _build_service(args)
    contract = (
        validate_eth_address(args.contract, "contract") if args.contract else None
    )
    if args.chain_id is not None:
        validate_chain_id(args.chain_id, service.registry.supported_chains())

    async def run():
        try:
            return await service.get_campaign(
                args.campaign_id, contract_address=contract, chain_id=args.chain_id
            )
        finally:
            await aclose_async_client()

    view = asyncio.run(run())

    if args.json:
        filename = args.output or f"campaign_{args.campaign_id}.json"
        save_json_output(dict(view.to_dict()), filename)
        return

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for label, value in campaign_detail_rows(view).items():
        table.add_row(label, value)
    console.print(table)


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from fundraiser_toolkit.api import create_app

    service = _build_service(args)
    uvicorn.run(create_app(service), host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fundraisers", description="Fundraiser Toolkit CLI"
    )
    parser.add_argument(
        "--records",
        type=str,
        help="JSON snapshot to use instead of Supabase",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # list
    p_list = sub.add_parser("list", help="List reconciled campaigns")
    p_list.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE)
    p_list.add_argument("--cursor", type=int, default=0)
    p_list.add_argument("--json", action="store_true", help="Output JSON")
    p_list.add_argument("--output", type=str, help="Output filename")
    p_list.set_defaults(func=cmd_list)

    # campaign
    p_camp = sub.add_parser("campaign", help="Show one reconciled campaign")
    p_camp.add_argument("--campaign-id", type=int, required=True)
    p_camp.add_argument("--contract", type=str, help="Contract override")
    p_camp.add_argument("--chain-id", type=int, help="Chain override")
    p_camp.add_argument("--json", action="store_true", help="Output JSON")
    p_camp.add_argument("--output", type=str, help="Output filename")
    p_camp.set_defaults(func=cmd_campaign)

    # serve
    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", type=str, default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise


if __name__ == "__main__":
    main()
