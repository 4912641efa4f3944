"""Shared formatting and file utilities for commands."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from fundraiser_toolkit.campaigns.models import ReconciledCampaignView

# Shared console instance
console = Console()


def format_address(address: str, length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Args:
        address: Ethereum address
        length: Total visible characters (default: 10)

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_usd_value(value: Optional[float]) -> str:
    """Format a USD amount, "-" when unknown."""
    if value is None:
        return "-"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.1f}K"
    return f"${value:.2f}"


def save_json_output(
    data: Any,
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def generate_timestamped_filename(prefix: str, extension: str = "json") -> str:
    """
    Generate a filename with timestamp.

    Args:
        prefix: Filename prefix
        extension: File extension (without dot)

    Returns:
        Filename like "prefix_20240315_123456.json"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def create_campaigns_table() -> Table:
    """Rich table with the standard campaign columns."""
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("ID", width=5, justify="right")
    table.add_column("Contract", width=13)
    table.add_column("Chain", width=8, justify="right")
    table.add_column("Title", width=24)
    table.add_column("Editions", width=10, justify="center")
    table.add_column("Raised", width=10, justify="right")
    table.add_column("Tips", width=9, justify="right")
    table.add_column("Progress", width=8, justify="right")
    table.add_column("Source", width=8)
    return table


def add_campaign_to_table(table: Table, view: ReconciledCampaignView) -> None:
    """Add one reconciled view as a row."""
    cap = str(view.max_editions) if view.max_editions > 0 else "∞"
    editions = f"{view.editions_sold}/{cap}"
    if view.sold_out:
        editions = f"[bold yellow]{editions}[/bold yellow]"

    source = view.state.raised_source
    if not view.state.onchain_available:
        source = f"[dim]{source}[/dim]"

    table.add_row(
        str(view.campaign_id),
        format_address(view.contract_address),
        str(view.state.chain_id),
        (view.state.title or "")[:24],
        editions,
        format_usd_value(view.raised_usd),
        format_usd_value(view.tips_usd),
        f"{view.progress}%",
        source,
    )


def campaign_detail_rows(view: ReconciledCampaignView) -> Dict[str, str]:
    """Label -> value pairs for a single-campaign panel."""
    s = view.state
    return {
        "Campaign": f"#{s.campaign_id} {s.title or ''}".strip(),
        "Contract": f"{s.contract_address} ({s.contract_version}, chain {s.chain_id})",
        "Goal": format_usd_value(s.goal_usd),
        "Editions": f"{s.editions_sold} sold (cached {s.editions_sold_cached})"
        + (f" of {s.max_editions}" if s.max_editions > 0 else ", unlimited"),
        "Price per unit": format_usd_value(view.price_per_unit),
        "Raised (gross)": f"{format_usd_value(s.gross_raised_usd)} [{s.raised_source}]",
        "Raised (net)": format_usd_value(s.net_raised_usd),
        "NFT sales": format_usd_value(view.nft_sales_usd),
        "Tips (derived)": format_usd_value(view.tips_usd),
        "Tips (ledger)": format_usd_value(view.ledger_tips_usd),
        "Progress": f"{view.progress}%",
        "Status": "sold out" if view.sold_out else "active",
        "Updates": f"{view.update_count} (last {view.last_updated or 'never'})",
    }
