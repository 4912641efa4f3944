"""
Financial aggregation for reconciled campaigns.

Pure arithmetic over a ReconciledCampaignState plus the two side channels
joined in from the datastore (gift ledger totals and update activity).
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional, Tuple

from fundraiser_toolkit.campaigns.models import (
    CampaignUpdate,
    ReconciledCampaignState,
    ReconciledCampaignView,
    TipRecord,
)

RECENT_UPDATE_WINDOW = timedelta(days=7)


def price_per_unit(goal_usd: float, max_editions: int) -> float:
    """goal / editions, or 1 when either is not positive."""
    if goal_usd > 0 and max_editions > 0:
        return goal_usd / max_editions
    return 1.0


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; progress must round .5 up
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp_percent(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def progress_percent(
    editions_sold: int, max_editions: int, raised_usd: float, goal_usd: float
) -> int:
    """Edition-based progress when editions are capped, else goal-based."""
    if max_editions > 0:
        return _clamp_percent(100 * editions_sold / max_editions)
    if goal_usd > 0:
        return _clamp_percent(100 * raised_usd / goal_usd)
    return 0


def sum_tips(records: Iterable[TipRecord]) -> Dict[int, float]:
    """Gift ledger totals per campaign id. Missing ids read as 0."""
    totals: Dict[int, float] = defaultdict(float)
    for record in records:
        totals[record.campaign_id] += record.tip_usd
    return totals


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def summarize_updates(
    updates: Iterable[CampaignUpdate],
) -> Dict[str, Tuple[int, Optional[str]]]:
    """Approved update count and latest review time per cached record id."""
    summary: Dict[str, Tuple[int, Optional[str]]] = {}
    for update in updates:
        count, latest = summary.get(update.record_id, (0, None))
        current = _parse_timestamp(update.reviewed_at)
        previous = _parse_timestamp(latest)
        if current is not None and (previous is None or current > previous):
            latest = update.reviewed_at
        summary[update.record_id] = (count + 1, latest)
    return summary


def aggregate(
    reconciled: ReconciledCampaignState,
    ledger_tips_usd: float = 0.0,
    update_count: int = 0,
    last_updated: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ReconciledCampaignView:
    """Derive the display figures for one reconciled campaign."""
    goal = reconciled.goal_usd
    max_editions = reconciled.max_editions
    sold = reconciled.editions_sold
    gross = reconciled.gross_raised_usd

    ppu = price_per_unit(goal, max_editions)
    nft_sales = min(sold * ppu, gross)
    tips = max(0.0, gross - nft_sales)

    sold_out = max_editions > 0 and sold >= max_editions
    remaining = max(0, max_editions - sold) if max_editions > 0 else None

    last = _parse_timestamp(last_updated)
    now = now or datetime.now(timezone.utc)
    has_recent = last is not None and now - last <= RECENT_UPDATE_WINDOW

    return ReconciledCampaignView(
        state=reconciled,
        price_per_unit=ppu,
        raised_usd=gross,
        nft_sales_usd=nft_sales,
        tips_usd=tips,
        progress=progress_percent(sold, max_editions, gross, goal),
        remaining=remaining,
        sold_out=sold_out,
        active=not sold_out,
        ledger_tips_usd=ledger_tips_usd,
        update_count=update_count,
        last_updated=last_updated,
        has_recent_update=has_recent,
    )
