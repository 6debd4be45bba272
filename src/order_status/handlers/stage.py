"""Fulfillment stage resolution.

Age in whole days decides the stage by default; fulfillment evidence (a
FULFILLED status or any tracking number/URL) always wins and reports the
order as shipped.
"""

from datetime import datetime, timezone
from typing import Optional

from ..schemas import OrderRecord, Stage, StageResult

SECONDS_PER_DAY = 60 * 60 * 24

STAGE_MESSAGES = {
    Stage.PROCESSING: "order received and now being processed",
    Stage.PACKING: "order is being packed by the warehouse; tracking number to follow by email shortly",
    Stage.SHIPPED: "order has shipped",
}


def days_since(created: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since `created`, truncated and never negative."""
    now = now or datetime.now(timezone.utc)
    elapsed = (now - created).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


def stage_for_age(days: int) -> Stage:
    if days < 2:
        return Stage.PROCESSING
    if days < 4:
        return Stage.PACKING
    return Stage.SHIPPED


def has_shipping_evidence(order: OrderRecord) -> bool:
    if str(order.fulfillment_status).upper() == "FULFILLED":
        return True
    return any(t.has_tracking for f in order.fulfillments for t in f.tracking_info)


def resolve_stage(order: OrderRecord, now: Optional[datetime] = None) -> StageResult:
    """Compute `{stage, message, daysSince}` for a found order."""
    days = days_since(order.created, now)
    stage = stage_for_age(days)
    if has_shipping_evidence(order):
        stage = Stage.SHIPPED
    return StageResult(stage=stage, message=STAGE_MESSAGES[stage], days_since=days)
