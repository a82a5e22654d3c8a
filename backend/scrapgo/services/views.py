# scrapgo/services/views.py
"""Role-specific projections of the pickup store.

The functions take the full ``list_all()`` output and hold no state of their own,
so whatever they return is always consistent with the store at query time.
"""
from typing import List, Sequence

from scrapgo.core.states import IN_PROGRESS_STATES, PickupStatus
from scrapgo.models.pickup import PickupBase
from scrapgo.models.schemas import DashboardCounts


def customer_pickups(pickups: Sequence[PickupBase], customer_id: str) -> List[PickupBase]:
    return [p for p in pickups if p.customer_id == customer_id]


def recent_customer_pickups(pickups: Sequence[PickupBase], customer_id: str, limit: int = 3) -> List[PickupBase]:
    """Last ``limit`` pickups by insertion order, newest first."""
    if limit <= 0:
        return []
    own = customer_pickups(pickups, customer_id)
    return list(reversed(own[-limit:]))


def customer_history(pickups: Sequence[PickupBase], customer_id: str) -> List[PickupBase]:
    return sorted(customer_pickups(pickups, customer_id), key=lambda p: p.created_at, reverse=True)


def _partner_of(pickup: PickupBase):
    return getattr(pickup, "partner_id", None)


def partner_pickups(pickups: Sequence[PickupBase], partner_id: str) -> List[PickupBase]:
    return [p for p in pickups if p.state == PickupStatus.PENDING or _partner_of(p) == partner_id]


def dashboard_counts(pickups: Sequence[PickupBase], partner_id: str) -> DashboardCounts:
    mine = [p for p in pickups if _partner_of(p) == partner_id]
    return DashboardCounts(
        pending=sum(1 for p in pickups if p.state == PickupStatus.PENDING),
        in_progress=sum(1 for p in mine if p.state in IN_PROGRESS_STATES),
        completed=sum(1 for p in mine if p.state == PickupStatus.COMPLETED),
    )


class ReadViews:
    """Async facade: reads the store once per call and projects it."""

    def __init__(self, repo, recent_limit: int = 3):
        self.repo = repo
        self.recent_limit = recent_limit

    async def for_customer(self, customer_id: str) -> List[PickupBase]:
        return customer_pickups(await self.repo.list_all(), customer_id)

    async def recent_for_customer(self, customer_id: str) -> List[PickupBase]:
        return recent_customer_pickups(await self.repo.list_all(), customer_id, self.recent_limit)

    async def history_for_customer(self, customer_id: str) -> List[PickupBase]:
        return customer_history(await self.repo.list_all(), customer_id)

    async def for_partner(self, partner_id: str) -> List[PickupBase]:
        return partner_pickups(await self.repo.list_all(), partner_id)

    async def dashboard(self, partner_id: str) -> DashboardCounts:
        return dashboard_counts(await self.repo.list_all(), partner_id)
