"""
Plan: the slot-keyed state a session accumulates from agent results.

Each slot is last-write-wins: a merge fully replaces the previous value.
The budget and candidate count are derived from the slots on every merge.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agent_dispatch.utils.helpers import utc_now

SLOT_LABELS = {
    "flights": "flight arrangements",
    "hotels": "hotel bookings",
    "activities": "local activities",
    "itinerary": "a day-by-day itinerary",
    "candidates": "candidate matches",
    "feedback": "interview feedback",
    "reels": "reel analysis",
    "insights": "talent insights",
}


def count_candidates(value: Any) -> int:
    """Number of candidates held by a ``candidates`` slot value."""
    if isinstance(value, list):
        return len(value)
    if isinstance(value, dict):
        if isinstance(value.get("candidates"), list):
            return len(value["candidates"])
        if "candidate" in value:
            return 1
    return 0


class Plan(BaseModel):
    """Aggregate of agent results for one session."""

    slots: dict[str, Any] = Field(default_factory=dict)
    costs: dict[str, float] = Field(default_factory=dict)
    candidate_count: int = 0
    updated_at: datetime | None = None

    def merge(self, slot: str, data: Any, cost: float = 0.0) -> bool:
        """
        Replace a slot with a new result.

        Args:
            slot: Slot owned by the contributing agent
            data: New value; None leaves the slot untouched
            cost: Cost attributed to the slot

        Returns:
            True when the plan changed
        """
        if data is None:
            return False

        self.slots[slot] = data
        self.costs[slot] = float(cost or 0.0)
        self.candidate_count = count_candidates(self.slots.get("candidates"))
        self.updated_at = utc_now()
        return True

    @property
    def budget(self) -> dict[str, float]:
        budget = {slot: round(cost, 2) for slot, cost in self.costs.items()}
        budget["total"] = round(sum(self.costs.values()), 2)
        return budget

    def get(self, slot: str, default: Any = None) -> Any:
        return self.slots.get(slot, default)

    def __getitem__(self, slot: str) -> Any:
        return self.slots[slot]

    def __contains__(self, slot: object) -> bool:
        return slot in self.slots

    def filled_slots(self) -> list[str]:
        return [slot for slot, value in self.slots.items() if value]

    def describe(self) -> str:
        """Sentence fragment listing what the plan holds."""
        labels = [SLOT_LABELS.get(slot, slot) for slot in self.filled_slots()]
        if not labels:
            return ""
        if len(labels) == 1:
            return labels[0]
        return f"{', '.join(labels[:-1])} and {labels[-1]}"

    def to_dict(self) -> dict[str, Any]:
        """Flat view: slots at the top level plus the derived aggregates."""
        return {
            **self.slots,
            "budget": self.budget,
            "candidate_count": self.candidate_count,
        }
