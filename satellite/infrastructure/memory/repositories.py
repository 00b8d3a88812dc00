"""
In-memory repositories
Same contract as the SQLAlchemy repositories, backed by a MemoryStore
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional

from satellite.domain.constants import (
    DEFAULT_FORMATION_ID,
    DEFAULT_FUNDS,
    DEFAULT_PROFIT,
    DEFAULT_START,
)
from satellite.domain.models import (
    Budget,
    FormationHistory,
    FormationUsage,
    Holding,
    UserSettings,
)
from satellite.infrastructure.memory.store import MemoryStore
from satellite.utils.time import to_utc_naive, utc_now

_SETTINGS_FIELDS = ("current_formation_id", "last_check_date", "auto_check_enabled")
_BUDGET_FIELDS = ("funds", "start", "profit")


def _reject_unknown(fields: dict, allowed: tuple, entity: str) -> None:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise TypeError(f"Unknown {entity} fields: {sorted(unknown)}")


class MemorySettingsRepository:
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get(self, for_update: bool = False) -> Optional[UserSettings]:
        # The store lock already serializes the unit of work
        return self.store.settings

    async def upsert(self, **fields) -> UserSettings:
        _reject_unknown(fields, _SETTINGS_FIELDS, "settings")
        now = utc_now()
        values = {k: v for k, v in fields.items() if v is not None}
        if "last_check_date" in values:
            values["last_check_date"] = to_utc_naive(values["last_check_date"])

        current = self.store.settings
        if current is None:
            current = UserSettings(
                id=f"settings-{uuid.uuid4().hex}",
                current_formation_id=values.get("current_formation_id", DEFAULT_FORMATION_ID),
                last_check_date=values.get("last_check_date", now),
                auto_check_enabled=values.get("auto_check_enabled", True),
                created_at=now,
                updated_at=now,
            )
        else:
            current = replace(current, updated_at=now, **values)

        self.store.settings = current
        return current


class MemoryBudgetRepository:
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get(self) -> Optional[Budget]:
        return self.store.budget

    async def upsert(self, **fields) -> Budget:
        _reject_unknown(fields, _BUDGET_FIELDS, "budget")
        now = utc_now()
        values = {k: Decimal(str(v)) for k, v in fields.items() if v is not None}

        current = self.store.budget
        if current is None:
            current = Budget(
                id=f"budget-{uuid.uuid4().hex}",
                funds=values.get("funds", DEFAULT_FUNDS),
                start=values.get("start", DEFAULT_START),
                profit=values.get("profit", DEFAULT_PROFIT),
                updated_at=now,
            )
        else:
            current = replace(current, updated_at=now, **values)

        self.store.budget = current
        return current


class MemoryHoldingRepository:
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_all(self) -> List[Holding]:
        return sorted(self.store.holdings.values(), key=lambda h: (h.tier, h.ticker))

    async def upsert(self, holding: Holding) -> Holding:
        stored = replace(holding, updated_at=utc_now())
        self.store.holdings[stored.id] = stored
        return stored

    async def delete(self, holding_id: str) -> None:
        self.store.holdings.pop(holding_id, None)

    async def clear_all(self) -> None:
        self.store.holdings.clear()


class MemoryFormationUsageRepository:
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_all(self) -> List[FormationUsage]:
        return sorted(
            self.store.usage.values(),
            key=lambda u: u.last_used_date,
            reverse=True,
        )

    async def get_for_formation(self, formation_id: str) -> Optional[FormationUsage]:
        return self.store.usage.get(formation_id)

    async def save(self, usage: FormationUsage) -> FormationUsage:
        existing = self.store.usage.get(usage.formation_id)
        if existing is not None:
            # Row identity stays with the first record of a formation
            usage = replace(usage, id=existing.id, created_at=existing.created_at)
        self.store.usage[usage.formation_id] = usage
        return usage


class MemoryFormationHistoryRepository:
    def __init__(self, store: MemoryStore):
        self.store = store

    async def append(self, entry: FormationHistory) -> FormationHistory:
        self.store.history.append(entry)
        return entry

    async def get_most_recent(self) -> Optional[FormationHistory]:
        if not self.store.history:
            return None
        return max(self.store.history, key=lambda h: h.changed_at)

    async def get_all(self, limit: int = 100) -> List[FormationHistory]:
        ordered = sorted(self.store.history, key=lambda h: h.changed_at, reverse=True)
        return ordered[:limit]
