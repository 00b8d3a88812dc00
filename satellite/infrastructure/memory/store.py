"""
In-memory record store.

One MemoryStore instance backs every memory repository of an application.
Callers hold `lock` for a whole unit of work; repositories never take it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from satellite.domain.models import (
    Budget,
    FormationHistory,
    FormationUsage,
    Holding,
    UserSettings,
)


@dataclass
class MemoryStore:
    settings: Optional[UserSettings] = None
    budget: Optional[Budget] = None
    holdings: Dict[str, Holding] = field(default_factory=dict)
    usage: Dict[str, FormationUsage] = field(default_factory=dict)
    history: List[FormationHistory] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def reset(self) -> None:
        self.settings = None
        self.budget = None
        self.holdings.clear()
        self.usage.clear()
        self.history.clear()
