"""
Settings Repository
Singleton settings row, created lazily on first write
"""

import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select
from typing import Optional

from satellite.domain.constants import DEFAULT_FORMATION_ID
from satellite.domain.models import UserSettings
from satellite.infrastructure.db.errors import wrap_repository_errors
from satellite.infrastructure.db.models import SettingsModel
from satellite.utils.time import to_utc_naive, utc_now

_FIELDS = ("current_formation_id", "last_check_date", "auto_check_enabled")


def current_settings_query(for_update: bool = False) -> Select:
    """Latest settings row; SQLite ignores FOR UPDATE"""
    query = select(SettingsModel).order_by(SettingsModel.updated_at.desc()).limit(1)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    return query


class SettingsRepository:
    """Repository for the settings singleton"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @wrap_repository_errors
    async def get(self, for_update: bool = False) -> Optional[UserSettings]:
        """
        Get current settings

        Args:
            for_update: Lock the row until the transaction ends (SELECT ... FOR UPDATE)

        Returns:
            Latest settings by updated_at or None
        """
        model = await self._get_model(for_update)
        return self._to_domain(model)

    @wrap_repository_errors
    async def upsert(self, **fields) -> UserSettings:
        """
        Patch settings, creating the row when none exists

        Args:
            current_formation_id: Selected formation
            last_check_date: Last daily check timestamp
            auto_check_enabled: Scheduler toggle

        Returns:
            Stored UserSettings
        """
        unknown = set(fields) - set(_FIELDS)
        if unknown:
            raise TypeError(f"Unknown settings fields: {sorted(unknown)}")

        now = utc_now()
        values = {k: v for k, v in fields.items() if v is not None}
        if "last_check_date" in values:
            values["last_check_date"] = to_utc_naive(values["last_check_date"])

        model = await self._get_model()
        if model is None:
            model = SettingsModel(
                id=f"settings-{uuid.uuid4().hex}",
                current_formation_id=values.get("current_formation_id", DEFAULT_FORMATION_ID),
                last_check_date=values.get("last_check_date", now),
                auto_check_enabled=values.get("auto_check_enabled", True),
                created_at=now,
                updated_at=now,
            )
            self.session.add(model)
        else:
            for key, value in values.items():
                setattr(model, key, value)
            model.updated_at = now

        await self.session.flush()
        return self._to_domain(model)

    async def _get_model(self, for_update: bool = False) -> Optional[SettingsModel]:
        result = await self.session.execute(current_settings_query(for_update))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: Optional[SettingsModel]) -> Optional[UserSettings]:
        """Convert database model to domain entity"""
        if model is None:
            return None

        return UserSettings(
            id=model.id,
            current_formation_id=model.current_formation_id,
            last_check_date=model.last_check_date,
            auto_check_enabled=model.auto_check_enabled,
            created_at=model.created_at,
            updated_at=model.updated_at
        )
