"""
Database Models (SQLAlchemy ORM)
Settings and budget are singletons, formation history is insert-only
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, Boolean, Text, Index
)

from satellite.infrastructure.db.database import Base
from satellite.utils.time import utc_now


class SettingsModel(Base):
    """Application settings (latest row by updated_at is current)"""
    __tablename__ = "settings"

    id = Column(String(64), primary_key=True)
    current_formation_id = Column(String(64), nullable=False)
    last_check_date = Column(DateTime, nullable=False, default=utc_now)
    auto_check_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, index=True)


class BudgetModel(Base):
    """Budget (latest row by updated_at is current)"""
    __tablename__ = "budget"

    id = Column(String(64), primary_key=True)
    funds = Column(Numeric(14, 2), nullable=False)
    start = Column(Numeric(14, 2), nullable=False)
    profit = Column(Numeric(14, 2), nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=utc_now, index=True)


class HoldingModel(Base):
    """Stock position assigned to a formation tier"""
    __tablename__ = "holdings"

    id = Column(String(64), primary_key=True)
    ticker = Column(String(10), nullable=False)
    tier = Column(Integer, nullable=False)
    entry_price = Column(Numeric(12, 4), nullable=False)
    hold_shares = Column(Integer, nullable=False, default=0)
    goal_shares = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index('ix_holdings_ticker', 'ticker'),
        Index('ix_holdings_tier_ticker', 'tier', 'ticker'),
    )


class FormationUsageModel(Base):
    """Running usage counters, one row per formation"""
    __tablename__ = "formation_usage"

    id = Column(String(96), primary_key=True)
    formation_id = Column(String(64), nullable=False, unique=True, index=True)
    usage_count = Column(Integer, nullable=False, default=0)
    total_days = Column(Integer, nullable=False, default=0)
    usage_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    last_used_date = Column(DateTime, nullable=False, default=utc_now)
    created_at = Column(DateTime, nullable=False, default=utc_now)


class FormationHistoryModel(Base):
    """Formation transitions - AUDIT RECORD"""
    __tablename__ = "formation_history"

    id = Column(String(64), primary_key=True)
    from_formation_id = Column(String(64), nullable=True)
    to_formation_id = Column(String(64), nullable=False)
    changed_at = Column(DateTime, nullable=False, default=utc_now)
    reason = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_formation_history_changed_at', 'changed_at'),
        Index('ix_formation_history_to_formation', 'to_formation_id'),
    )
