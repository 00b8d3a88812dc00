"""
Static catalog: formations, allowed tickers and record defaults.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from satellite.domain.models import Formation, TickerInfo


FORMATIONS: List[Formation] = [
    Formation(
        id="formation-3-50-30-20",
        name="3 stocks 50-30-20%",
        tier_count=3,
        percentages=(Decimal("50"), Decimal("30"), Decimal("20")),
        description="One core position at 50%, two supporting positions at 30% and 20%",
    ),
    Formation(
        id="formation-4-40-30-20-10",
        name="4 stocks 40-30-20-10%",
        tier_count=4,
        percentages=(Decimal("40"), Decimal("30"), Decimal("20"), Decimal("10")),
        description="Balanced: stepped 40%, 30%, 20% and 10% split",
    ),
    Formation(
        id="formation-5-30-25-20-15-10",
        name="5 stocks 30-25-20-15-10%",
        tier_count=5,
        percentages=(Decimal("30"), Decimal("25"), Decimal("20"), Decimal("15"), Decimal("10")),
        description="Diversified: five steps from 30% down to 10%",
    ),
]

FORMATIONS_BY_ID: Dict[str, Formation] = {f.id: f for f in FORMATIONS}

DEFAULT_FORMATION_ID = "formation-3-50-30-20"

TICKERS: List[TickerInfo] = [
    TickerInfo("AMZN", "Amazon.com Inc", "Consumer Discretionary"),
    TickerInfo("AVGO", "Broadcom Inc", "Technology"),
    TickerInfo("COIN", "Coinbase Global Inc", "Financial Services"),
    TickerInfo("CRM", "Salesforce Inc", "Technology"),
    TickerInfo("CRWD", "CrowdStrike Holdings Inc", "Technology"),
    TickerInfo("GOOGL", "Alphabet Inc Class A", "Communication"),
    TickerInfo("META", "Meta Platforms Inc", "Communication"),
    TickerInfo("MSFT", "Microsoft Corporation", "Technology"),
    TickerInfo("NFLX", "Netflix Inc", "Communication"),
    TickerInfo("NVDA", "NVIDIA Corporation", "Technology"),
    TickerInfo("ORCL", "Oracle Corporation", "Technology"),
    TickerInfo("PLTR", "Palantir Technologies Inc", "Technology"),
    TickerInfo("PYPL", "PayPal Holdings Inc", "Financial Services"),
    TickerInfo("SHOP", "Shopify Inc", "Technology"),
    TickerInfo("SNOW", "Snowflake Inc", "Technology"),
    TickerInfo("SQ", "Block Inc", "Financial Services"),
    TickerInfo("TSLA", "Tesla Inc", "Consumer Discretionary"),
    TickerInfo("UBER", "Uber Technologies Inc", "Technology"),
    TickerInfo("V", "Visa Inc", "Financial Services"),
    TickerInfo("WDAY", "Workday Inc", "Technology"),
    TickerInfo("ZM", "Zoom Video Communications Inc", "Communication"),
]

ALLOWED_TICKERS = frozenset(t.ticker for t in TICKERS)

# Budget defaults for fields missing on first upsert
DEFAULT_FUNDS = Decimal("6000")
DEFAULT_START = Decimal("6000")
DEFAULT_PROFIT = Decimal("0")

# Largest values the storage columns hold (Numeric(14,2), Numeric(12,4), Integer)
MAX_AMOUNT = Decimal("999999999999.99")
MAX_PRICE = Decimal("99999999.9999")
MAX_SHARES = 2_147_483_647

DAILY_CHECK_REASON = "Daily check detected change"
INITIAL_HISTORY_REASON = "Initial formation recorded"


def get_formation(formation_id: str) -> Optional[Formation]:
    return FORMATIONS_BY_ID.get(formation_id)


def is_valid_ticker(ticker: str) -> bool:
    return ticker.upper() in ALLOWED_TICKERS


def get_ticker_info(ticker: str) -> Optional[TickerInfo]:
    ticker = ticker.upper()
    return next((t for t in TICKERS if t.ticker == ticker), None)


def get_tickers_by_sector(sector: str) -> List[TickerInfo]:
    return [t for t in TICKERS if t.sector == sector]
