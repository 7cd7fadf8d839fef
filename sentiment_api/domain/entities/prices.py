"""Price-related domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PriceBar:
    """One trading day of OHLCV data for a ticker."""

    ticker: str
    date: str  # YYYY-MM-DD
    open: float
    high: float
    low: float
    close: float
    volume: float
    expires_at: int | None = None

    def to_item(self) -> dict[str, Any]:
        """Convert to a store item."""
        item: dict[str, Any] = {
            "ticker": self.ticker.upper(),
            "date": self.date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }
        if self.expires_at is not None:
            item["expires_at"] = self.expires_at
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> PriceBar:
        """Create from a store item."""
        expires_at = item.get("expires_at")
        return cls(
            ticker=item["ticker"],
            date=item["date"],
            open=float(item["open"]),
            high=float(item["high"]),
            low=float(item["low"]),
            close=float(item["close"]),
            volume=float(item["volume"]),
            expires_at=None if expires_at is None else int(expires_at),
        )
