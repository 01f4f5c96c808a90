"""
MACD 교차 전략 구현.

[ 역할 ]
    core/trading_strategy.py::TradingStrategy의 구현체.
    "MACD 선이 시그널 선 위로 올라가면 매수, 아래로 내려가면 매도"

[ 전략 흐름 ]
    매 레코드마다 update() 호출됨 (← backtest/runner.py에서)
        ├── MACD 갱신 (macd, signal, histogram)
        ├── macd 또는 signal이 NaN → NONE (워밍업)
        ├── macd > signal * (1 + threshold) → BUY
        └── macd < signal * (1 - threshold) → SELL

[ 파라미터 (config.yaml의 strategy 섹션에서 로드) ]
    short_period:  단기 EMA 기간
    long_period:   장기 EMA 기간
    signal_period: 시그널 EMA 기간
    smoothing:     EMA 평활 계수
    threshold:     완충 비율
"""

import math
from typing import Any

from stream_trader.core.trading_strategy import TradingStrategy
from stream_trader.core.types import MarketRecord
from stream_trader.indicators import MACD
from stream_trader.strategies import register


@register("macd")
class MACDStrategy(TradingStrategy):
    """MACD 전략 구현체."""

    DEFAULT_PARAMS = {
        "short_period": 12,
        "long_period": 26,
        "signal_period": 9,
        "smoothing": 2.0,
        "threshold": 0.0,
    }

    def __init__(self, params: dict[str, Any] | None = None):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(name="macd", params=merged)
        self.macd = MACD(
            int(self.params["short_period"]),
            int(self.params["long_period"]),
            int(self.params["signal_period"]),
            float(self.params["smoothing"]),
        )

    @property
    def threshold(self) -> float:
        return float(self.params["threshold"])

    def _update_indicators(self, record: MarketRecord) -> None:
        self.macd.update(record.value)

    def is_ready(self) -> bool:
        result = self.macd.get()
        return not (math.isnan(result.macd) or math.isnan(result.signal))

    def should_buy(self) -> tuple[bool, str]:
        result = self.macd.get()
        if result.macd > result.signal * (1.0 + self.threshold):
            return True, f"MACD 상향 교차 (macd: {result.macd:.4f}, signal: {result.signal:.4f})"
        return False, ""

    def should_sell(self) -> tuple[bool, str]:
        result = self.macd.get()
        if result.macd < result.signal * (1.0 - self.threshold):
            return True, f"MACD 하향 교차 (macd: {result.macd:.4f}, signal: {result.signal:.4f})"
        return False, ""
