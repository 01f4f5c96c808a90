"""
RSI 과매도/과매수 전략 구현.

[ 역할 ]
    core/trading_strategy.py::TradingStrategy의 구현체.
    "RSI가 oversold 아래로 내려가면 매수, overbought 위로 올라가면 매도"

[ 전략 흐름 ]
    매 봉마다 update() 호출됨 (← backtest/runner.py에서)
        ├── RSI 갱신 (봉 내부 변화량 close - open 기준)
        ├── RSI < oversold   → BUY  (직전 시그널이 BUY가 아닐 때)
        └── RSI > overbought → SELL (직전 시그널이 SELL이 아닐 때)

    시그널 가격은 field 파라미터로 고른 OHLCV 필드 값이다 (기본 close).
    RSI 계산에 쓰는 값과 시그널 가격은 서로 독립.

[ 파라미터 (config.yaml의 strategy 섹션에서 로드) ]
    period:     RSI 기간
    oversold:   과매도 기준
    overbought: 과매수 기준
    field:      시그널 가격 필드 (open/high/low/close/typical/median/weighted)
"""

import math
from typing import Any

from stream_trader.core.trading_strategy import TradingStrategy
from stream_trader.core.types import OHLCV, MarketRecord, OhlcvField, RecordType
from stream_trader.indicators import RSI
from stream_trader.strategies import register


@register("rsi")
class RSIStrategy(TradingStrategy):
    """RSI 전략 구현체."""

    required_data = RecordType.OHLCV

    DEFAULT_PARAMS = {
        "period": 14,
        "oversold": 30.0,
        "overbought": 70.0,
        "field": "close",
    }

    def __init__(self, params: dict[str, Any] | None = None):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(name="rsi", params=merged)
        self.rsi = RSI(self.period)
        self.field = OhlcvField(str(self.params["field"]).lower())

    @property
    def period(self) -> int:
        return int(self.params["period"])

    @property
    def oversold(self) -> float:
        return float(self.params["oversold"])

    @property
    def overbought(self) -> float:
        return float(self.params["overbought"])

    def _update_indicators(self, record: MarketRecord) -> None:
        if not isinstance(record, OHLCV):
            raise TypeError(f"RSI 전략은 OHLCV 레코드가 필요합니다: {type(record).__name__}")
        self.rsi.update(record)

    def signal_price(self, record: MarketRecord) -> float:
        return record.field(self.field)

    def is_ready(self) -> bool:
        return not math.isnan(self.rsi.get())

    def should_buy(self) -> tuple[bool, str]:
        value = self.rsi.get()
        if value < self.oversold:
            return True, f"RSI 과매도 ({value:.2f} < {self.oversold:.2f})"
        return False, ""

    def should_sell(self) -> tuple[bool, str]:
        value = self.rsi.get()
        if value > self.overbought:
            return True, f"RSI 과매수 ({value:.2f} > {self.overbought:.2f})"
        return False, ""
