"""
이동평균 교차(Crossover) 전략 구현.

[ 역할 ]
    core/trading_strategy.py::TradingStrategy의 구현체.
    "단기 평균이 장기 평균 위로 올라가면 매수, 아래로 내려가면 매도"

[ 전략 흐름 ]
    매 레코드마다 update() 호출됨 (← backtest/runner.py에서)
        ├── 단기/장기 평균 갱신 (SMA 또는 EMA)
        ├── short > long * (1 + threshold) → BUY  (직전 시그널이 BUY가 아닐 때)
        └── short < long * (1 - threshold) → SELL (직전 시그널이 SELL이 아닐 때)

    threshold는 두 평균이 거의 같을 때 시그널이 왔다갔다 하는 것을 막는 완충 구간.

[ 파라미터 (config.yaml의 strategy 섹션에서 로드) ]
    short_period: 단기 평균 기간
    long_period:  장기 평균 기간
    threshold:    완충 비율 (0.01 = 1%)
    smoothing:    EMA 평활 계수 (ema_cross만 사용)
"""

import math
from abc import abstractmethod
from typing import Any

from stream_trader.core.indicator import Indicator
from stream_trader.core.trading_strategy import TradingStrategy
from stream_trader.core.types import MarketRecord
from stream_trader.indicators import EMA, SMA
from stream_trader.strategies import register


class CrossoverStrategy(TradingStrategy):
    """두 이동평균의 교차로 시그널을 내는 전략의 공통 부분."""

    DEFAULT_PARAMS = {
        "short_period": 7,
        "long_period": 21,
        "threshold": 0.0,
    }

    def __init__(self, name: str, params: dict[str, Any] | None = None):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(name=name, params=merged)
        self.short_avg = self._make_average(self.short_period)
        self.long_avg = self._make_average(self.long_period)

    @property
    def short_period(self) -> int:
        return int(self.params["short_period"])

    @property
    def long_period(self) -> int:
        return int(self.params["long_period"])

    @property
    def threshold(self) -> float:
        return float(self.params["threshold"])

    @abstractmethod
    def _make_average(self, period: int) -> Indicator[float, float]:
        """기간 period의 이동평균 지표 생성."""
        ...

    def _update_indicators(self, record: MarketRecord) -> None:
        self.short_avg.update(record.value)
        self.long_avg.update(record.value)

    def is_ready(self) -> bool:
        return not (math.isnan(self.short_avg.get()) or math.isnan(self.long_avg.get()))

    def should_buy(self) -> tuple[bool, str]:
        short, long = self.short_avg.get(), self.long_avg.get()
        if short > long * (1.0 + self.threshold):
            return True, f"단기 평균 상향 돌파 (short: {short:,.4f}, long: {long:,.4f})"
        return False, ""

    def should_sell(self) -> tuple[bool, str]:
        short, long = self.short_avg.get(), self.long_avg.get()
        if short < long * (1.0 - self.threshold):
            return True, f"단기 평균 하향 돌파 (short: {short:,.4f}, long: {long:,.4f})"
        return False, ""


@register("sma_cross")
class SMACrossoverStrategy(CrossoverStrategy):
    """단기/장기 SMA 교차 전략."""

    def __init__(self, params: dict[str, Any] | None = None):
        super().__init__(name="sma_cross", params=params)

    def _make_average(self, period: int) -> Indicator[float, float]:
        return SMA(period)


@register("ema_cross")
class EMACrossoverStrategy(CrossoverStrategy):
    """단기/장기 EMA 교차 전략."""

    DEFAULT_PARAMS = {
        **CrossoverStrategy.DEFAULT_PARAMS,
        "smoothing": 2.0,
    }

    def __init__(self, params: dict[str, Any] | None = None):
        super().__init__(name="ema_cross", params=params)

    def _make_average(self, period: int) -> Indicator[float, float]:
        return EMA(period, float(self.params["smoothing"]))
