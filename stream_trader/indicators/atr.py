"""
True Range (TRange) / 평균 진폭 (ATR, Average True Range).

[ 계산 방식 ]
    첫 봉:  TR = high - low
    이후:   TR = max(high - low, |high - 이전 close|, |low - 이전 close|)

    ATR(period) = TR의 SMA(period). period개가 모이기 전까지 NaN.
"""

import math

from stream_trader.core.indicator import NAN, Indicator, check_period
from stream_trader.core.types import OHLCV
from stream_trader.indicators.sma import SMA


class TRange(Indicator[OHLCV, float]):
    """True Range. 입력은 OHLCV 봉."""

    def __init__(self, history_size: int = 1):
        super().__init__(history_size)
        self._prev_close = NAN

    def update(self, value: OHLCV) -> float:
        high_low = value.high - value.low
        prev_close = self._prev_close
        self._prev_close = value.close
        if math.isnan(prev_close):
            return self._record(high_low)
        return self._record(max(
            high_low,
            abs(value.high - prev_close),
            abs(value.low - prev_close),
        ))


class ATR(Indicator[OHLCV, float]):
    """평균 진폭."""

    def __init__(self, period: int = 14, history_size: int = 1):
        super().__init__(history_size)
        self.period = check_period("period", period)
        self._trange = TRange()
        self._sma = SMA(self.period)

    def update(self, value: OHLCV) -> float:
        return self._record(self._sma.update(self._trange.update(value)))
