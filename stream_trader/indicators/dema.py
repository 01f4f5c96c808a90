"""
이중/삼중 지수 이동평균 (DEMA / TEMA).

[ 계산 방식 ]
    e1 = EMA(value), e2 = EMA(e1), e3 = EMA(e2)   (모두 같은 period)
    DEMA = 2 * e1 - e2
    TEMA = 3 * e1 - 3 * e2 + e3

    다음 단계 EMA에는 앞 단계가 워밍업을 마친 값만 넣는다.
    그래서 DEMA는 2 * period - 1번째, TEMA는 3 * period - 2번째 update부터 값이 나온다.
"""

import math

from stream_trader.core.indicator import NAN, Indicator
from stream_trader.indicators.ema import EMA


class DEMA(Indicator[float, float]):
    """이중 지수 이동평균."""

    def __init__(self, period: int = 9, smoothing: float = 2.0, history_size: int = 1):
        super().__init__(history_size)
        self._ema1 = EMA(period, smoothing)
        self._ema2 = EMA(period, smoothing)
        self.period = self._ema1.period

    def update(self, value: float) -> float:
        e1 = self._ema1.update(value)
        if math.isnan(e1):
            return self._record(NAN)
        e2 = self._ema2.update(e1)
        if math.isnan(e2):
            return self._record(NAN)
        return self._record(2.0 * e1 - e2)


class TEMA(Indicator[float, float]):
    """삼중 지수 이동평균."""

    def __init__(self, period: int = 9, smoothing: float = 2.0, history_size: int = 1):
        super().__init__(history_size)
        self._ema1 = EMA(period, smoothing)
        self._ema2 = EMA(period, smoothing)
        self._ema3 = EMA(period, smoothing)
        self.period = self._ema1.period

    def update(self, value: float) -> float:
        e1 = self._ema1.update(value)
        if math.isnan(e1):
            return self._record(NAN)
        e2 = self._ema2.update(e1)
        if math.isnan(e2):
            return self._record(NAN)
        e3 = self._ema3.update(e2)
        if math.isnan(e3):
            return self._record(NAN)
        return self._record(3.0 * e1 - 3.0 * e2 + e3)
