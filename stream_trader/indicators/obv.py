"""
누적 거래량 (OBV, On-Balance Volume).

첫 봉은 거래량 그대로, 이후 종가가 오르면 거래량을 더하고
내리면 뺀다 (같으면 그대로). 워밍업이 없으므로 NaN을 반환하지 않는다.
"""

import math

from stream_trader.core.indicator import NAN, Indicator
from stream_trader.core.types import OHLCV


class OBV(Indicator[OHLCV, float]):
    """누적 거래량. 입력은 OHLCV 봉."""

    def __init__(self, history_size: int = 1):
        super().__init__(history_size)
        self._prev_close = NAN
        self._obv = 0.0

    def update(self, value: OHLCV) -> float:
        if math.isnan(self._prev_close):
            self._obv = value.volume
        elif value.close > self._prev_close:
            self._obv += value.volume
        elif value.close < self._prev_close:
            self._obv -= value.volume
        self._prev_close = value.close
        return self._record(self._obv)
