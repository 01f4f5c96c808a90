"""
상대강도지수 (RSI, Relative Strength Index).

[ 계산 방식 ]
    봉마다 diff = close - open 을 구해
        gain = max(diff, 0),  loss = max(-diff, 0)
    각각 SMA(period)로 평균을 내고
        RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    주의: 일반적인 RSI는 "전일 종가 대비" 변화량을 쓰지만, 여기서는
    봉 내부 변화량(close - open)을 쓴다. 기존 동작을 유지하기 위한 것.

[ 경계값 ]
    avg_loss == 0, avg_gain > 0  → 100.0 (상승만 있음)
    avg_loss == 0, avg_gain == 0 → NaN   (변화 없음, 0/0)
"""

import math

from stream_trader.core.indicator import NAN, Indicator, check_period
from stream_trader.core.types import OHLCV
from stream_trader.indicators.sma import SMA


class RSI(Indicator[OHLCV, float]):
    """상대강도지수. 입력은 OHLCV 봉."""

    def __init__(self, period: int = 14, history_size: int = 1):
        super().__init__(history_size)
        self.period = check_period("period", period)
        self._gains = SMA(self.period)
        self._losses = SMA(self.period)

    def update(self, value: OHLCV) -> float:
        diff = value.close - value.open
        avg_gain = self._gains.update(diff if diff >= 0.0 else 0.0)
        avg_loss = self._losses.update(-diff if diff < 0.0 else 0.0)
        if math.isnan(avg_loss) or math.isnan(avg_gain):
            return self._record(NAN)
        if avg_loss == 0.0:
            return self._record(100.0 if avg_gain > 0.0 else NAN)
        return self._record(100.0 - 100.0 / (1.0 + avg_gain / avg_loss))
