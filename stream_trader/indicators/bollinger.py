"""
볼린저 밴드 (Bollinger Bands).

[ 계산 방식 ]
    middle = SMA(window)
    upper  = middle + num_std_dev * stdev
    lower  = middle - num_std_dev * stdev

    stdev는 같은 윈도우의 모표준편차 (MStdev, dof = 0).
    window개가 모이기 전이나 윈도우에 NaN이 있으면 (NaN, NaN, NaN).
"""

import math
from typing import NamedTuple

from stream_trader.core.indicator import NAN, Indicator, check_period
from stream_trader.indicators.mvar import MStdev
from stream_trader.indicators.sma import SMA


class BollingerResult(NamedTuple):
    upper: float
    middle: float
    lower: float

    @classmethod
    def nan(cls) -> "BollingerResult":
        return cls(NAN, NAN, NAN)


class BollingerBands(Indicator[float, BollingerResult]):
    """볼린저 밴드."""

    def __init__(self, window: int = 20, num_std_dev: float = 2.0, history_size: int = 1):
        super().__init__(history_size)
        self.window = check_period("window", window)
        if not num_std_dev >= 0:
            raise ValueError(f"num_std_dev는 0 이상이어야 합니다: {num_std_dev}")
        self.num_std_dev = float(num_std_dev)
        self._sma = SMA(self.window)
        self._stdev = MStdev(self.window, dof=0)

    def empty_value(self) -> BollingerResult:
        return BollingerResult.nan()

    def update(self, value: float) -> BollingerResult:
        middle = self._sma.update(value)
        stdev = self._stdev.update(value)
        if math.isnan(middle) or math.isnan(stdev):
            return self._record(BollingerResult.nan())
        band = self.num_std_dev * stdev
        return self._record(BollingerResult(middle + band, middle, middle - band))
