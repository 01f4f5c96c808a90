"""
MACD (Moving Average Convergence Divergence).

[ 계산 방식 ]
    macd      = EMA(short) - EMA(long)
    signal    = EMA(signal_period) of macd
    histogram = macd - signal

    두 EMA가 모두 워밍업을 마친 뒤 (update 횟수 > max(short, long))부터
    macd 값이 나오고, 그 전까지는 (NaN, NaN, NaN)을 반환.
    signal은 macd 값이 signal_period개 모일 때까지 NaN.
"""

from typing import NamedTuple

from stream_trader.core.indicator import NAN, Indicator
from stream_trader.indicators.ema import EMA


class MACDResult(NamedTuple):
    macd: float
    signal: float
    histogram: float

    @classmethod
    def nan(cls) -> "MACDResult":
        return cls(NAN, NAN, NAN)


class MACD(Indicator[float, MACDResult]):
    """MACD 지표."""

    def __init__(
        self,
        short_period: int = 12,
        long_period: int = 26,
        signal_period: int = 9,
        smoothing: float = 2.0,
        history_size: int = 1,
    ):
        super().__init__(history_size)
        self._short_ema = EMA(short_period, smoothing)
        self._long_ema = EMA(long_period, smoothing)
        self._signal_ema = EMA(signal_period, smoothing)
        self._start = max(self._short_ema.period, self._long_ema.period)
        self._len = 0

    def empty_value(self) -> MACDResult:
        return MACDResult.nan()

    def update(self, value: float) -> MACDResult:
        self._len += 1
        short_value = self._short_ema.update(value)
        long_value = self._long_ema.update(value)
        if self._len <= self._start:
            return self._record(MACDResult.nan())
        diff = short_value - long_value
        signal = self._signal_ema.update(diff)
        return self._record(MACDResult(diff, signal, diff - signal))
