"""
지수 이동평균 (EMA, Exponential Moving Average).

[ 계산 방식 ]
    alpha = smoothing / (period + 1)      (smoothing 기본값 2.0)

    1 ~ period-1 번째: 단순 합만 누적, NaN 반환
    period 번째:       누적합 / period  (= 첫 period개의 SMA가 시드값)
    이후:              ema = value * alpha + ema_prev * (1 - alpha)
"""

from stream_trader.core.indicator import NAN, Indicator, check_period


class EMA(Indicator[float, float]):
    """지수 이동평균."""

    def __init__(self, period: int = 9, smoothing: float = 2.0, history_size: int = 1):
        super().__init__(history_size)
        self.period = check_period("period", period)
        self.smoothing = float(smoothing)
        self.alpha = self.smoothing / (self.period + 1.0)
        self._prev = 0.0
        self._len = 0

    @property
    def count(self) -> int:
        """지금까지 반영된 값의 개수."""
        return self._len

    def update(self, value: float) -> float:
        self._len += 1
        if self._len < self.period:
            self._prev += value
            return self._record(NAN)
        if self._len == self.period:
            self._prev = (self._prev + value) / self.period
        else:
            self._prev = value * self.alpha + self._prev * (1.0 - self.alpha)
        return self._record(self._prev)
