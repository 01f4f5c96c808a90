"""
모멘텀 (MOM) / 변화율 (ROC, Rate of Change).

[ 계산 방식 ]
    old = period번 전 update의 값
    MOM = value - old
    ROC = (value - old) / old * 100      (old == 0 이면 NaN)

    처음 period번의 update는 비교할 값이 없으므로 NaN.
    순환 버퍼에서 밀려나는 값이 곧 period번 전의 값이다.
"""

from stream_trader.core.indicator import NAN, Indicator, RingBuffer, check_period


class _Lookback(Indicator[float, float]):
    def __init__(self, period: int, history_size: int):
        super().__init__(history_size)
        self.period = check_period("period", period)
        self._prev: RingBuffer[float] = RingBuffer(self.period, NAN)

    def _push(self, value: float) -> float:
        """value를 넣고 period번 전의 값을 반환. 아직 없으면 NaN."""
        full = self._prev.full
        old = self._prev.push(value)
        return old if full else NAN


class MOM(_Lookback):
    """모멘텀."""

    def __init__(self, period: int = 10, history_size: int = 1):
        super().__init__(period, history_size)

    def update(self, value: float) -> float:
        return self._record(value - self._push(value))


class ROC(_Lookback):
    """변화율 (%)."""

    def __init__(self, period: int = 10, history_size: int = 1):
        super().__init__(period, history_size)

    def update(self, value: float) -> float:
        old = self._push(value)
        if old == 0.0:
            return self._record(NAN)
        return self._record((value - old) / old * 100.0)
