"""
이동 분산 (MVar) / 이동 표준편차 (MStdev).

[ 계산 방식 ]
    최근 N개 값의 분산:
        Variance = sum((x_i - mean)^2) / (N - dof)
    dof = 1 이면 표본분산, 0 이면 모분산.

    평균(mean)은 내부 SMA(N)로 구하고, 원본 값은 별도 순환 버퍼에 보관.
    평균이 매 스텝 바뀌므로 편차 제곱합은 매번 다시 계산한다 (O(N)).

    N개가 모이기 전, 또는 버퍼에 NaN이 섞여 있으면 NaN 반환.
"""

import math

from stream_trader.core.indicator import NAN, Indicator, RingBuffer, check_period
from stream_trader.indicators.sma import SMA


class MVar(Indicator[float, float]):
    """이동 분산."""

    def __init__(self, window: int = 9, dof: int = 1, history_size: int = 1):
        super().__init__(history_size)
        self.window = check_period("window", window)
        if dof < 0 or dof >= self.window:
            raise ValueError(f"dof는 0 이상 window({self.window}) 미만이어야 합니다: {dof}")
        self.dof = int(dof)
        self._sma = SMA(self.window)
        self._prev: RingBuffer[float] = RingBuffer(self.window, NAN)

    def update(self, value: float) -> float:
        self._prev.push(value)
        mean = self._sma.update(value)
        if not self._prev.full:
            return self._record(NAN)

        accum = 0.0
        for prev_value in self._prev:
            if math.isnan(prev_value):
                return self._record(NAN)
            diff = prev_value - mean
            accum += diff * diff
        return self._record(accum / (self.window - self.dof))


class MStdev(Indicator[float, float]):
    """이동 표준편차. MVar의 제곱근."""

    def __init__(self, window: int = 9, dof: int = 1, history_size: int = 1):
        super().__init__(history_size)
        self._var = MVar(window, dof)

    @property
    def window(self) -> int:
        return self._var.window

    def update(self, value: float) -> float:
        variance = self._var.update(value)
        if math.isnan(variance):
            return self._record(NAN)
        return self._record(math.sqrt(variance))
