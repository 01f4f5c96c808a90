"""
단순 이동평균 (SMA, Simple Moving Average).

[ 계산 방식 ]
    최근 N개 입력을 순환 버퍼에 보관하고 누적합(sum)을 유지.
        sum += 새 값
        sum -= 버퍼에서 밀려난 값
        SMA  = sum / N
    매번 전체를 다시 더하지 않으므로 update()는 O(1).

    처음 N-1번의 update()는 NaN 반환 (워밍업).

[ NaN 입력 ]
    NaN은 누적합에 넣지 않고 개수만 센다. 윈도우 안에 NaN이 남아 있는 동안은
    NaN을 반환하고, 밀려나면 다시 정상 값으로 돌아온다.
"""

import math

from stream_trader.core.indicator import NAN, Indicator, RingBuffer, check_period


class SMA(Indicator[float, float]):
    """단순 이동평균."""

    def __init__(self, window: int = 9, history_size: int = 1):
        super().__init__(history_size)
        self.window = check_period("window", window)
        self._prev: RingBuffer[float] = RingBuffer(self.window, 0.0)
        self._sum = 0.0
        self._nan_count = 0   # 윈도우 안의 NaN 개수

    def update(self, value: float) -> float:
        full = self._prev.full
        evicted = self._prev.push(value)
        if full:
            if math.isnan(evicted):
                self._nan_count -= 1
            else:
                self._sum -= evicted
        if math.isnan(value):
            self._nan_count += 1
        else:
            self._sum += value

        if not self._prev.full or self._nan_count:
            return self._record(NAN)
        return self._record(self._sum / self.window)
