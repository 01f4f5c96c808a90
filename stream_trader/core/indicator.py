"""
기술 지표 추상 클래스 및 순환 버퍼 정의.

[ 역할 ]
    모든 지표(SMA, EMA, MVar, RSI, MACD ...)가 따르는 공통 인터페이스 정의.
        update(value) → 새 값을 반영하고 최신 지표 값 반환
        get()         → 마지막으로 계산된 값 반환 (부수효과 없음)
        ind[i]        → 최근 출력 이력 조회 (0 = 최신, -1 = 직전 ...)

    워밍업 기간(데이터 부족) 동안에는 NaN을 반환한다.
    NaN은 예외가 아니라 "아직 값 없음"을 나타내는 신호이다.

[ 구현체 ]
    - indicators/sma.py::SMA
    - indicators/ema.py::EMA
    - indicators/mvar.py::MVar, MStdev
    - indicators/rsi.py::RSI
    - indicators/macd.py::MACD

[ 호출하는 곳 ]
    - strategies/*에서 지표를 감싸 시그널 생성
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterator, TypeVar

T = TypeVar("T")
In = TypeVar("In")
Out = TypeVar("Out")

NAN = math.nan


class RingBuffer(Generic[T]):
    """고정 크기 순환 버퍼.

    생성 시 capacity만큼 fill 값으로 채워두고, push()로 가장 오래된 값을 덮어쓴다.
    인덱스는 지표 이력과 같은 규칙: 0이 최신, -k가 k번째 이전 값.
    """

    def __init__(self, capacity: int, fill: T):
        if capacity <= 0:
            raise ValueError(f"capacity는 1 이상이어야 합니다: {capacity}")
        self._data: list[T] = [fill] * capacity
        self._pos = -1     # 마지막으로 쓴 위치
        self._len = 0      # 지금까지 채워진 개수 (capacity 이하)

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def full(self) -> bool:
        return self._len == len(self._data)

    def __len__(self) -> int:
        return self._len

    def push(self, value: T) -> T:
        """값 추가. 밀려난(덮어쓴) 이전 값을 반환."""
        self._pos = (self._pos + 1) % len(self._data)
        evicted = self._data[self._pos]
        self._data[self._pos] = value
        if self._len < len(self._data):
            self._len += 1
        return evicted

    def __getitem__(self, index: int) -> T:
        size = len(self._data)
        if index > 0 or -index >= size:
            raise IndexError(f"index out of range: {index} (history size {size})")
        return self._data[(self._pos + size + index) % size]

    def __iter__(self) -> Iterator[T]:
        """버퍼에 들어있는 값들 (순서 무관, 채워지지 않은 칸 포함)."""
        return iter(self._data)


class Indicator(ABC, Generic[In, Out]):
    """지표 추상 클래스.

    하위 클래스는 update()를 구현하고, 계산 결과를 _record()로 넘긴다.
    history_size는 ind[-k]로 조회 가능한 과거 출력 개수.
    """

    def __init__(self, history_size: int = 1):
        self._history: RingBuffer[Any] = RingBuffer(history_size, self.empty_value())
        self._value: Any = self.empty_value()

    def empty_value(self) -> Any:
        """값이 없을 때의 표현. 기본은 NaN."""
        return NAN

    @abstractmethod
    def update(self, value: In) -> Out:
        """새 데이터 반영 후 최신 지표 값 반환."""
        ...

    def get(self) -> Out:
        """마지막으로 계산된 값."""
        return self._value

    def _record(self, value: Out) -> Out:
        self._value = value
        self._history.push(value)
        return value

    def __getitem__(self, index: int) -> Out:
        """과거 출력 조회. 범위를 벗어나면 IndexError."""
        return self._history[index]

    @property
    def history_size(self) -> int:
        return self._history.capacity


def check_period(name: str, value: int) -> int:
    """기간 파라미터 검증. 1 이상의 정수만 허용."""
    if int(value) != value or value < 1:
        raise ValueError(f"{name}은(는) 1 이상의 정수여야 합니다: {value}")
    return int(value)
