"""
시장 데이터 레코드 및 시그널 타입 정의.

[ 역할 ]
    파이프라인 전체에서 주고받는 불변(immutable) 데이터 타입을 정의.
    데이터 소스 → 전략 → 포트폴리오로 흐르는 모든 값이 여기 정의된 타입이다.

[ 레코드 종류 ]
    OHLCV       - 봉(캔들) 데이터 (timestamp, open, high, low, close, volume)
    Tick        - 체결 데이터 (timestamp, price, volume, side)
    SingleValue - 단일 값 시계열 (timestamp, value)

    모든 레코드는 value 속성으로 "대표 가격"을 제공한다.
    (OHLCV → close, Tick → price, SingleValue → value)

[ 호출하는 곳 ]
    - data/streamers.py에서 CSV 한 줄을 레코드로 변환
    - strategies/*에서 update(record) 입력으로 사용
    - data/portfolio.py에서 Signal을 받아 매매 실행
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Side(Enum):
    """매매 방향. 정수 값은 tick CSV의 side 컬럼 코드와 동일."""
    BUY = 0
    SELL = 1
    NONE = 2


class RecordType(Enum):
    """레코드 종류. config.yaml의 data.record_type 값과 대응."""
    OHLCV = "ohlcv"
    TICK = "tick"
    SINGLE_VALUE = "single_value"


class OhlcvField(Enum):
    """OHLCV 봉에서 꺼낼 가격 필드. RSI 전략의 시그널 가격 선택에 사용."""
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"
    TYPICAL = "typical"     # (high + low + close) / 3
    MEDIAN = "median"       # (high + low) / 2
    WEIGHTED = "weighted"   # (high + low + 2 * close) / 4


@dataclass(frozen=True)
class OHLCV:
    """단일 봉(캔들) 데이터."""
    timestamp: int   # Unix 초
    open: float      # 시가
    high: float      # 고가
    low: float       # 저가
    close: float     # 종가
    volume: float    # 거래량

    @property
    def value(self) -> float:
        return self.close

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0

    @property
    def median_price(self) -> float:
        return (self.high + self.low) / 2.0

    @property
    def weighted_close(self) -> float:
        return (self.high + self.low + 2.0 * self.close) / 4.0

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    def field(self, field: OhlcvField) -> float:
        """OhlcvField에 해당하는 값 반환."""
        if field == OhlcvField.TYPICAL:
            return self.typical_price
        if field == OhlcvField.MEDIAN:
            return self.median_price
        if field == OhlcvField.WEIGHTED:
            return self.weighted_close
        return float(getattr(self, field.value))


@dataclass(frozen=True)
class Tick:
    """단일 체결 데이터."""
    timestamp: int
    price: float
    volume: float
    side: Side = Side.NONE   # 체결 방향 (매수/매도 주도)

    @property
    def value(self) -> float:
        return self.price


@dataclass(frozen=True)
class SingleValue:
    """단일 값 시계열의 한 점 (종가만 있는 데이터, 지표 값 등)."""
    timestamp: int
    value: float


MarketRecord = Union[OHLCV, Tick, SingleValue]

RECORD_CLASSES: dict[RecordType, type] = {
    RecordType.OHLCV: OHLCV,
    RecordType.TICK: Tick,
    RecordType.SINGLE_VALUE: SingleValue,
}


@dataclass(frozen=True)
class Signal:
    """전략의 update()가 레코드마다 하나씩 반환하는 시그널.

    NONE은 "아무것도 하지 않음"을 뜻한다. BUY/SELL은 방향이 바뀔 때만 발생.
    """
    timestamp: int
    side: Side = Side.NONE
    price: float = 0.0       # 시그널 발생 시점 가격
    volume: float = 0.0
    reason: str = ""         # 시그널 발생 사유 (로깅용)
