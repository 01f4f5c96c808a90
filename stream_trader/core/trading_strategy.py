"""
매매 전략 추상 클래스 정의.

[ 역할 ]
    매매 로직의 인터페이스를 정의.
    레코드가 한 개 들어올 때마다 update()가 호출되어 매수/매도/NONE 시그널을 생성.

[ 구현체 ]
    - strategies/crossover_strategy.py::SMACrossoverStrategy, EMACrossoverStrategy
    - strategies/rsi_strategy.py::RSIStrategy
    - strategies/macd_strategy.py::MACDStrategy

[ 호출하는 곳 ]
    - backtest/runner.py::BacktestRunner.run()에서
      레코드마다 update()를 호출하여 시그널을 받고 포트폴리오에 전달

[ 데이터 흐름 ]
    record → _update_indicators() → should_buy()/should_sell() → Signal 반환

[ 중복 시그널 억제 ]
    last_side에 마지막으로 "발생시킨" 방향을 기억한다.
    직전 시그널이 BUY였다면 BUY 조건이 다시 만족돼도 시그널을 내지 않는다.
    NONE은 last_side를 바꾸지 않는다.
"""

from abc import ABC, abstractmethod
from typing import Any

from stream_trader.core.types import MarketRecord, RecordType, Side, Signal


class TradingStrategy(ABC):
    """매매 전략 추상 클래스.

    새 전략을 만들려면 이 클래스를 상속받아 아래 메서드를 구현하면 된다:
    - _update_indicators(): 레코드로 내부 지표 갱신
    - is_ready(): 워밍업 완료 여부 (지표가 NaN이 아닌지)
    - should_buy() / should_sell(): 매수/매도 조건 판단
    필요하면 signal_price()를 오버라이드하여 시그널 가격을 바꾼다.
    """

    # 전략이 기대하는 입력 레코드 종류
    required_data: RecordType = RecordType.SINGLE_VALUE

    def __init__(self, name: str, params: dict[str, Any] | None = None):
        self.name = name
        self.params = params or {}  # config.yaml에서 로드된 전략 파라미터
        self.last_side = Side.NONE

    def update(self, record: MarketRecord) -> Signal:
        """레코드 반영 후 시그널 생성.

        Args:
            record: 시장 데이터 레코드 한 개

        Returns:
            Signal: 매수/매도/NONE 시그널 (레코드당 정확히 하나)
        """
        self._update_indicators(record)
        price = self.signal_price(record)
        volume = float(getattr(record, "volume", 0.0))

        if not self.is_ready():
            return Signal(timestamp=record.timestamp, price=price, volume=volume)

        side = Side.NONE
        reason = ""
        buy, buy_reason = self.should_buy()
        if buy and self.last_side != Side.BUY:
            side, reason = Side.BUY, buy_reason
        else:
            sell, sell_reason = self.should_sell()
            if sell and self.last_side != Side.SELL:
                side, reason = Side.SELL, sell_reason

        if side != Side.NONE:
            self.last_side = side
        return Signal(
            timestamp=record.timestamp,
            side=side,
            price=price,
            volume=volume,
            reason=reason,
        )

    def signal_price(self, record: MarketRecord) -> float:
        """시그널에 실을 가격. 기본은 레코드의 대표 가격."""
        return float(record.value)

    @abstractmethod
    def _update_indicators(self, record: MarketRecord) -> None:
        """레코드로 내부 지표 갱신."""
        ...

    @abstractmethod
    def is_ready(self) -> bool:
        """지표 워밍업 완료 여부."""
        ...

    @abstractmethod
    def should_buy(self) -> tuple[bool, str]:
        """매수 조건 판단.

        Returns:
            (매수 여부, 사유)
        """
        ...

    @abstractmethod
    def should_sell(self) -> tuple[bool, str]:
        """매도 조건 판단.

        Returns:
            (매도 여부, 사유)
        """
        ...
