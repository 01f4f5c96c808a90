"""
시장 데이터 소스 추상 클래스 정의.

[ 역할 ]
    레코드(OHLCV / Tick / SingleValue)를 시간 순서대로 한 개씩 공급하는 인터페이스.
    데이터 소스(CSV 스트림, DataFrame 등)에 독립적으로 러너에 데이터 공급.

    - 지연(lazy) 평가: 순회할 때 필요한 만큼만 읽는다
    - 단일 패스: 한 번 끝까지 읽으면 다시 읽으려면 새로 만들어야 한다
    - 유한: 원본이 끝나면 순회도 끝난다

[ 구현체 ]
    - data/streamers.py::CsvStreamer       (텍스트 스트림 기반)
    - data/streamers.py::DataFrameStreamer (pandas DataFrame 기반)

[ 호출하는 곳 ]
    - backtest/runner.py::BacktestRunner.run()에서 for 루프로 순회
"""

from abc import ABC, abstractmethod
from typing import Iterator

from stream_trader.core.types import MarketRecord, RecordType


class DataSource(ABC):
    """시장 데이터 소스 추상 클래스.

    모든 데이터 소스 구현체는 이 클래스를 상속받아 __iter__를 구현해야 한다.
    """

    def __init__(self, record_type: RecordType):
        self.record_type = record_type

    @abstractmethod
    def __iter__(self) -> Iterator[MarketRecord]:
        """레코드를 시간 순서대로 하나씩 반환."""
        ...
