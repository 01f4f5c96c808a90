"""
CSV / DataFrame 레코드 스트리머.

[ 역할 ]
    구분자로 나뉜 텍스트 한 줄을 레코드 하나로 변환하고,
    스트림 전체를 지연(lazy) 순회하는 DataSource 구현체를 제공.

[ 줄 형식 ]
    OHLCV:       timestamp,open,high,low,close,volume
    Tick:        timestamp,price,volume[,side]   (side: 0=BUY, 1=SELL, 2=NONE, 생략 시 NONE)
    SingleValue: timestamp,value

[ 오류 처리 ]
    형식이 맞지 않는 줄(필드 수 불일치, 숫자가 아닌 값, nan/inf)은
    경고 로그만 남기고 건너뛴다.
    한 줄의 오류로 전체 순회가 중단되는 일은 없다.
    빈 줄은 조용히 건너뛴다.

[ 호출하는 곳 ]
    - run_backtest.py에서 --input 파일/표준입력을 CsvStreamer로 감쌈
    - --sample 데이터는 DataFrameStreamer로 감쌈
"""

import logging
import math
from typing import Iterator, TextIO

import pandas as pd

from stream_trader.core.data_source import DataSource
from stream_trader.core.types import (
    OHLCV,
    MarketRecord,
    RecordType,
    Side,
    SingleValue,
    Tick,
)

logger = logging.getLogger("stream_trader.data")

# 한 줄 최대 길이. 이보다 긴 줄은 손상된 데이터로 보고 건너뜀
MAX_LINE_LENGTH = 2048

# 레코드 종류별 CSV 컬럼 (DataFrame 컬럼명도 동일)
COLUMNS: dict[RecordType, tuple[str, ...]] = {
    RecordType.OHLCV: ("timestamp", "open", "high", "low", "close", "volume"),
    RecordType.TICK: ("timestamp", "price", "volume", "side"),
    RecordType.SINGLE_VALUE: ("timestamp", "value"),
}


def parse_line(line: str, record_type: RecordType, delimiter: str = ",") -> MarketRecord | None:
    """한 줄을 레코드로 변환. 형식이 맞지 않으면 None."""
    fields = [f.strip() for f in line.strip().split(delimiter)]
    try:
        return _build_record(fields, record_type)
    except (ValueError, TypeError):
        return None


def _finite(value) -> float:
    """숫자 필드 변환. nan / inf는 손상된 값으로 보고 ValueError."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"유한하지 않은 값: {value!r}")
    return number


def _build_record(fields: list, record_type: RecordType) -> MarketRecord | None:
    if record_type == RecordType.OHLCV:
        if len(fields) != 6:
            return None
        return OHLCV(int(fields[0]), *(_finite(f) for f in fields[1:]))

    if record_type == RecordType.TICK:
        if len(fields) not in (3, 4):
            return None
        side = Side(int(fields[3])) if len(fields) == 4 else Side.NONE
        return Tick(int(fields[0]), _finite(fields[1]), _finite(fields[2]), side)

    if record_type == RecordType.SINGLE_VALUE:
        if len(fields) != 2:
            return None
        return SingleValue(int(fields[0]), _finite(fields[1]))

    return None


class CsvStreamer(DataSource):
    """텍스트 스트림(파일, 표준입력 등)에서 레코드를 한 줄씩 읽는 스트리머.

    사용 예:
        with open("btcusd.csv") as f:
            for record in CsvStreamer(f, RecordType.OHLCV):
                ...
    """

    def __init__(
        self,
        stream: TextIO,
        record_type: RecordType = RecordType.OHLCV,
        has_header: bool = True,
        delimiter: str = ",",
    ):
        super().__init__(record_type)
        self.stream = stream
        self.has_header = has_header
        self.delimiter = delimiter
        self.skipped = 0   # 형식 오류로 건너뛴 줄 수

    def __iter__(self) -> Iterator[MarketRecord]:
        for line_no, line in enumerate(self.stream, start=1):
            if line_no == 1 and self.has_header:
                continue
            if not line.strip():
                continue
            if len(line) > MAX_LINE_LENGTH:
                self.skipped += 1
                logger.warning(f"{line_no}번째 줄이 너무 깁니다 ({len(line)} > {MAX_LINE_LENGTH}), 건너뜀")
                continue

            record = parse_line(line, self.record_type, self.delimiter)
            if record is None:
                self.skipped += 1
                logger.warning(f"{line_no}번째 줄 파싱 실패, 건너뜀: {line.strip()[:80]!r}")
                continue
            yield record


class DataFrameStreamer(DataSource):
    """DataFrame의 각 행을 레코드로 변환하는 스트리머.

    컬럼명은 CSV 필드명과 같아야 한다 (COLUMNS 참고). tick의 side 컬럼은 생략 가능.
    """

    def __init__(self, df: pd.DataFrame, record_type: RecordType = RecordType.OHLCV):
        super().__init__(record_type)
        columns = [c for c in COLUMNS[record_type] if c in df.columns]
        required = [c for c in COLUMNS[record_type] if c != "side"]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(f"DataFrame에 필요한 컬럼이 없습니다: {missing}")
        self.df = df[columns]

    def __iter__(self) -> Iterator[MarketRecord]:
        for i, row in enumerate(self.df.itertuples(index=False)):
            try:
                record = _build_record(list(row), self.record_type)
            except (ValueError, TypeError):
                record = None
            if record is None:
                logger.warning(f"{i}번째 행 변환 실패, 건너뜀: {tuple(row)!r}")
                continue
            yield record
