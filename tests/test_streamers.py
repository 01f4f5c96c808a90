import io
import logging

import pandas as pd
import pytest

from stream_trader.core.types import OHLCV, RecordType, Side, SingleValue, Tick
from stream_trader.data.streamers import (
    MAX_LINE_LENGTH,
    CsvStreamer,
    DataFrameStreamer,
    parse_line,
)


def test_parse_line_per_record_type():
    assert parse_line("1,1.0,2.0,0.5,1.5,100", RecordType.OHLCV) == OHLCV(1, 1.0, 2.0, 0.5, 1.5, 100.0)
    assert parse_line("7, 3.5", RecordType.SINGLE_VALUE) == SingleValue(7, 3.5)

    tick = parse_line("5,10.0,2.0", RecordType.TICK)
    assert tick == Tick(5, 10.0, 2.0)
    assert tick.side == Side.NONE
    assert parse_line("5,10.0,2.0,1", RecordType.TICK).side == Side.SELL


@pytest.mark.parametrize("line, record_type", [
    ("1,2,3", RecordType.OHLCV),
    ("a,1.0,2.0,0.5,1.5,100", RecordType.OHLCV),
    ("1,x", RecordType.SINGLE_VALUE),
    ("5,10.0,2.0,9", RecordType.TICK),
    ("", RecordType.SINGLE_VALUE),
])
def test_parse_line_rejects_malformed(line, record_type):
    assert parse_line(line, record_type) is None


def test_parse_line_custom_delimiter():
    assert parse_line("7;3.5", RecordType.SINGLE_VALUE, delimiter=";") == SingleValue(7, 3.5)


def test_csv_streamer_skips_header_blank_and_bad_lines(caplog):
    text = "\n".join([
        "timestamp,value",
        "1,10.0",
        "",
        "2,oops",
        "3," + "9" * MAX_LINE_LENGTH,
        "4,11.5",
    ]) + "\n"
    streamer = CsvStreamer(io.StringIO(text), RecordType.SINGLE_VALUE)

    with caplog.at_level(logging.WARNING, logger="stream_trader.data"):
        records = list(streamer)

    assert records == [SingleValue(1, 10.0), SingleValue(4, 11.5)]
    assert streamer.skipped == 2
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_csv_streamer_without_header():
    text = "1,10.0\n2,11.0\n"
    streamer = CsvStreamer(io.StringIO(text), RecordType.SINGLE_VALUE, has_header=False)
    assert [r.timestamp for r in streamer] == [1, 2]


def test_csv_streamer_is_lazy():
    stream = io.StringIO("timestamp,value\n1,10.0\n2,11.0\n")
    it = iter(CsvStreamer(stream, RecordType.SINGLE_VALUE))
    assert next(it) == SingleValue(1, 10.0)
    assert stream.readline() == "2,11.0\n"


def test_dataframe_streamer_builds_records():
    df = pd.DataFrame({
        "timestamp": [1, 2],
        "open": [1.0, 2.0],
        "high": [1.5, 2.5],
        "low": [0.5, 1.5],
        "close": [1.2, 2.2],
        "volume": [10.0, 20.0],
        "extra": ["x", "y"],
    })
    records = list(DataFrameStreamer(df, RecordType.OHLCV))
    assert records == [OHLCV(1, 1.0, 1.5, 0.5, 1.2, 10.0), OHLCV(2, 2.0, 2.5, 1.5, 2.2, 20.0)]
    assert isinstance(records[0].timestamp, int)


def test_dataframe_streamer_tick_side_optional():
    df = pd.DataFrame({"timestamp": [1], "price": [10.0], "volume": [2.0]})
    (tick,) = list(DataFrameStreamer(df, RecordType.TICK))
    assert tick.side == Side.NONE


def test_dataframe_streamer_missing_columns():
    with pytest.raises(ValueError):
        DataFrameStreamer(pd.DataFrame({"timestamp": [1]}), RecordType.SINGLE_VALUE)


@pytest.mark.parametrize("line, record_type", [
    ("1,nan", RecordType.SINGLE_VALUE),
    ("1,inf", RecordType.SINGLE_VALUE),
    ("1,-inf", RecordType.SINGLE_VALUE),
    ("1,1.0,inf,0.5,1.5,100", RecordType.OHLCV),
    ("1,1.0,2.0,0.5,1.5,nan", RecordType.OHLCV),
    ("5,nan,2.0", RecordType.TICK),
])
def test_parse_line_rejects_non_finite_values(line, record_type):
    assert parse_line(line, record_type) is None


def test_csv_streamer_skips_non_finite_cells(caplog):
    text = "1,10.0\n2,nan\n3,inf\n4,11.0\n"
    streamer = CsvStreamer(io.StringIO(text), RecordType.SINGLE_VALUE, has_header=False)

    with caplog.at_level(logging.WARNING, logger="stream_trader.data"):
        records = list(streamer)

    assert records == [SingleValue(1, 10.0), SingleValue(4, 11.0)]
    assert streamer.skipped == 2
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_dataframe_streamer_skips_nan_rows(caplog):
    df = pd.DataFrame({"timestamp": [1, 2, 3], "value": [1.0, float("nan"), 3.0]})
    with caplog.at_level(logging.WARNING, logger="stream_trader.data"):
        records = list(DataFrameStreamer(df, RecordType.SINGLE_VALUE))
    assert records == [SingleValue(1, 1.0), SingleValue(3, 3.0)]
    assert any(r.levelno == logging.WARNING for r in caplog.records)
