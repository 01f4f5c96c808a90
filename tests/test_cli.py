import io
import logging

import pytest

import run_backtest
from stream_trader.core.types import RecordType


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("stream_trader")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "strategy:\n"
        "  name: sma_cross\n"
        "backtest:\n"
        "  initial_cash: 1000\n"
        f"log_dir: {tmp_path / 'logs'}\n",
        encoding="utf-8",
    )
    return path


def _last_fields(text: str) -> dict[str, str]:
    tokens = text.strip().splitlines()[-1].split()
    return {k.rstrip(":"): v for k, v in zip(tokens[::2], tokens[1::2])}


def test_parse_param():
    assert run_backtest.parse_param("period=21") == ("period", 21)
    assert run_backtest.parse_param("threshold=0.01") == ("threshold", 0.01)
    assert run_backtest.parse_param("field=open") == ("field", "open")
    assert run_backtest.parse_param("flag=true") == ("flag", True)


def test_generate_sample_data_shape():
    df = run_backtest.generate_sample_data(num_bars=50)
    assert list(df.columns) == ["timestamp", "open", "high", "low", "close", "volume"]
    assert len(df) == 50
    assert (df["high"] >= df[["open", "close"]].max(axis=1)).all()
    assert (df["low"] <= df[["open", "close"]].min(axis=1)).all()
    assert df["timestamp"].is_monotonic_increasing

    single = run_backtest.sample_frame(df, RecordType.SINGLE_VALUE)
    assert list(single.columns) == ["timestamp", "value"]


def test_list_strategies(capsys):
    assert run_backtest.main(["--list"]) == 0
    out = capsys.readouterr().out
    for name in ("sma_cross", "ema_cross", "rsi", "macd"):
        assert name in out


def test_input_file(config_file, tmp_path, capsys):
    data = tmp_path / "prices.csv"
    data.write_text("timestamp,value\n0,1\n60,2\n120,3\n180,2\n240,1\n300,2\n360,3\n", encoding="utf-8")

    code = run_backtest.main([
        "--config", str(config_file),
        "--input", str(data),
        "--type", "single_value",
        "-p", "short_period=1",
        "-p", "long_period=2",
    ])
    assert code == 0
    fields = _last_fields(capsys.readouterr().out)
    assert fields["num_trades"] == "3"
    assert fields["quantity"] == "500"
    assert fields["init_cash"] == "1000.00"


def test_stdin_without_header(config_file, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("0,1\n60,2\n120,3\n180,2\n"))
    code = run_backtest.main([
        "--config", str(config_file),
        "--input", "-",
        "--type", "single_value",
        "--no-header",
        "-p", "short_period=1",
        "-p", "long_period=2",
        "-v",
    ])
    assert code == 0
    out = capsys.readouterr().out
    report_lines = [l for l in out.splitlines() if l.startswith("init_time:")]
    assert len(report_lines) == 3


def test_missing_input_file_exits_with_error(config_file, tmp_path, capsys):
    code = run_backtest.main(["--config", str(config_file), "--input", str(tmp_path / "missing.csv")])
    assert code == 1
    captured = capsys.readouterr()
    assert "missing.csv" in captured.err
    assert captured.out == ""


def test_rsi_rejects_non_ohlcv_input(config_file, capsys):
    code = run_backtest.main([
        "--config", str(config_file), "--strategy", "rsi", "--type", "single_value", "--sample",
    ])
    assert code == 1
    assert "ohlcv" in capsys.readouterr().err


def test_unknown_strategy(config_file, capsys):
    assert run_backtest.main(["--config", str(config_file), "--strategy", "nope", "--sample"]) == 1


def test_sample_run(config_file, capsys):
    assert run_backtest.main(["--config", str(config_file), "--sample", "--strategy", "rsi"]) == 0
    fields = _last_fields(capsys.readouterr().out)
    assert fields["init_cash"] == "1000.00"
    assert "sharpe" in fields


def test_compare_mode(config_file, capsys):
    code = run_backtest.main(["--config", str(config_file), "--sample", "--compare", "sma_cross", "macd"])
    assert code == 0
    out = capsys.readouterr().out
    assert "전략 비교 결과" in out
    assert "--- sma_cross ---" in out
    assert "--- macd ---" in out
