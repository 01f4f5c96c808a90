import json

import pytest

from stream_trader.core.types import RecordType
from stream_trader.utils.config import Config, DataConfig


def test_defaults():
    config = Config()
    assert config.strategy.name == "rsi"
    assert config.backtest.initial_cash == 100_000.0
    assert config.backtest.stop_loss_pct is None
    assert config.data.type == RecordType.OHLCV
    assert config.verbose is False


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "strategy:\n"
        "  name: macd\n"
        "  params:\n"
        "    short_period: 8\n"
        "backtest:\n"
        "  initial_cash: 5000\n"
        "  tx_cost_pct: 0.001\n"
        "  stop_loss_pct: 0.1\n"
        "  unknown_key: 1\n"
        "data:\n"
        "  record_type: single_value\n"
        "  has_header: false\n"
        "log_level: DEBUG\n"
        "verbose: true\n",
        encoding="utf-8",
    )
    config = Config.from_yaml(path)
    assert config.strategy.name == "macd"
    assert config.strategy.params == {"short_period": 8}
    assert config.backtest.initial_cash == 5000
    assert config.backtest.stop_loss_pct == 0.1
    assert config.data.type == RecordType.SINGLE_VALUE
    assert config.data.has_header is False
    assert config.log_level == "DEBUG"
    assert config.verbose is True


def test_strategy_keys_become_params_without_params_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("strategy:\n  name: sma_cross\n  short_period: 5\n  long_period: 20\n", encoding="utf-8")
    config = Config.from_yaml(path)
    assert config.strategy.name == "sma_cross"
    assert config.strategy.params == {"short_period": 5, "long_period": 20}


def test_empty_yaml_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert Config.from_yaml(path) == Config()


def test_from_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"strategy": {"name": "ema_cross"}, "log_dir": "out"}), encoding="utf-8")
    config = Config.from_json(path)
    assert config.strategy.name == "ema_cross"
    assert config.log_dir == "out"


def test_invalid_record_type():
    with pytest.raises(ValueError):
        DataConfig(record_type="candles")


def test_save_yaml_then_load(tmp_path):
    config = Config()
    config.strategy.params = {"period": 10}
    path = tmp_path / "nested" / "config.yaml"
    config.save_yaml(path)
    assert Config.from_yaml(path) == config
