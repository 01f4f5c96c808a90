import sys
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가 (stream_trader 패키지와 run_backtest.py를 바로 임포트)
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

import pytest  # noqa: E402

from stream_trader.core.types import OHLCV, Side, Signal, SingleValue  # noqa: E402


def bar(ts: int, open_: float, close: float, volume: float = 1.0) -> OHLCV:
    """시가/종가만 의미 있는 테스트용 봉."""
    return OHLCV(ts, open_, max(open_, close) + 1.0, min(open_, close) - 1.0, close, volume)


def values(*xs: float, start: int = 0, step: int = 60) -> list[SingleValue]:
    return [SingleValue(start + i * step, float(x)) for i, x in enumerate(xs)]


def signal(ts: int, side: Side, price: float) -> Signal:
    return Signal(timestamp=ts, side=side, price=price)


@pytest.fixture
def make_bar():
    return bar


@pytest.fixture
def make_values():
    return values


@pytest.fixture
def make_signal():
    return signal
