"""
기술 지표 모듈.

모든 지표는 core/indicator.py::Indicator를 상속하며
update(value) / get() / ind[-k] 인터페이스를 공유한다.
ATR, TRange, OBV, RSI는 OHLCV 봉을, 나머지는 float 값을 입력으로 받는다.
"""

from stream_trader.indicators.atr import ATR, TRange
from stream_trader.indicators.bollinger import BollingerBands, BollingerResult
from stream_trader.indicators.dema import DEMA, TEMA
from stream_trader.indicators.ema import EMA
from stream_trader.indicators.macd import MACD, MACDResult
from stream_trader.indicators.momentum import MOM, ROC
from stream_trader.indicators.mvar import MStdev, MVar
from stream_trader.indicators.obv import OBV
from stream_trader.indicators.rsi import RSI
from stream_trader.indicators.sma import SMA

__all__ = [
    "ATR", "BollingerBands", "BollingerResult", "DEMA", "EMA", "MACD", "MACDResult",
    "MOM", "MStdev", "MVar", "OBV", "ROC", "RSI", "SMA", "TEMA", "TRange",
]
