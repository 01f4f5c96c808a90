"""
전략 모듈.

[ 전략 등록 방식 ]
    @register("전략이름") 데코레이터를 붙이면 STRATEGY_REGISTRY에 자동 등록.
    run_backtest.py에서 이름만으로 전략 클래스를 찾아 생성할 수 있다.
    같은 이름을 다른 클래스가 다시 등록하려 하면 ValueError.

[ 등록된 전략 ]
    sma_cross - 단기/장기 SMA 교차
    ema_cross - 단기/장기 EMA 교차
    rsi       - RSI 과매도/과매수       (ohlcv 데이터 필요)
    macd      - MACD 선 / 시그널 선 교차

[ 새 전략 추가 방법 ]
    1. 이 디렉토리에 새 .py 파일 생성
    2. TradingStrategy를 상속받는 클래스 작성 (DEFAULT_PARAMS, required_data 지정)
    3. @register("이름") 데코레이터 추가
    4. config.yaml에서 strategy.name을 해당 이름으로 설정
    → 끝. run_backtest.py 수정 불필요.
"""

import pkgutil
from importlib import import_module
from typing import Any

from stream_trader.core.trading_strategy import TradingStrategy

# 전략 이름 → 전략 클래스 매핑
STRATEGY_REGISTRY: dict[str, type[TradingStrategy]] = {}


def register(name: str):
    """전략 클래스를 STRATEGY_REGISTRY에 등록하는 데코레이터.

    Raises:
        ValueError: 이미 다른 전략 클래스가 같은 이름으로 등록됨
    """
    def decorator(cls: type[TradingStrategy]):
        existing = STRATEGY_REGISTRY.get(name)
        if existing is not None and _qualified_name(existing) != _qualified_name(cls):
            raise ValueError(
                f"전략 이름 중복: '{name}' ({_qualified_name(existing)}, {_qualified_name(cls)})"
            )
        STRATEGY_REGISTRY[name] = cls
        return cls
    return decorator


def get_strategy_class(name: str) -> type[TradingStrategy]:
    """이름으로 전략 클래스 조회. 없으면 사용 가능한 이름과 함께 ValueError."""
    try:
        return STRATEGY_REGISTRY[name]
    except KeyError:
        available = ", ".join(list_strategies())
        raise ValueError(f"알 수 없는 전략: '{name}'. 사용 가능: {available}") from None


def create_strategy(name: str, params: dict[str, Any] | None = None) -> TradingStrategy:
    """이름으로 전략 인스턴스를 생성.

    실행(run)마다 새 인스턴스를 만들어야 한다. 전략은 지표 상태를 내부에 들고 있다.

    Args:
        name: 등록된 전략 이름 (예: "rsi", "sma_cross")
        params: 전략 파라미터 (각 전략의 DEFAULT_PARAMS를 오버라이드)

    Raises:
        ValueError: 등록되지 않은 전략 이름
    """
    return get_strategy_class(name)(params=params)


def list_strategies() -> list[str]:
    """등록된 전략 이름 목록 반환."""
    return sorted(STRATEGY_REGISTRY.keys())


def describe_strategies() -> dict[str, dict[str, Any]]:
    """전략별 입력 레코드 종류와 기본 파라미터. --list 출력에 사용."""
    return {
        name: {
            "required_data": STRATEGY_REGISTRY[name].required_data.value,
            "params": dict(getattr(STRATEGY_REGISTRY[name], "DEFAULT_PARAMS", {})),
        }
        for name in list_strategies()
    }


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _auto_discover():
    """이 패키지의 모든 전략 모듈을 임포트하여 @register가 실행되게 한다."""
    for module in pkgutil.iter_modules(__path__):
        if module.name.startswith("_"):
            continue
        import_module(f"{__name__}.{module.name}")


# 모듈 로드 시 자동 탐색
_auto_discover()
