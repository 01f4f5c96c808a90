"""
설정 관리 모듈.

[ 역할 ]
    config.yaml (또는 .json) 파일을 파싱하여 Config 객체로 변환.
    전략 파라미터, 백테스트(포트폴리오) 파라미터, 입력 데이터, 로깅 설정을 통합 관리.

[ 설정 파일 구조 (config.yaml) ]
    strategy:         → StrategyConfig (전략 이름 + 파라미터)
    backtest:         → BacktestConfig (초기 자금, 거래 비용, 손절/익절)
    data:             → DataConfig (레코드 종류, 헤더 유무, 입력 경로)
    log_level:        → "INFO" / "DEBUG"
    log_dir:          → 로그 디렉토리 경로
    verbose:          → 시그널마다 상태 출력 여부

[ 호출하는 곳 ]
    - run_backtest.py에서 Config.from_yaml()로 로드
    - 전략 생성 시 config.strategy의 값을 params로 전달
    - 포트폴리오 생성 시 config.backtest의 값을 사용
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from stream_trader.core.types import RecordType


@dataclass
class StrategyConfig:
    """전략 설정. config.yaml의 strategy 섹션에 대응.

    전략별 파라미터는 params dict에 자유롭게 넣는다.
    각 전략 클래스의 DEFAULT_PARAMS가 기본값 역할을 하므로,
    여기서는 오버라이드할 값만 지정하면 된다.
    """
    name: str = "rsi"
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class BacktestConfig:
    """백테스트 설정. config.yaml의 backtest 섹션에 대응.

    stop_loss_pct / take_profit_pct가 None이면 해당 규칙 비활성.
    periods_per_year가 None이면 샤프 비율 연환산 계수를 자산 곡선에서 추정.
    """
    initial_cash: float = 100_000.0
    tx_cost_pct: float = 0.0               # 0.001 = 0.1%
    stop_loss_pct: float | None = None     # 0.1 = 진입가 대비 -10%
    take_profit_pct: float | None = None   # 0.2 = 진입가 대비 +20%
    periods_per_year: float | None = None


@dataclass
class DataConfig:
    """입력 데이터 설정. config.yaml의 data 섹션에 대응."""
    record_type: str = "ohlcv"          # ohlcv / tick / single_value
    has_header: bool = True
    delimiter: str = ","
    input_path: str | None = None       # None 또는 "-"이면 표준입력

    def __post_init__(self):
        # 잘못된 record_type은 로드 시점에 ValueError
        RecordType(self.record_type.lower())

    @property
    def type(self) -> RecordType:
        return RecordType(self.record_type.lower())


@dataclass
class Config:
    """전체 설정. from_yaml() 또는 from_json()으로 파일에서 로드."""
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    backtest: BacktestConfig = field(default_factory=BacktestConfig)
    data: DataConfig = field(default_factory=DataConfig)
    log_level: str = "INFO"
    log_dir: str = "logs"
    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """YAML 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls._from_dict(data or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "Config":
        """JSON 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """딕셔너리에서 Config 생성."""
        strategy_data = data.get("strategy") or {}
        backtest_data = data.get("backtest") or {}
        data_data = data.get("data") or {}

        # strategy 섹션 파싱: name은 직접 필드, 나머지는 모두 params로
        strategy_name = strategy_data.get("name", "rsi")
        # params가 명시적으로 있으면 그것을 사용, 없으면 name 외 나머지를 params로
        if "params" in strategy_data:
            strategy_params = dict(strategy_data["params"] or {})
        else:
            strategy_params = {
                k: v for k, v in strategy_data.items()
                if k != "name"
            }
        strategy = StrategyConfig(name=strategy_name, params=strategy_params)
        backtest = BacktestConfig(**{
            k: v for k, v in backtest_data.items()
            if k in BacktestConfig.__dataclass_fields__
        })
        data_config = DataConfig(**{
            k: v for k, v in data_data.items()
            if k in DataConfig.__dataclass_fields__
        })
        return cls(
            strategy=strategy,
            backtest=backtest,
            data=data_config,
            log_level=data.get("log_level", "INFO"),
            log_dir=data.get("log_dir", "logs"),
            verbose=bool(data.get("verbose", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환."""
        from dataclasses import asdict
        return asdict(self)

    def save_yaml(self, path: str | Path) -> None:
        """YAML 파일로 저장."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, allow_unicode=True, default_flow_style=False)
