"""
백테스트 실행 스크립트 (시스템 진입점).

[ 사용법 ]
    # 기본 실행 (config.yaml의 전략 사용, 표준입력에서 CSV 읽기)
    python run_backtest.py < data/btcusd.csv

    # 입력 파일 / 레코드 종류 지정
    python run_backtest.py --input data/btcusd.csv --type ohlcv
    python run_backtest.py --input data/btcusd_singlevalue.csv --type single_value --strategy sma_cross

    # 파라미터 오버라이드
    python run_backtest.py --strategy macd -p short_period=8 -p long_period=21 -p threshold=0.01

    # 시그널마다 포트폴리오 상태 출력
    python run_backtest.py --input data/btcusd.csv -v

    # 샘플 데이터로 테스트
    python run_backtest.py --sample
    python run_backtest.py --strategy ema_cross --sample

    # 여러 전략 비교
    python run_backtest.py --compare sma_cross ema_cross macd --sample

    # 등록된 전략 목록 확인
    python run_backtest.py --list
"""

import argparse
import sys
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from stream_trader.backtest.metrics import PerformanceMetrics, format_pct
from stream_trader.backtest.runner import BacktestRunner
from stream_trader.core.types import MarketRecord, RecordType
from stream_trader.data.portfolio import BasicPortfolio
from stream_trader.data.streamers import CsvStreamer, DataFrameStreamer
from stream_trader.strategies import create_strategy, describe_strategies
from stream_trader.utils.config import Config
from stream_trader.utils.logger import setup_logger

DAY_SECONDS = 24 * 60 * 60


def generate_sample_data(
    num_bars: int = 500,
    start_timestamp: int = 1_609_459_200,   # 2021-01-01 00:00:00 UTC
    interval: int = DAY_SECONDS,
    initial_price: float = 30_000.0,
    volatility: float = 0.02,
    seed: int = 42,
) -> pd.DataFrame:
    """백테스트용 샘플 OHLCV 데이터 생성 (기하 랜덤워크)."""
    rng = np.random.default_rng(seed)

    returns = rng.normal(0.0005, volatility, num_bars)
    closes = initial_price * np.cumprod(1 + returns)
    opens = closes * (1 + rng.normal(0, volatility / 2, num_bars))
    highs = np.maximum(opens, closes) * (1 + np.abs(rng.normal(0, 0.01, num_bars)))
    lows = np.minimum(opens, closes) * (1 - np.abs(rng.normal(0, 0.01, num_bars)))
    volumes = rng.lognormal(8, 1, num_bars)

    return pd.DataFrame({
        "timestamp": start_timestamp + np.arange(num_bars, dtype=np.int64) * interval,
        "open": opens.round(2),
        "high": highs.round(2),
        "low": lows.round(2),
        "close": closes.round(2),
        "volume": volumes.round(4),
    })


def sample_frame(df: pd.DataFrame, record_type: RecordType) -> pd.DataFrame:
    """샘플 OHLCV를 레코드 종류에 맞는 컬럼 구성으로 변환."""
    if record_type == RecordType.SINGLE_VALUE:
        return pd.DataFrame({"timestamp": df["timestamp"], "value": df["close"]})
    if record_type == RecordType.TICK:
        return pd.DataFrame({"timestamp": df["timestamp"], "price": df["close"], "volume": df["volume"]})
    return df


def parse_param(param_str: str) -> tuple[str, object]:
    """'key=value' 문자열을 파싱하여 (key, value) 반환. 숫자면 자동 변환."""
    key, _, value = param_str.partition("=")
    key = key.strip()
    value = value.strip()

    # 숫자 자동 변환
    try:
        if "." in value or "e" in value.lower():
            return key, float(value)
        return key, int(value)
    except ValueError:
        # bool 변환
        if value.lower() in ("true", "yes"):
            return key, True
        if value.lower() in ("false", "no"):
            return key, False
        return key, value


def run_single(
    config: Config,
    strategy_name: str,
    strategy_params: dict,
    records: Iterable[MarketRecord],
    verbose: bool = False,
) -> BacktestRunner:
    """단일 전략 백테스트 실행. 실행마다 전략/포트폴리오를 새로 만든다."""
    strategy = create_strategy(strategy_name, params=strategy_params)

    portfolio = BasicPortfolio(
        initial_cash=config.backtest.initial_cash,
        tx_cost_pct=config.backtest.tx_cost_pct,
        stop_loss_pct=config.backtest.stop_loss_pct,
        take_profit_pct=config.backtest.take_profit_pct,
    )

    runner = BacktestRunner(
        strategy,
        portfolio,
        periods_per_year=config.backtest.periods_per_year,
    )
    runner.run(records, verbose=verbose)
    return runner


def print_comparison(results: dict[str, PerformanceMetrics]):
    """여러 전략 비교 결과 출력."""
    names = list(results.keys())
    col_width = max(14, max(len(n) for n in names) + 2)

    print(f"\n{'=' * (20 + col_width * len(names))}")
    print("전략 비교 결과")
    print(f"{'=' * (20 + col_width * len(names))}")

    # 헤더
    header = f"{'':>20}" + "".join(f"{n:>{col_width}}" for n in names)
    print(header)
    print("-" * len(header))

    # 지표 행
    rows = [
        ("총 수익률", lambda m: format_pct(m.total_return)),
        ("연환산 수익률", lambda m: format_pct(m.annual_return)),
        ("바이앤홀드", lambda m: format_pct(m.bh_return)),
        ("샤프 비율", lambda m: f"{m.sharpe_ratio:.2f}"),
        ("최대 낙폭(MDD)", lambda m: format_pct(m.max_drawdown)),
        ("청산 거래 수", lambda m: f"{m.closed_trades}"),
        ("승률", lambda m: f"{m.win_rate:.1f}%"),
        ("수익 팩터", lambda m: f"{m.profit_factor:.2f}"),
    ]

    for label, fmt in rows:
        row = f"{label:>20}" + "".join(f"{fmt(results[n]):>{col_width}}" for n in names)
        print(row)

    print(f"{'=' * (20 + col_width * len(names))}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="스트리밍 백테스트 실행")
    parser.add_argument("--config", type=str, default="config.yaml", help="설정 파일 경로")
    parser.add_argument("--strategy", type=str, default=None, help="전략 이름 (config.yaml 대신 지정)")
    parser.add_argument("-p", "--param", action="append", default=[], help="파라미터 오버라이드 (예: -p period=21)")
    parser.add_argument("--input", type=str, default=None, help="입력 CSV 경로 ('-'이면 표준입력)")
    parser.add_argument("--type", type=str, default=None, choices=[t.value for t in RecordType], help="레코드 종류")
    parser.add_argument("--no-header", action="store_true", help="입력 CSV에 헤더 줄이 없음")
    parser.add_argument("--sample", action="store_true", help="샘플 데이터로 테스트")
    parser.add_argument("-v", "--verbose", action="store_true", help="시그널마다 포트폴리오 상태 출력")
    parser.add_argument("--compare", nargs="+", metavar="STRATEGY", help="여러 전략 비교 (예: --compare sma_cross macd)")
    parser.add_argument("--list", action="store_true", help="등록된 전략 목록 출력")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # 전략 목록 출력
    if args.list:
        print("등록된 전략:")
        for name, info in describe_strategies().items():
            defaults = ", ".join(f"{k}={v}" for k, v in info["params"].items())
            print(f"  - {name:<10} [{info['required_data']}] {defaults}")
        return 0

    # 설정 로드
    config_path = Path(args.config)
    if config_path.exists():
        config = Config.from_yaml(config_path)
    else:
        print(f"설정 파일 없음: {config_path}, 기본값 사용", file=sys.stderr)
        config = Config()

    # 로거
    logger = setup_logger(level=config.log_level, log_dir=config.log_dir)

    # CLI 옵션이 config보다 우선
    if args.type:
        config.data.record_type = args.type
    if args.no_header:
        config.data.has_header = False
    if args.input:
        config.data.input_path = args.input
    record_type = config.data.type
    verbose = args.verbose or config.verbose

    strategy_params = dict(config.strategy.params)
    for p in args.param:
        key, value = parse_param(p)
        strategy_params[key] = value

    names = args.compare or [args.strategy or config.strategy.name]
    for name in names:
        try:
            required = create_strategy(name, params=strategy_params).required_data
        except ValueError as e:
            print(f"오류: {e}", file=sys.stderr)
            return 1
        if required == RecordType.OHLCV and record_type != RecordType.OHLCV:
            print(f"오류: '{name}' 전략은 ohlcv 데이터가 필요합니다 (현재: {record_type.value})", file=sys.stderr)
            return 1

    # 데이터 로드
    input_file = None
    if args.sample:
        records: Iterable[MarketRecord] = DataFrameStreamer(
            sample_frame(generate_sample_data(), record_type), record_type,
        )
    elif config.data.input_path in (None, "-"):
        records = CsvStreamer(sys.stdin, record_type, config.data.has_header, config.data.delimiter)
    else:
        try:
            input_file = open(config.data.input_path, "r", encoding="utf-8")
        except OSError as e:
            print(f"오류: 입력 파일을 열 수 없습니다: {e}", file=sys.stderr)
            return 1
        records = CsvStreamer(input_file, record_type, config.data.has_header, config.data.delimiter)

    try:
        # ─── 비교 모드 ───────────────────────────────────────────────────
        if args.compare:
            # 스트림은 한 번만 읽을 수 있으므로 메모리에 올려두고 재사용
            records = list(records)
            logger.info(f"{len(args.compare)}개 전략 비교 실행 (레코드 {len(records)}개)")
            results = {}
            for name in args.compare:
                print(f"\n--- {name} ---")
                runner = run_single(config, name, strategy_params, records, verbose)
                results[name] = runner.report.metrics
            print_comparison(results)
            return 0

        # ─── 단일 실행 모드 ─────────────────────────────────────────────
        strategy_name = names[0]
        if args.param:
            logger.info(f"파라미터 오버라이드: {dict(parse_param(p) for p in args.param)}")
        runner = run_single(config, strategy_name, strategy_params, records, verbose)
        if verbose:
            print(runner.report.summary())
        return 0
    finally:
        if input_file is not None:
            input_file.close()


if __name__ == "__main__":
    sys.exit(main())
