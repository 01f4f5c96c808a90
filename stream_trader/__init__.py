"""
=============================================================================
스트리밍 백테스트 시스템 (Stream Trader)
=============================================================================

[ 시스템 전체 구조 ]

    run_backtest.py (진입점)
         │
         ├── utils/config.py        ← config.yaml 설정 로드
         ├── utils/logger.py        ← 로깅
         │
         ├── data/streamers.py      ← CSV/DataFrame → 레코드 스트림
         │
         ├── strategies/            ← 매매 전략 (시그널 생성)
         │     └── indicators/      ← SMA, EMA, MVar, RSI, MACD
         │
         └── backtest/runner.py     ← 백테스트 실행 루프
               │
               ├── data/portfolio.py    ← 포지션/자산 곡선 관리, 손절/익절
               └── backtest/metrics.py  ← 성과 지표 계산


[ 핵심 추상 클래스 (core/) - 모든 구현체의 부모 ]

    core/indicator.py        → indicators/*.py (SMA, EMA, MVar, MStdev, RSI, MACD)
    core/trading_strategy.py → strategies/*.py (sma_cross, ema_cross, rsi, macd)
    core/data_source.py      → data/streamers.py (CsvStreamer, DataFrameStreamer)


[ 데이터 흐름 ]

    1. config.yaml에서 전략/포트폴리오 파라미터 로드
    2. DataSource가 레코드를 하나씩 공급 (미래 데이터 접근 불가)
    3. TradingStrategy.update(record)가 지표를 갱신하고 BUY/SELL/NONE 시그널 반환
    4. BacktestRunner가 BUY/SELL 시그널을 BasicPortfolio.update()에 전달
    5. 포트폴리오가 자산 곡선을 쌓고, 종료 시 metrics.py로 성과 지표 계산
"""

__version__ = "0.1.0"
