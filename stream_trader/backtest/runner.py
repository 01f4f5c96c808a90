"""
백테스트 러너 모듈.

[ 역할 ]
    데이터 소스 → 전략 → 포트폴리오를 한 레코드씩 당겨(pull) 흘려보내는 실행 루프.
    미래 데이터는 구조적으로 볼 수 없다 (레코드를 하나씩만 읽으므로).

[ 실행 흐름 ]
    run() 호출 시:
        1. 데이터 소스에서 레코드를 하나 읽음
        2. strategy.update(record) → Signal
        3. Signal이 BUY/SELL이면 portfolio.update(signal)
           → verbose면 포트폴리오 상태 한 줄 출력
             (report()는 누적 통계에서 만들어지므로 시그널 수에 비례해 느려지지 않음)
        4. 소스가 끝나면 최종 상태를 항상 한 줄 출력

[ 의존성 ]
    - core/trading_strategy.py::TradingStrategy (전략 인터페이스)
    - data/portfolio.py::BasicPortfolio (포지션/자산 곡선 관리)

[ 호출하는 곳 ]
    - run_backtest.py (진입점)에서 생성 및 실행

[ 주의 ]
    전략/포트폴리오 인스턴스는 실행 한 번에만 사용한다.
    여러 파라미터로 비교할 때는 실행마다 새로 만들어야 한다 (상태 공유 금지).
"""

import logging
import sys
from typing import Any, Iterable, TextIO

from stream_trader.core.trading_strategy import TradingStrategy
from stream_trader.core.types import MarketRecord, Side
from stream_trader.data.portfolio import BasicPortfolio, PortfolioReport

logger = logging.getLogger("stream_trader.backtest")


class BacktestRunner:
    """백테스트 러너. run()으로 시뮬레이션 실행."""

    def __init__(
        self,
        strategy: TradingStrategy,
        portfolio: BasicPortfolio,
        output: TextIO | None = None,       # 리포트 출력 대상 (기본 stdout)
        periods_per_year: float | None = None,
    ):
        self.strategy = strategy
        self.portfolio = portfolio
        self.output = output if output is not None else sys.stdout
        self.periods_per_year = periods_per_year

        # 실행 후 채워지는 결과
        self.num_records = 0
        self.num_signals = 0
        self.report: PortfolioReport | None = None

    def run(self, records: Iterable[MarketRecord], verbose: bool = False) -> PortfolioReport:
        """백테스트 실행.

        Args:
            records: 시간 순서의 레코드 (CsvStreamer, DataFrameStreamer, 리스트 등)
            verbose: True면 시그널을 처리할 때마다 상태 출력

        Returns:
            PortfolioReport: 최종 포트폴리오 상태 + 성과 지표
        """
        logger.info(f"백테스트 시작: 전략={self.strategy.name}, 파라미터={self.strategy.params}")

        for record in records:
            self.num_records += 1
            signal = self.strategy.update(record)
            if signal.side == Side.NONE:
                continue

            self.num_signals += 1
            self.portfolio.update(signal)
            if verbose:
                self._emit(self.portfolio.report(self.periods_per_year))

        self.report = self.portfolio.report(self.periods_per_year)
        self._emit(self.report)

        logger.info(
            f"백테스트 완료: 레코드 {self.num_records}개, 시그널 {self.num_signals}개, "
            f"총 수익률 {self.report.metrics.total_return:.2f}%"
        )
        return self.report

    def _emit(self, report: PortfolioReport) -> None:
        print(report.format_line(), file=self.output)

    def generate_report(self) -> dict[str, Any]:
        """백테스트 리포트 생성."""
        if self.report is None:
            return {"error": "백테스트를 먼저 실행하세요."}

        return {
            "strategy": self.strategy.name,
            "params": dict(self.strategy.params),
            "num_records": self.num_records,
            "num_signals": self.num_signals,
            "report": self.report.to_dict(),
            "portfolio_summary": self.portfolio.get_summary(),
            "trades": [
                {
                    "timestamp": t.timestamp,
                    "side": t.side,
                    "quantity": t.quantity,
                    "price": t.price,
                    "commission": t.commission,
                    "profit": t.profit,
                    "reason": t.reason,
                }
                for t in self.portfolio.trade_history
            ],
        }
