"""
포트폴리오 관리 모듈.

[ 역할 ]
    현금, 보유 포지션(Position), 거래 기록(TradeRecord), 자산 곡선(equity curve)을
    통합 관리. 러너가 BUY/SELL 시그널을 넘기면 이 클래스가 가상 매매를 실행.

[ 주요 클래스 ]
    Position        - 매수 1회 = 포지션(로트) 1개 (진입 시각/수량/진입가)
    TradeRecord     - 개별 거래 내역 (매수/매도, 손익, 사유)
    EquityPoint     - 자산 곡선의 한 점 (timestamp, equity)
    BasicPortfolio  - 단일 자산 포트폴리오 (현금 + 포지션들 + 자산 곡선)
    PortfolioReport - report()의 반환값. 리포트 한 줄 / 요약 출력

[ update(signal) 처리 순서 ]
    1. last_price / last_timestamp 기록 (첫 호출이면 초기 기준점 추가)
    2. 손절/익절 검사 → 조건에 걸린 포지션은 현재 시그널 가격으로 청산
    3. 시그널 실행 (BUY: 전액 매수, SELL: 전량 청산, NONE: 없음)
    4. 자산 곡선에 (timestamp, 현금 + 보유 평가액) 추가

[ 호출하는 곳 ]
    - backtest/runner.py::BacktestRunner.run()에서 portfolio.update() 호출
    - backtest/metrics.py::RunningStats를 자산 곡선/거래 추가 때마다 갱신,
      report()는 metrics_from_stats()로 성과 계산
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import pandas as pd

from stream_trader.backtest.metrics import RunningStats, format_pct, metrics_from_stats
from stream_trader.core.types import Side, Signal

logger = logging.getLogger("stream_trader.portfolio")


@dataclass
class Position:
    """오픈 포지션 하나. 매수 시그널 한 번에 하나씩 생성된다."""
    entry_timestamp: int
    quantity: int
    entry_price: float

    def market_value(self, price: float) -> float:
        return self.quantity * price


@dataclass
class TradeRecord:
    """개별 거래 기록. metrics.py에서 승률/수익 계산에 사용됨."""
    timestamp: int
    side: str               # "buy" or "sell"
    quantity: int
    price: float            # 체결 가격
    commission: float = 0.0
    profit: float = 0.0     # 실현 손익 (매도 시에만)
    reason: str = ""        # "signal" / "stop_loss" / "take_profit"


class EquityPoint(NamedTuple):
    timestamp: int
    equity: float


@dataclass
class PortfolioReport:
    """포트폴리오 현재 상태 + 성과 지표 스냅샷."""
    init_time: int
    curr_time: int
    init_cash: float
    curr_cash: float
    num_trades: int
    num_stop_loss: int
    num_take_profit: int
    quantity: int
    holdings: float          # 보유 평가액 (quantity * last_price)
    valuation: float         # 현금 + 보유 평가액
    total_costs: float       # 누적 거래 비용
    profit: float            # valuation - init_cash
    metrics: Any = None      # backtest/metrics.py::PerformanceMetrics

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환."""
        from dataclasses import asdict
        return asdict(self)

    def format_line(self) -> str:
        """리포트 한 줄. 필드 순서는 고정."""
        m = self.metrics
        parts = [
            f"init_time: {self.init_time}",
            f"curr_time: {self.curr_time}",
            f"init_cash: {self.init_cash:.2f}",
            f"curr_cash: {self.curr_cash:.2f}",
            f"num_trades: {self.num_trades}",
            f"num_stop_loss: {self.num_stop_loss}",
            f"num_take_profit: {self.num_take_profit}",
            f"quantity: {self.quantity}",
            f"holdings: {self.holdings:.2f}",
            f"valuation: {self.valuation:.2f}",
            f"total_costs: {self.total_costs:.2f}",
            f"profit: {self.profit:.2f}",
            f"total_return: {format_pct(m.total_return)}",
            f"annual_return: {format_pct(m.annual_return)}",
        ]
        if m.bh_return is not None:
            parts.append(f"buy_and_hold_return: {format_pct(m.bh_return)}")
            parts.append(f"bh_annual: {format_pct(m.bh_annual_return)}")
        parts.append(f"max_drawdown: {format_pct(m.max_drawdown)}")
        parts.append(f"sharpe: {m.sharpe_ratio:.4f}")
        return " ".join(parts)

    def summary(self) -> str:
        """포트폴리오 요약 + 성과 리포트 (여러 줄)."""
        lines = [
            f"기간:            {self.init_time} ~ {self.curr_time}",
            f"초기 자금:       {self.init_cash:>14,.2f}",
            f"현재 현금:       {self.curr_cash:>14,.2f}",
            f"보유 수량:       {self.quantity:>14,d}",
            f"보유 평가액:     {self.holdings:>14,.2f}",
            f"총 자산:         {self.valuation:>14,.2f}",
            f"손익:            {self.profit:>14,.2f}",
            f"거래 비용:       {self.total_costs:>14,.2f}",
            f"거래 횟수:       {self.num_trades:>14d}",
            f"손절 / 익절:     {self.num_stop_loss:>6d} / {self.num_take_profit:d}",
        ]
        return "\n".join(lines) + "\n" + self.metrics.summary()


class BasicPortfolio:
    """단일 자산 포트폴리오.

    BUY 시그널에는 가용 현금 전부로 정수 수량 매수(포지션 1개 추가),
    SELL 시그널에는 모든 포지션을 청산한다. 손절/익절 비율이 설정되어 있으면
    매 update마다 포지션별로 검사하여 개별 청산한다.

    stop_loss_pct / take_profit_pct가 None 또는 NaN이면 해당 규칙은 비활성.
    """

    def __init__(
        self,
        initial_cash: float = 100_000.0,
        tx_cost_pct: float = 0.0,            # 매수/매도 거래 비용 비율
        stop_loss_pct: float | None = None,  # 손절 비율 (0.1 = 진입가 대비 -10%)
        take_profit_pct: float | None = None,  # 익절 비율 (0.2 = 진입가 대비 +20%)
    ):
        if tx_cost_pct < 0:
            raise ValueError(f"tx_cost_pct는 음수일 수 없습니다: {tx_cost_pct}")
        for name, value in (("stop_loss_pct", stop_loss_pct), ("take_profit_pct", take_profit_pct)):
            if value is not None and value < 0:
                raise ValueError(f"{name}는 음수일 수 없습니다: {value}")

        self.init_cash = float(initial_cash)
        self.cash = float(initial_cash)
        self.tx_cost_pct = float(tx_cost_pct)
        self.stop_loss_pct = _disabled_to_none(stop_loss_pct)
        self.take_profit_pct = _disabled_to_none(take_profit_pct)

        self.positions: list[Position] = []
        self.equity_curve: list[EquityPoint] = []
        self.trade_history: list[TradeRecord] = []
        self.stats = RunningStats()            # 자산 곡선/거래 누적 통계 (report용)

        self.num_trades = 0
        self.num_stop_loss = 0
        self.num_take_profit = 0
        self.total_costs = 0.0

        self.init_timestamp = 0
        self.init_price = math.nan
        self.last_timestamp = 0
        self.last_price = math.nan

    # ─── 조회 ────────────────────────────────────────────────────────────

    @property
    def quantity(self) -> int:
        """총 보유 수량."""
        return sum(p.quantity for p in self.positions)

    @property
    def holdings(self) -> float:
        """보유 평가액 (마지막 가격 기준)."""
        if not self.positions:
            return 0.0
        return self.quantity * self.last_price

    @property
    def valuation(self) -> float:
        """총 자산 (현금 + 보유 평가액)."""
        return self.cash + self.holdings

    @property
    def profit(self) -> float:
        """총 손익."""
        return self.valuation - self.init_cash

    # ─── 갱신 ────────────────────────────────────────────────────────────

    def update(self, signal: Signal) -> None:
        """시그널 반영. 가격이 0 이하(또는 NaN)면 아무것도 하지 않는다."""
        price = signal.price
        if not price > 0:
            return

        if not self.equity_curve:
            self.init_timestamp = signal.timestamp
            self.init_price = price
            self._append_equity(EquityPoint(signal.timestamp, self.cash))
        self.last_price = price
        self.last_timestamp = signal.timestamp

        self._check_exit_rules(signal)

        if signal.side == Side.BUY:
            self._execute_buy(signal)
        elif signal.side == Side.SELL:
            self._execute_sell(signal)

        self._append_equity(EquityPoint(self.last_timestamp, self.valuation))

    def _append_equity(self, point: EquityPoint) -> None:
        self.equity_curve.append(point)
        self.stats.add_equity(point)

    def _append_trade(self, trade: TradeRecord) -> None:
        self.trade_history.append(trade)
        self.stats.add_trade(trade)

    def _check_exit_rules(self, signal: Signal) -> None:
        """손절/익절 검사. 조건에 걸린 포지션은 현재 시그널 가격으로 개별 청산."""
        if self.stop_loss_pct is None and self.take_profit_pct is None:
            return

        price = signal.price
        remaining: list[Position] = []
        for position in self.positions:
            if (self.stop_loss_pct is not None
                    and price <= position.entry_price * (1.0 - self.stop_loss_pct)):
                self.num_stop_loss += 1
                self._close_position(position, signal, "stop_loss")
                self.num_trades += 1
            elif (self.take_profit_pct is not None
                    and price >= position.entry_price * (1.0 + self.take_profit_pct)):
                self.num_take_profit += 1
                self._close_position(position, signal, "take_profit")
                self.num_trades += 1
            else:
                remaining.append(position)
        self.positions = remaining

    def _execute_buy(self, signal: Signal) -> None:
        """전액 매수. 거래 비용을 포함해 살 수 있는 최대 정수 수량."""
        price = signal.price
        unit_cost = price * (1.0 + self.tx_cost_pct)
        quantity = int(self.cash // unit_cost)
        if quantity <= 0:
            logger.debug(f"[{signal.timestamp}] 매수 불가: 현금 부족 ({self.cash:,.2f} < {unit_cost:,.2f})")
            return

        cost = quantity * price
        commission = cost * self.tx_cost_pct
        self.cash -= cost + commission
        self.total_costs += commission
        self.positions.append(Position(signal.timestamp, quantity, price))
        self.num_trades += 1

        self._append_trade(TradeRecord(
            timestamp=signal.timestamp,
            side="buy",
            quantity=quantity,
            price=price,
            commission=commission,
            reason="signal",
        ))
        logger.debug(f"[{signal.timestamp}] 매수: {quantity} @ {price:,.4f} ({signal.reason})")

    def _execute_sell(self, signal: Signal) -> None:
        """남은 포지션 전량 청산. 거래 횟수는 한 번만 증가."""
        if not self.positions:
            return
        for position in self.positions:
            self._close_position(position, signal, "signal")
        self.positions = []
        self.num_trades += 1

    def _close_position(self, position: Position, signal: Signal, reason: str) -> None:
        price = signal.price
        proceeds = position.quantity * price
        commission = proceeds * self.tx_cost_pct
        self.cash += proceeds - commission
        self.total_costs += commission
        profit = proceeds - commission - position.quantity * position.entry_price

        self._append_trade(TradeRecord(
            timestamp=signal.timestamp,
            side="sell",
            quantity=position.quantity,
            price=price,
            commission=commission,
            profit=profit,
            reason=reason,
        ))
        logger.debug(
            f"[{signal.timestamp}] 매도({reason}): {position.quantity} @ {price:,.4f} "
            f"(진입가 {position.entry_price:,.4f}, 손익 {profit:,.2f})"
        )

    # ─── 리포트 ──────────────────────────────────────────────────────────

    def equity_frame(self) -> pd.DataFrame:
        """자산 곡선을 DataFrame(timestamp, equity)으로 반환."""
        return pd.DataFrame(self.equity_curve, columns=["timestamp", "equity"])

    def report(self, periods_per_year: float | None = None) -> PortfolioReport:
        """현재 상태로 리포트 생성 (상태 변경 없음).

        성과 지표는 누적 통계(self.stats)에서 바로 만든다. 자산 곡선을 다시
        훑지 않으므로 시그널마다 호출해도 비용이 일정하다.
        """
        metrics = metrics_from_stats(
            self.stats,
            init_price=self.init_price,
            last_price=self.last_price,
            tx_cost_pct=self.tx_cost_pct,
            periods_per_year=periods_per_year,
        )
        return PortfolioReport(
            init_time=self.init_timestamp,
            curr_time=self.last_timestamp,
            init_cash=self.init_cash,
            curr_cash=self.cash,
            num_trades=self.num_trades,
            num_stop_loss=self.num_stop_loss,
            num_take_profit=self.num_take_profit,
            quantity=self.quantity,
            holdings=self.holdings,
            valuation=self.valuation,
            total_costs=self.total_costs,
            profit=self.profit,
            metrics=metrics,
        )

    def get_summary(self) -> dict[str, Any]:
        """포트폴리오 요약."""
        return {
            "initial_cash": self.init_cash,
            "current_cash": self.cash,
            "quantity": self.quantity,
            "holdings": self.holdings,
            "valuation": self.valuation,
            "profit": self.profit,
            "num_positions": len(self.positions),
            "num_trades": self.num_trades,
        }

    def __str__(self) -> str:
        return self.report().format_line()


def _disabled_to_none(value: float | None) -> float | None:
    if value is None or math.isnan(value):
        return None
    return float(value)
