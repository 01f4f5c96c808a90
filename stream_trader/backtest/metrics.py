"""
백테스트 성과 지표 계산 모듈.

[ 역할 ]
    포트폴리오의 자산 곡선(equity curve)과 거래 기록을 받아 성과 지표를 계산.
    calculate_metrics() 함수가 핵심.

[ 두 가지 계산 경로 ]
    - calculate_metrics(): 자산 곡선 전체를 받아 numpy로 일괄 계산 (사후 분석용)
    - RunningStats + metrics_from_stats(): 포트폴리오가 자산 곡선 점/거래를
      추가할 때마다 누적 통계를 갱신해 두고, 리포트는 O(1)로 만든다.
      verbose 모드에서 시그널마다 리포트를 찍어도 전체를 다시 훑지 않는다.

[ 계산하는 지표 ]
    - 총 수익률 / 연환산 수익률 (기간 30일 미만이면 연환산 불가 → None)
    - 샤프 비율 (무위험 수익률 0 가정)
    - MDD (최대 낙폭)
    - 바이앤홀드 비교 수익률
    - 승률, 수익 팩터 (청산된 포지션 기준)

[ 호출하는 곳 ]
    - data/portfolio.py::BasicPortfolio가 RunningStats를 갱신하고
      report()에서 metrics_from_stats() 호출

[ 입력 데이터 ]
    - equity_curve: BasicPortfolio.equity_curve (timestamp, equity) 리스트
    - trade_history: BasicPortfolio.trade_history (매도 거래만 분석)
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

if TYPE_CHECKING:
    from stream_trader.data.portfolio import EquityPoint, TradeRecord

SECONDS_PER_YEAR = 365 * 24 * 60 * 60
MIN_ANNUALIZATION_YEARS = 30 / 365      # 이보다 짧으면 연환산하지 않음
DEFAULT_PERIODS_PER_YEAR = 252          # 샤프 연환산 기본값 (연간 거래일)


@dataclass
class PerformanceMetrics:
    """백테스트 성과 지표. summary()로 포맷된 리포트 출력 가능.

    수익률/낙폭은 퍼센트(%) 단위. None은 "계산 불가(N/A)".
    """
    total_return: float = 0.0                  # 총 수익률 (%)
    annual_return: float | None = None         # 연환산 수익률 (%)
    max_drawdown: float = 0.0                  # 최대 낙폭 MDD (%)
    sharpe_ratio: float = 0.0                  # 샤프 비율
    years: float = 0.0                         # 자산 곡선이 덮는 기간 (년)
    bh_return: float | None = None             # 바이앤홀드 수익률 (%)
    bh_annual_return: float | None = None      # 바이앤홀드 연환산 수익률 (%)
    closed_trades: int = 0                     # 청산된 포지션 수
    win_rate: float = 0.0                      # 승률 (%)
    profit_factor: float = 0.0                 # 총이익 / 총손실

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환."""
        from dataclasses import asdict
        return asdict(self)

    def summary(self) -> str:
        """성과 요약 문자열."""
        lines = [
            "=" * 50,
            "백테스트 성과 리포트",
            "=" * 50,
            f"총 수익률:       {self.total_return:>10.2f}%",
            f"연환산 수익률:    {format_pct(self.annual_return):>11}",
            f"샤프 비율:       {self.sharpe_ratio:>10.2f}",
            f"최대 낙폭(MDD):  {self.max_drawdown:>10.2f}%",
            f"바이앤홀드:       {format_pct(self.bh_return):>11}",
            f"바이앤홀드 연환산: {format_pct(self.bh_annual_return):>11}",
            "-" * 50,
            f"청산 거래 수:    {self.closed_trades:>10d}",
            f"승률:            {self.win_rate:>10.2f}%",
            f"수익 팩터:       {self.profit_factor:>10.2f}",
            "=" * 50,
        ]
        return "\n".join(lines)


def format_pct(value: float | None) -> str:
    """퍼센트 값 포맷. None이면 N/A."""
    if value is None:
        return "N/A"
    return f"{value:.2f}%"


def elapsed_years(first_ts: int, last_ts: int) -> float:
    return (last_ts - first_ts) / SECONDS_PER_YEAR


def annualized_return(ratio: float, years: float) -> float | None:
    """연환산 수익률(비율). 기간이 너무 짧거나 ratio가 음수면 None."""
    if years < MIN_ANNUALIZATION_YEARS or ratio < 0:
        return None
    return ratio ** (1.0 / years) - 1.0


def max_drawdown(values: Sequence[float]) -> float:
    """최대 낙폭(비율). 고점 대비 최대 하락폭."""
    if not values:
        return 0.0
    peak = values[0]
    max_dd = 0.0
    for value in values:
        if value > peak:
            peak = value
        if peak > 0:
            dd = (peak - value) / peak
            if dd > max_dd:
                max_dd = dd
    return max_dd


def sharpe_ratio(values: Sequence[float], periods_per_year: float) -> float:
    """스텝별 수익률로 계산한 연환산 샤프 비율 (무위험 수익률 0).

    샤프 = mean(r) / std(r) * sqrt(periods_per_year)
    자산 곡선이 2개 미만이거나 표준편차가 0이면 0.
    """
    if len(values) < 2:
        return 0.0
    arr = np.asarray(values, dtype=np.float64)
    prev = arr[:-1]
    if np.any(prev <= 0):
        return 0.0
    returns = arr[1:] / prev - 1.0
    std = float(np.std(returns))
    if std == 0 or not math.isfinite(std):
        return 0.0
    return float(np.mean(returns) / std * np.sqrt(periods_per_year))


def infer_periods_per_year(num_returns: int, years: float) -> float:
    """자산 곡선의 평균 샘플링 간격으로 연간 샘플 수 추정."""
    if years <= 0 or num_returns <= 0:
        return DEFAULT_PERIODS_PER_YEAR
    return num_returns / years


def buy_and_hold_ratio(
    init_cash: float,
    init_price: float,
    last_price: float,
    tx_cost_pct: float = 0.0,
) -> float | None:
    """시작 가격에 전액 매수 후 마지막 가격으로 평가한 최종/초기 비율."""
    if not (init_price > 0) or not (last_price > 0) or init_cash <= 0:
        return None
    quantity = math.floor(init_cash / (init_price * (1.0 + tx_cost_pct)))
    cash = init_cash - quantity * init_price * (1.0 + tx_cost_pct)
    return (cash + quantity * last_price) / init_cash


class RunningStats:
    """자산 곡선 점과 거래 기록을 하나씩 받아 누적 통계를 유지.

    한 점 추가당 O(1). MDD는 누적 고점으로, 샤프는 스텝 수익률의
    평균/분산을 Welford 방식으로 갱신한다. 결과는 max_drawdown(),
    sharpe_ratio()의 일괄 계산과 같다.
    """

    def __init__(self):
        self.count = 0
        self.first: "EquityPoint | None" = None
        self.last: "EquityPoint | None" = None
        self.max_drawdown = 0.0                 # 비율
        self._peak = 0.0
        self._ret_count = 0
        self._ret_mean = 0.0
        self._ret_m2 = 0.0
        self._ret_invalid = False               # 이전 자산이 0 이하인 스텝 존재

        self.closed_trades = 0
        self.wins = 0
        self.gross_profit = 0.0
        self.gross_loss = 0.0

    def add_equity(self, point: "EquityPoint"):
        equity = point.equity
        if self.last is None:
            self.first = point
            self._peak = equity
        else:
            prev = self.last.equity
            if prev <= 0:
                self._ret_invalid = True
            else:
                ret = equity / prev - 1.0
                self._ret_count += 1
                delta = ret - self._ret_mean
                self._ret_mean += delta / self._ret_count
                self._ret_m2 += delta * (ret - self._ret_mean)
        self.last = point
        self.count += 1

        if equity > self._peak:
            self._peak = equity
        if self._peak > 0:
            dd = (self._peak - equity) / self._peak
            if dd > self.max_drawdown:
                self.max_drawdown = dd

    def add_trade(self, trade: "TradeRecord"):
        if trade.side != "sell":
            return
        self.closed_trades += 1
        if trade.profit > 0:
            self.wins += 1
            self.gross_profit += trade.profit
        else:
            self.gross_loss -= trade.profit

    def sharpe(self, periods_per_year: float) -> float:
        if self._ret_count == 0 or self._ret_invalid:
            return 0.0
        std = math.sqrt(self._ret_m2 / self._ret_count)
        if std == 0 or not math.isfinite(std):
            return 0.0
        return self._ret_mean / std * math.sqrt(periods_per_year)


def _fill_returns(
    metrics: PerformanceMetrics,
    first: "EquityPoint",
    last: "EquityPoint",
    init_price: float,
    last_price: float,
    tx_cost_pct: float,
):
    years = elapsed_years(first.timestamp, last.timestamp)
    metrics.years = years
    if first.equity <= 0:
        return
    ratio = last.equity / first.equity
    metrics.total_return = (ratio - 1.0) * 100
    annual = annualized_return(ratio, years)
    metrics.annual_return = annual * 100 if annual is not None else None

    # ─── 바이앤홀드 비교 ─────────────────────────────────────────────────
    bh_ratio = buy_and_hold_ratio(first.equity, init_price, last_price, tx_cost_pct)
    if bh_ratio is not None:
        metrics.bh_return = (bh_ratio - 1.0) * 100
        bh_annual = annualized_return(bh_ratio, years)
        metrics.bh_annual_return = bh_annual * 100 if bh_annual is not None else None


def _fill_trades(metrics: PerformanceMetrics, stats: RunningStats):
    metrics.closed_trades = stats.closed_trades
    if not stats.closed_trades:
        return
    metrics.win_rate = stats.wins / stats.closed_trades * 100
    if stats.gross_loss > 0:
        metrics.profit_factor = stats.gross_profit / stats.gross_loss
    elif stats.gross_profit > 0:
        metrics.profit_factor = float("inf")


def calculate_metrics(
    equity_curve: Sequence["EquityPoint"],
    trade_history: Sequence["TradeRecord"] = (),
    init_price: float = math.nan,
    last_price: float = math.nan,
    tx_cost_pct: float = 0.0,
    periods_per_year: float | None = None,
) -> PerformanceMetrics:
    """자산 곡선 전체로 성과 지표를 일괄 계산.

    Args:
        equity_curve: (timestamp, equity) 리스트. 첫 점은 초기 현금 기준점
        trade_history: 거래 기록 (매수+매도 전체)
        init_price: 첫 시그널 가격 (바이앤홀드 기준)
        last_price: 마지막 시그널 가격
        tx_cost_pct: 거래 비용 비율 (바이앤홀드 매수에도 동일 적용)
        periods_per_year: 샤프 연환산 계수. None이면 자산 곡선에서 추정
    """
    metrics = PerformanceMetrics()

    if not equity_curve:
        return metrics

    values = [point.equity for point in equity_curve]
    _fill_returns(metrics, equity_curve[0], equity_curve[-1], init_price, last_price, tx_cost_pct)

    # ─── MDD (Maximum Drawdown) ────────────────────────────────────────────
    metrics.max_drawdown = max_drawdown(values) * 100

    # ─── 샤프 비율 ────────────────────────────────────────────────────────
    if periods_per_year is None:
        periods_per_year = infer_periods_per_year(len(values) - 1, metrics.years)
    metrics.sharpe_ratio = sharpe_ratio(values, periods_per_year)

    # ─── 거래 기반 지표 (매도 거래만 분석) ─────────────────────────────────
    trades = RunningStats()
    for trade in trade_history:
        trades.add_trade(trade)
    _fill_trades(metrics, trades)

    return metrics


def metrics_from_stats(
    stats: RunningStats,
    init_price: float = math.nan,
    last_price: float = math.nan,
    tx_cost_pct: float = 0.0,
    periods_per_year: float | None = None,
) -> PerformanceMetrics:
    """누적 통계로 성과 지표 계산. BasicPortfolio.report()에서 호출됨 (O(1))."""
    metrics = PerformanceMetrics()
    if stats.count == 0:
        return metrics

    _fill_returns(metrics, stats.first, stats.last, init_price, last_price, tx_cost_pct)
    metrics.max_drawdown = stats.max_drawdown * 100
    if periods_per_year is None:
        periods_per_year = infer_periods_per_year(stats.count - 1, metrics.years)
    metrics.sharpe_ratio = stats.sharpe(periods_per_year)
    _fill_trades(metrics, stats)
    return metrics
