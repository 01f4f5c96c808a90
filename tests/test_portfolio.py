import math

import pytest

from stream_trader.backtest import metrics as metrics_module
from stream_trader.core.types import Side
from stream_trader.data.portfolio import BasicPortfolio


def test_buy_then_sell_round_trip(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    assert portfolio.quantity == 10
    assert portfolio.cash == pytest.approx(0.0)
    assert portfolio.holdings == pytest.approx(1000.0)

    portfolio.update(make_signal(60, Side.SELL, 110.0))
    assert portfolio.quantity == 0
    assert portfolio.cash == pytest.approx(1100.0)
    assert portfolio.profit == pytest.approx(100.0)
    assert portfolio.num_trades == 2
    assert [t.side for t in portfolio.trade_history] == ["buy", "sell"]
    assert portfolio.trade_history[-1].profit == pytest.approx(100.0)


def test_equity_curve_has_anchor_plus_one_point_per_update(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.NONE, 90.0))
    portfolio.update(make_signal(120, Side.SELL, 120.0))

    curve = portfolio.equity_curve
    assert len(curve) == 4
    assert curve[0].equity == 1000.0
    assert curve[-1].equity == pytest.approx(1200.0)
    timestamps = [p.timestamp for p in curve]
    assert timestamps == sorted(timestamps)

    frame = portfolio.equity_frame()
    assert list(frame.columns) == ["timestamp", "equity"]
    assert len(frame) == 4


def test_transaction_costs_reduce_quantity_and_cash(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0, tx_cost_pct=0.01)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    # 100 * 1.01 = 101 per share -> 9 shares
    assert portfolio.quantity == 9
    assert portfolio.cash == pytest.approx(91.0)
    assert portfolio.total_costs == pytest.approx(9.0)

    portfolio.update(make_signal(60, Side.SELL, 100.0))
    assert portfolio.cash == pytest.approx(982.0)
    assert portfolio.total_costs == pytest.approx(18.0)
    assert portfolio.profit == pytest.approx(-18.0)


def test_stop_loss_closes_position_at_signal_price(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0, stop_loss_pct=0.1)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.NONE, 95.0))
    assert portfolio.quantity == 10

    portfolio.update(make_signal(120, Side.NONE, 85.0))
    assert portfolio.quantity == 0
    assert portfolio.num_stop_loss == 1
    assert portfolio.num_trades == 2
    assert portfolio.cash == pytest.approx(850.0)
    assert portfolio.trade_history[-1].reason == "stop_loss"


def test_stop_loss_before_sell_signal_counts_once(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0, stop_loss_pct=0.1)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.SELL, 85.0))
    assert portfolio.num_stop_loss == 1
    assert portfolio.num_trades == 2
    assert portfolio.quantity == 0


def test_take_profit(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0, take_profit_pct=0.2)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.NONE, 119.0))
    assert portfolio.num_take_profit == 0

    portfolio.update(make_signal(120, Side.NONE, 125.0))
    assert portfolio.num_take_profit == 1
    assert portfolio.quantity == 0
    assert portfolio.cash == pytest.approx(1250.0)
    assert portfolio.trade_history[-1].reason == "take_profit"


def test_buy_rule_applies_per_position(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0, stop_loss_pct=0.1)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.SELL, 100.0))
    portfolio.update(make_signal(120, Side.BUY, 50.0))
    assert len(portfolio.positions) == 1
    assert portfolio.positions[0].entry_price == 50.0

    # 50 기준 -10% = 45 이하에서만 손절
    portfolio.update(make_signal(180, Side.NONE, 46.0))
    assert portfolio.num_stop_loss == 0


def test_non_positive_or_nan_price_is_noop(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    for price in (0.0, -5.0, math.nan):
        portfolio.update(make_signal(0, Side.BUY, price))
    assert portfolio.equity_curve == []
    assert portfolio.num_trades == 0
    assert portfolio.cash == 1000.0


def test_sell_without_position_does_not_count(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    portfolio.update(make_signal(0, Side.SELL, 100.0))
    assert portfolio.num_trades == 0
    assert portfolio.cash == 1000.0
    assert len(portfolio.equity_curve) == 2


def test_buy_without_cash_is_skipped(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    portfolio.update(make_signal(0, Side.BUY, 100.0))
    portfolio.update(make_signal(60, Side.BUY, 100.0))
    assert portfolio.num_trades == 1
    assert len(portfolio.positions) == 1

    poor = BasicPortfolio(initial_cash=50.0)
    poor.update(make_signal(0, Side.BUY, 100.0))
    assert poor.num_trades == 0
    assert poor.quantity == 0


def test_invalid_rule_percentages():
    with pytest.raises(ValueError):
        BasicPortfolio(stop_loss_pct=-0.1)
    with pytest.raises(ValueError):
        BasicPortfolio(take_profit_pct=-0.1)
    with pytest.raises(ValueError):
        BasicPortfolio(tx_cost_pct=-0.01)

    disabled = BasicPortfolio(stop_loss_pct=math.nan, take_profit_pct=None)
    assert disabled.stop_loss_pct is None
    assert disabled.take_profit_pct is None


def test_report_snapshot_matches_state(make_signal):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    portfolio.update(make_signal(100, Side.BUY, 100.0))
    portfolio.update(make_signal(200, Side.NONE, 105.0))

    report = portfolio.report()
    assert report.init_time == 100
    assert report.curr_time == 200
    assert report.quantity == 10
    assert report.holdings == pytest.approx(1050.0)
    assert report.valuation == pytest.approx(1050.0)
    assert report.metrics.total_return == pytest.approx(5.0)
    assert report.metrics.bh_return == pytest.approx(5.0)
    # report()는 상태를 바꾸지 않는다
    assert len(portfolio.equity_curve) == 3


def test_round_trip_at_same_price_without_costs(make_signal):
    portfolio = BasicPortfolio(initial_cash=1234.5)
    portfolio.update(make_signal(0, Side.BUY, 37.0))
    portfolio.update(make_signal(60, Side.SELL, 37.0))
    assert portfolio.cash == pytest.approx(1234.5)
    assert portfolio.positions == []
    assert portfolio.total_costs == 0.0


def test_report_uses_running_stats_without_rescanning_curve(make_signal, monkeypatch):
    portfolio = BasicPortfolio(initial_cash=1000.0)
    for ts, side, price in [(0, Side.BUY, 100.0), (60, Side.NONE, 90.0),
                            (120, Side.SELL, 110.0), (180, Side.BUY, 100.0)]:
        portfolio.update(make_signal(ts, side, price))

    assert portfolio.stats.count == len(portfolio.equity_curve)
    assert portfolio.stats.closed_trades == 1

    batch = metrics_module.calculate_metrics(
        portfolio.equity_curve, portfolio.trade_history,
        init_price=portfolio.init_price, last_price=portfolio.last_price,
    )

    def fail(*args, **kwargs):
        raise AssertionError("report()가 자산 곡선 전체를 다시 계산함")

    monkeypatch.setattr(metrics_module, "calculate_metrics", fail)
    monkeypatch.setattr(metrics_module, "max_drawdown", fail)
    monkeypatch.setattr(metrics_module, "sharpe_ratio", fail)

    report = portfolio.report()
    assert report.metrics.total_return == pytest.approx(batch.total_return)
    assert report.metrics.max_drawdown == pytest.approx(batch.max_drawdown)
    assert report.metrics.sharpe_ratio == pytest.approx(batch.sharpe_ratio)
    assert report.metrics.win_rate == pytest.approx(batch.win_rate)
