import io

from stream_trader.backtest.runner import BacktestRunner
from stream_trader.data.portfolio import BasicPortfolio
from stream_trader.strategies import create_strategy

REPORT_KEYS = [
    "init_time", "curr_time", "init_cash", "curr_cash", "num_trades",
    "num_stop_loss", "num_take_profit", "quantity", "holdings", "valuation",
    "total_costs", "profit", "total_return", "annual_return",
    "buy_and_hold_return", "bh_annual", "max_drawdown", "sharpe",
]


def _parse_line(line: str) -> dict[str, str]:
    tokens = line.split()
    return {k.rstrip(":"): v for k, v in zip(tokens[::2], tokens[1::2])}


def _runner(output):
    strategy = create_strategy("sma_cross", params={"short_period": 1, "long_period": 2})
    return BacktestRunner(strategy, BasicPortfolio(initial_cash=1000.0), output=output)


def test_run_prints_only_final_line_by_default(make_values):
    out = io.StringIO()
    runner = _runner(out)
    report = runner.run(make_values(1, 2, 3, 2, 1, 2, 3))

    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert runner.num_records == 7
    assert runner.num_signals == 3
    assert report.num_trades == 3
    assert report.quantity == 500

    fields = _parse_line(lines[0])
    assert list(fields) == REPORT_KEYS
    assert fields["num_trades"] == "3"
    assert fields["valuation"] == "1000.00"
    assert fields["annual_return"] == "N/A"


def test_verbose_prints_a_line_per_signal(make_values):
    out = io.StringIO()
    _runner(out).run(make_values(1, 2, 3, 2, 1, 2, 3), verbose=True)
    lines = out.getvalue().splitlines()
    assert len(lines) == 4
    assert [_parse_line(l)["num_trades"] for l in lines] == ["1", "2", "3", "3"]


def test_empty_input_still_reports():
    out = io.StringIO()
    runner = _runner(out)
    report = runner.run([])

    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    fields = _parse_line(lines[0])
    assert "buy_and_hold_return" not in fields
    assert fields["init_cash"] == "1000.00"
    assert fields["sharpe"] == "0.0000"
    assert report.metrics.total_return == 0.0


def test_generate_report(make_values):
    runner = _runner(io.StringIO())
    assert "error" in runner.generate_report()

    runner.run(make_values(1, 2, 3, 2))
    result = runner.generate_report()
    assert result["strategy"] == "sma_cross"
    assert result["num_signals"] == 2
    assert [t["side"] for t in result["trades"]] == ["buy", "sell"]
