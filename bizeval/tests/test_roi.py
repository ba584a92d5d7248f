import logging
import math

import pytest

from bizeval.models.profile import FinancialProfile
from bizeval.models.roi import ROIInputs, RiskTier, SensitivitySettings
from bizeval.valuation.errors import InvalidInputError
from bizeval.valuation.roi import calculate_roi, compute_roi, net_present_value, solve_irr


def _profile(revenue: float = 1_000_000) -> FinancialProfile:
    return FinancialProfile(annual_revenue=revenue, annual_profit=revenue * 0.2, asking_price=500_000)


def _inputs(**overrides) -> ROIInputs:
    values = dict(
        purchase_price=500_000,
        investment_period_years=5,
        revenue_growth_rate=0.08,
        profit_margin=0.20,
        exit_multiple=3.0,
    )
    values.update(overrides)
    return ROIInputs(**values)


def test_projection_shape():
    result = compute_roi(_profile(), _inputs())
    assert len(result.yearly_cash_flows) == 5
    assert len(result.cumulative_cash_flows) == 5
    assert result.cumulative_cash_flows[-1] == sum(result.yearly_cash_flows)
    assert result.yearly_cash_flows[0] == pytest.approx(1_000_000 * 1.08 * 0.20)
    assert result.yearly_cash_flows[-1] == pytest.approx(1_000_000 * 1.08 ** 5 * 0.20)


def test_exit_and_totals():
    result = compute_roi(_profile(), _inputs())
    assert result.exit_value == pytest.approx(result.yearly_cash_flows[-1] * 3.0)
    assert result.total_cash_flow == pytest.approx(sum(result.yearly_cash_flows) + result.exit_value)
    assert result.net_profit == pytest.approx(result.total_cash_flow - 500_000)
    assert result.total_roi == pytest.approx(result.net_profit / 500_000)
    assert result.annual_roi == pytest.approx(result.total_roi / 5)


def test_total_investment_includes_extras():
    result = compute_roi(_profile(), _inputs(additional_investment=50_000, working_capital=25_000))
    assert result.total_investment == 575_000


def test_zero_investment_gives_zero_roi():
    result = compute_roi(_profile(), _inputs(purchase_price=0))
    assert result.total_roi == 0.0
    assert result.annual_roi == 0.0
    assert result.payback_period == 0.0
    assert result.payback_achieved


def test_negative_growth_shrinks_flows():
    result = compute_roi(_profile(), _inputs(revenue_growth_rate=-0.10))
    flows = result.yearly_cash_flows
    assert all(a > b for a, b in zip(flows, flows[1:]))


def test_period_must_be_positive():
    with pytest.raises(InvalidInputError) as exc:
        compute_roi(_profile(), _inputs(investment_period_years=0))
    assert exc.value.missing_fields == ["investment_period_years"]


def test_payback_first_year_reaching_investment():
    result = compute_roi(_profile(), _inputs(revenue_growth_rate=0.0))
    # 200k per year against 500k
    assert result.payback_period == 3.0
    assert result.payback_achieved


def test_payback_saturates_at_horizon():
    result = compute_roi(_profile(), _inputs(purchase_price=5_000_000))
    assert result.payback_period == 5.0
    assert not result.payback_achieved
    assert "Investment not recovered within the holding period" in result.risk_factors


def test_irr_simple():
    assert solve_irr(100, [110]) == pytest.approx(0.10, abs=1e-3)


def test_irr_none_without_sign_change(caplog):
    with caplog.at_level(logging.WARNING):
        assert solve_irr(100, [-10, -10]) is None
    assert solve_irr(0, [10]) is None
    assert solve_irr(100, []) is None
    assert any("IRR" in r.getMessage() for r in caplog.records)


def test_single_year_irr_and_npv():
    profile = _profile()
    result = compute_roi(profile, _inputs(
        purchase_price=50_000, investment_period_years=1,
        revenue_growth_rate=0.0, profit_margin=0.10, exit_multiple=0.0,
    ))
    assert result.irr == pytest.approx(1.0, abs=1e-5)
    assert result.npv == pytest.approx(-50_000 + 100_000 / 1.1)
    assert result.discount_rate == 0.10


def test_npv_sign_agrees_with_irr():
    result = compute_roi(_profile(), _inputs())
    assert result.irr is not None
    assert (result.npv > 0) == (result.irr > result.discount_rate)


def test_custom_discount_rate():
    low = compute_roi(_profile(), _inputs(discount_rate=0.05))
    high = compute_roi(_profile(), _inputs(discount_rate=0.20))
    assert low.npv > high.npv
    assert low.irr == pytest.approx(high.irr)


def test_net_present_value():
    assert net_present_value(0.10, 100, [110]) == pytest.approx(0.0)
    assert net_present_value(0.0, 100, [50, 50, 50]) == pytest.approx(50)


def test_long_holding_period_keeps_irr_finite():
    # Discount factors at the IRR bracket edge leave float range past ~160 years
    for years in (170, 300):
        result = compute_roi(_profile(), _inputs(investment_period_years=years))
        assert len(result.yearly_cash_flows) == years
        assert result.irr is not None
        assert result.irr > result.discount_rate
        assert math.isfinite(result.npv)


def test_irr_with_overflowing_bracket_edge():
    flows = [200_000.0] * 200
    irr = solve_irr(500_000, flows)
    assert irr == pytest.approx(0.4, abs=1e-4)


def test_npv_at_total_loss_rate_does_not_raise():
    assert net_present_value(-1.0, 100, [110]) == math.inf
    assert net_present_value(-1.0, 100, [-110]) == -math.inf
    assert net_present_value(-1.0, 100, [0.0]) == -100
    assert net_present_value(-1.5, 100, [110]) == pytest.approx(-100 - 220)


def test_sensitivity_bands():
    result = compute_roi(_profile(), _inputs())
    growth = result.growth_sensitivity
    assert growth.low_input == pytest.approx(0.05)
    assert growth.high_input == pytest.approx(0.11)
    assert growth.low_roi < growth.base_roi < growth.high_roi
    assert growth.base_roi == result.total_roi

    margin = result.margin_sensitivity
    assert margin.low_input == pytest.approx(0.17)
    assert margin.low_roi < margin.base_roi < margin.high_roi

    exit_band = result.exit_multiple_sensitivity
    assert exit_band.low_input == 2.0
    assert exit_band.high_input == 4.0
    assert exit_band.low_roi < exit_band.base_roi < exit_band.high_roi


def test_sensitivity_settings_override():
    settings = SensitivitySettings(growth_delta=0.05, margin_delta=0.01, exit_multiple_delta=0.5)
    result = compute_roi(_profile(), _inputs(), settings)
    assert result.growth_sensitivity.low_input == pytest.approx(0.03)
    assert result.margin_sensitivity.high_input == pytest.approx(0.21)
    assert result.exit_multiple_sensitivity.low_input == 2.5


def test_low_risk_tier():
    result = compute_roi(_profile(), _inputs(
        purchase_price=300_000, revenue_growth_rate=0.0, profit_margin=0.30,
    ))
    assert result.volatility == 0.0
    assert result.payback_period == 1.0
    assert result.risk_tier == RiskTier.LOW
    assert result.risk_factors == ["No significant risk factors identified"]


def test_high_risk_tier():
    result = compute_roi(_profile(), _inputs(purchase_price=5_000_000))
    assert result.total_roi < 0
    assert result.risk_tier == RiskTier.HIGH
    assert "Negative projected returns" in result.risk_factors
    assert "Low projected ROI" in result.risk_factors
    assert result.irr is not None and result.irr < 0


def test_calculate_roi_keyword_form():
    profile = _profile()
    direct = compute_roi(profile, _inputs())
    keyword = calculate_roi(
        profile,
        purchase_price=500_000,
        investment_period_years=5,
        revenue_growth_rate=0.08,
        profit_margin=0.20,
        exit_multiple=3.0,
    )
    assert keyword == direct
