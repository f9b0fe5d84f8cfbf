"""
Test Suite — CLMM Formula Validation
====================================

Tests every formula in the clmm_sim engine against known inputs, verifying
correctness with inverse calculations and hand-computed expected values.

Formula Sources:
  - Uniswap V3 Whitepaper §6.1 (ticks), §6.2 (liquidity)
  - Pintail (2019) — Impermanent Loss
  - Cetus CLMM docs — fee split

Run:  python -m pytest tests/test_math.py -v
"""

import math
import pytest

from clmm_sim.central_config import MAX_TICK, MIN_TICK
from clmm_sim.errors import (
    DegenerateRangeError,
    InvalidInputError,
    InvalidPriceError,
)
from clmm_sim.impermanent_loss import (
    amplification_factor,
    analytical_il,
    generate_curve,
    il_warnings,
    v2_il,
    value_based_il,
)
from clmm_sim.liquidity_math import (
    amounts_for_ticks,
    amounts_from_liquidity,
    from_token_units,
    liquidity_from_amounts,
    position_amounts,
    position_from_amounts,
    to_token_units,
)
from clmm_sim.models import PriceRange, Recommendation, Regime
from clmm_sim.rebalance import centered_range, evaluate, rank_candidates
from clmm_sim.tick_math import (
    Q64,
    align_tick_to_spacing,
    get_default_tick_range,
    get_tick_spacing,
    price_to_sqrt_price_x64,
    price_to_tick,
    sqrt_price_x64_to_price,
    sqrt_price_x64_to_tick,
    tick_to_price,
    tick_to_sqrt_price_x64,
)
from clmm_sim.yield_health import capital_efficiency, estimate_apy


# ── Helpers ──────────────────────────────────────────────────────────────

SAMPLE_TICKS = [MIN_TICK, -200000, -50000, -1000, -1, 0, 1, 777, 1000, 50000, 200000, MAX_TICK]

SL = math.sqrt(0.9)
SU = math.sqrt(1.1)


def expected_il(r: float) -> float:
    """Reference impermanent loss: IL = 2√r/(1+r) - 1 (Pintail formula)."""
    return (2 * math.sqrt(r) / (1 + r) - 1) * 100


# ── Tick ↔ sqrt price (fixed point) ─────────────────────────────────────

class TestFixedPointTicks:
    """sqrt_price_x64 = sqrt(1.0001^tick) · 2^64"""

    def test_tick_zero_is_q64(self):
        assert tick_to_sqrt_price_x64(0) == Q64

    @pytest.mark.parametrize("tick", [1, 100, 1000, -1000, 50000, -50000, 200000, -200000])
    def test_matches_float_formula(self, tick: int):
        fixed = tick_to_sqrt_price_x64(tick) / Q64
        assert fixed == pytest.approx(math.sqrt(1.0001 ** tick), rel=1e-9)

    def test_strictly_increasing_adjacent(self):
        values = [tick_to_sqrt_price_x64(t) for t in range(-300, 301)]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_strictly_increasing_sampled(self):
        values = [tick_to_sqrt_price_x64(t) for t in SAMPLE_TICKS]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_negative_tick_is_inverse(self):
        pos = tick_to_sqrt_price_x64(12345) / Q64
        neg = tick_to_sqrt_price_x64(-12345) / Q64
        assert pos * neg == pytest.approx(1.0, rel=1e-12)

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1, 10**7])
    def test_out_of_bounds_raises(self, tick: int):
        with pytest.raises(InvalidInputError):
            tick_to_sqrt_price_x64(tick)

    @pytest.mark.parametrize("tick", SAMPLE_TICKS)
    def test_sqrt_to_tick_exact_roundtrip(self, tick: int):
        assert sqrt_price_x64_to_tick(tick_to_sqrt_price_x64(tick)) == tick

    @pytest.mark.parametrize("tick", [-50000, -1, 0, 1, 50000])
    def test_sqrt_to_tick_floor_semantics(self, tick: int):
        """Just above a tick's sqrt price → same tick; just below → previous tick."""
        s = tick_to_sqrt_price_x64(tick)
        assert sqrt_price_x64_to_tick(s + 1) == tick
        assert sqrt_price_x64_to_tick(s - 1) == tick - 1

    @pytest.mark.parametrize("bad", [0, -5])
    def test_sqrt_to_tick_non_positive_raises(self, bad: int):
        with pytest.raises(InvalidInputError):
            sqrt_price_x64_to_tick(bad)

    def test_sqrt_to_tick_out_of_range_raises(self):
        with pytest.raises(InvalidInputError):
            sqrt_price_x64_to_tick(tick_to_sqrt_price_x64(MAX_TICK) + 10**20)


# ── Tick ↔ Price (Whitepaper §6.1) ──────────────────────────────────────

class TestTickPrice:
    """p(i) = 1.0001^i  ↔  i = floor(log(p)/log(1.0001))"""

    @pytest.mark.parametrize("tick", [-50000, -1, 0, 1, 777, 50000, 200000])
    def test_roundtrip_within_one_tick(self, tick: int):
        assert abs(price_to_tick(tick_to_price(tick)) - tick) <= 1

    @pytest.mark.parametrize("price", [0.0001, 0.01, 0.5, 1.0, 1.5, 1800.0, 3500.0])
    def test_floor_property(self, price: float):
        tick = price_to_tick(price)
        assert tick_to_price(tick) <= price
        assert tick_to_price(tick + 1) > price

    def test_known_tick_value(self):
        assert price_to_tick(1.0) == 0
        assert tick_to_price(0) == pytest.approx(1.0, abs=1e-12)

    def test_price_to_tick_returns_int(self):
        assert isinstance(price_to_tick(2000), int)

    @pytest.mark.parametrize("price", [0, -100])
    def test_non_positive_price_raises(self, price: float):
        with pytest.raises(InvalidPriceError):
            price_to_tick(price)

    def test_non_positive_price_is_value_error(self):
        with pytest.raises(ValueError):
            price_to_tick(0)

    def test_huge_price_clamped(self):
        assert price_to_tick(1e300) == MAX_TICK

    def test_price_to_sqrt_of_one(self):
        assert price_to_sqrt_price_x64(1.0) == Q64

    def test_decimal_adjusted_roundtrip(self):
        """Human price → raw Q64.64 → human price with 9/6 decimals."""
        raw = price_to_sqrt_price_x64(2.5, 9, 6)
        assert sqrt_price_x64_to_price(raw, 9, 6) == pytest.approx(2.5, rel=1e-9)
        # raw price is 2.5 / 10^3
        assert (raw / Q64) ** 2 == pytest.approx(0.0025, rel=1e-9)

    def test_price_to_sqrt_non_positive_raises(self):
        with pytest.raises(InvalidPriceError):
            price_to_sqrt_price_x64(0)


# ── Tick spacing ─────────────────────────────────────────────────────────

class TestTickSpacing:

    @pytest.mark.parametrize("tick,spacing,round_up,expected", [
        (123, 10, False, 120),
        (123, 10, True, 130),
        (-123, 10, False, -130),
        (-123, 10, True, -120),
        (120, 10, False, 120),
        (120, 10, True, 120),
        (0, 60, True, 0),
        (-1, 60, False, -60),
    ])
    def test_align(self, tick, spacing, round_up, expected):
        assert align_tick_to_spacing(tick, spacing, round_up) == expected

    @pytest.mark.parametrize("tick", [-887, -61, -1, 0, 59, 61, 1000])
    @pytest.mark.parametrize("round_up", [False, True])
    def test_align_idempotent(self, tick, round_up):
        once = align_tick_to_spacing(tick, 60, round_up)
        assert align_tick_to_spacing(once, 60, round_up) == once

    @pytest.mark.parametrize("spacing", [0, -10])
    def test_non_positive_spacing_raises(self, spacing):
        with pytest.raises(InvalidInputError):
            align_tick_to_spacing(100, spacing)

    @pytest.mark.parametrize("fee,spacing", [
        (0.0001, 1), (0.0005, 10), (0.0025, 50), (0.003, 60), (0.01, 200),
    ])
    def test_fee_tier_spacing(self, fee, spacing):
        assert get_tick_spacing(fee) == spacing

    def test_unknown_fee_tier_raises(self):
        with pytest.raises(InvalidInputError):
            get_tick_spacing(0.0042)

    def test_default_range_contains_requested_width(self):
        lower, upper = get_default_tick_range(0, 60, 50)
        assert lower % 60 == 0 and upper % 60 == 0
        assert tick_to_price(lower) <= 0.5
        assert tick_to_price(upper) >= 1.5

    def test_default_range_clamped_to_window(self):
        lower, upper = get_default_tick_range(MAX_TICK - 10, 60, 50)
        assert upper <= MAX_TICK
        assert lower < upper

    @pytest.mark.parametrize("pct", [0, 100, 150])
    def test_default_range_bad_percent(self, pct):
        with pytest.raises(InvalidInputError):
            get_default_tick_range(0, 60, pct)


# ── Liquidity ↔ amounts (Whitepaper §6.2) ───────────────────────────────

class TestAmountsFromLiquidity:
    """Token X is the numeraire; token Y is priced in X."""

    @pytest.mark.parametrize("s", [0.5, 0.9, SL])
    def test_below_range_holds_only_y(self, s):
        amounts = amounts_from_liquidity(s, SL, SU, 1000.0)
        assert amounts.amount_x == 0
        assert amounts.amount_y == pytest.approx(1000.0 * (1 / SL - 1 / SU))

    @pytest.mark.parametrize("s", [SU, 1.1, 3.0])
    def test_above_range_holds_only_x(self, s):
        amounts = amounts_from_liquidity(s, SL, SU, 1000.0)
        assert amounts.amount_y == 0
        assert amounts.amount_x == pytest.approx(1000.0 * (SU - SL))

    def test_in_range_holds_both(self):
        amounts = amounts_from_liquidity(1.0, SL, SU, 1000.0)
        assert amounts.amount_x == pytest.approx(1000.0 * (1 - SL))
        assert amounts.amount_y == pytest.approx(1000.0 * (1 - 1 / SU))

    @pytest.mark.parametrize("edge", [SL, SU])
    def test_continuous_at_boundaries(self, edge):
        at_edge = amounts_from_liquidity(edge, SL, SU, 1000.0)
        for s in (edge * (1 - 1e-10), edge * (1 + 1e-10)):
            near = amounts_from_liquidity(s, SL, SU, 1000.0)
            assert near.amount_x == pytest.approx(at_edge.amount_x, abs=1e-6)
            assert near.amount_y == pytest.approx(at_edge.amount_y, abs=1e-6)

    def test_zero_liquidity_zero_amounts(self):
        amounts = amounts_from_liquidity(1.0, SL, SU, 0.0)
        assert amounts.amount_x == 0 and amounts.amount_y == 0

    def test_degenerate_range_raises(self):
        with pytest.raises(DegenerateRangeError):
            amounts_from_liquidity(1.0, 1.0, 1.0, 10.0)

    def test_negative_liquidity_raises(self):
        with pytest.raises(InvalidInputError):
            amounts_from_liquidity(1.0, SL, SU, -1.0)


class TestLiquidityFromAmounts:

    @pytest.mark.parametrize("s", [0.95, 0.98, 1.0, 1.02, 1.04])
    def test_inverse_in_range(self, s):
        amounts = amounts_from_liquidity(s, SL, SU, 1234.5)
        recovered = liquidity_from_amounts(s, SL, SU, amounts.amount_x, amounts.amount_y)
        assert recovered == pytest.approx(1234.5, rel=1e-9)

    def test_below_range_uses_y(self):
        liquidity = liquidity_from_amounts(0.5, SL, SU, 999.0, 2.0)
        assert liquidity == pytest.approx(2.0 / (1 / SL - 1 / SU))

    def test_above_range_uses_x(self):
        liquidity = liquidity_from_amounts(2.0, SL, SU, 2.0, 999.0)
        assert liquidity == pytest.approx(2.0 / (SU - SL))

    def test_in_range_scarcer_token_caps(self):
        """50/50 split at P=1 on [0.9, 1.1]: token X is the scarcer side."""
        liquidity = liquidity_from_amounts(1.0, SL, SU, 0.5, 0.5)
        assert liquidity == pytest.approx(0.5 / (1 - SL))
        assert liquidity < 0.5 / (1 - 1 / SU)

    def test_negative_implied_liquidity_clamped(self):
        assert liquidity_from_amounts(1.0, SL, SU, -1.0, 1.0) == 0.0

    def test_single_sided_in_range_is_zero(self):
        assert liquidity_from_amounts(1.0, SL, SU, 0.0, 1.0) == 0.0


class TestFixedPointPositions:

    def test_amounts_for_ticks_matches_float_path(self):
        rng = PriceRange.from_ticks(-1000, 1000)
        via_ticks = amounts_for_ticks(tick_to_sqrt_price_x64(100), -1000, 1000, 500.0)
        via_float = amounts_from_liquidity(
            math.sqrt(tick_to_price(100)), rng.sqrt_lower, rng.sqrt_upper, 500.0
        )
        assert via_ticks.amount_x == pytest.approx(via_float.amount_x, rel=1e-9)
        assert via_ticks.amount_y == pytest.approx(via_float.amount_y, rel=1e-9)

    def test_position_roundtrip(self):
        rng = PriceRange(0.9, 1.1)
        position = position_from_amounts(1.0, rng, 0.5, 0.5)
        amounts = position_amounts(position, 1.0)
        assert amounts.amount_x == pytest.approx(0.5)
        assert amounts.amount_y <= 0.5

    def test_token_units(self):
        assert from_token_units(0.1, 18) == 10**17
        assert from_token_units(1.5, 6) == 1_500_000
        assert to_token_units(1_500_000, 6) == pytest.approx(1.5)
        assert to_token_units(10**18, 18) == pytest.approx(1.0)


# ── Impermanent Loss ────────────────────────────────────────────────────

class TestReferenceIL:
    """IL = 2√r / (1+r) - 1, where r = P_current / P_initial"""

    @pytest.mark.parametrize("ratio,expected", [
        (1.0, 0.0),
        (1.5, -2.0204),
        (2.0, -5.7191),
        (0.5, -5.7191),
        (4.0, -20.0),
        (0.25, -20.0),
    ])
    def test_known_v2_values(self, ratio, expected):
        assert v2_il(ratio) == pytest.approx(expected, abs=0.01)

    def test_v2_non_positive_ratio_raises(self):
        with pytest.raises(InvalidPriceError):
            v2_il(0)

    def test_amplification_factor(self):
        """n = √(Pb/Pa) = 2 → 1 / (1 − 1/√2) ≈ 3.414"""
        assert amplification_factor(0.5, 2.0) == pytest.approx(1 / (1 - 2 ** -0.5))

    def test_amplification_at_least_one(self):
        assert amplification_factor(1e-6, 1e6) >= 1.0

    def test_analytical_amplifies_v2(self):
        il = analytical_il(1.21, 0.5, 2.0)
        assert il < 0
        assert il < v2_il(1.21)
        assert il == pytest.approx(v2_il(1.21) * amplification_factor(0.5, 2.0))


class TestValueBasedIL:

    @pytest.mark.parametrize("lower,upper", [(0.9, 1.1), (0.5, 2.0), (0.99, 1.5)])
    def test_zero_at_entry(self, lower, upper):
        result = value_based_il(1.0, 1.0, PriceRange(lower, upper), 0.5, 0.5)
        assert result.il_pct == pytest.approx(0.0, abs=1e-12)

    def test_narrow_range_above_amplifies_loss(self):
        """[0.9, 1.1], 50/50 at P=1, target 1.5 → 100 % token X, loss ≫ V2."""
        result = value_based_il(1.0, 1.5, PriceRange(0.9, 1.1), 0.5, 0.5)
        assert result.regime is Regime.ABOVE_RANGE
        assert result.final_amount_y == 0
        assert result.il_pct < v2_il(1.5)
        assert result.il_pct == pytest.approx(-17.33, abs=0.05)

    def test_below_range_holds_only_y(self):
        result = value_based_il(1.0, 0.5, PriceRange(0.9, 1.1), 0.5, 0.5)
        assert result.regime is Regime.BELOW_RANGE
        assert result.final_amount_x == 0
        assert result.is_out_of_range

    @pytest.mark.parametrize("k", [0.85, 0.9, 0.95, 1.05, 1.1, 1.2])
    def test_matches_analytical_in_centred_range(self, k):
        """Entry at √(Pa·Pb) = 1, balanced deposit: both derivations agree."""
        rng = PriceRange(0.8, 1.25)
        value_based = value_based_il(1.0, k, rng, 1.0, 1.0).il_pct
        assert value_based == pytest.approx(analytical_il(k, 0.8, 1.25), rel=1e-6, abs=1e-9)

    def test_degenerate_deposit_is_zero_il(self):
        result = value_based_il(1.0, 1.3, PriceRange(0.9, 1.1), 0.0, 1.0)
        assert result.degenerate
        assert result.il_pct == 0.0
        assert result.regime is Regime.ABOVE_RANGE

    @pytest.mark.parametrize("entry,target", [(0, 1), (1, 0), (-1, 1)])
    def test_non_positive_price_raises(self, entry, target):
        with pytest.raises(InvalidPriceError):
            value_based_il(entry, target, PriceRange(0.9, 1.1), 0.5, 0.5)


class TestILCurve:

    def test_default_grid_size(self):
        curve = generate_curve(1.0, PriceRange(0.9, 1.1), 0.5, 0.5)
        assert len(curve) == 51
        assert curve[0].price_change_pct == pytest.approx(-80.0)
        assert curve[-1].price_change_pct == pytest.approx(200.0)

    def test_il_never_positive(self):
        curve = generate_curve(1.0, PriceRange(0.9, 1.1), 0.5, 0.5)
        assert all(p.il_pct <= 1e-9 for p in curve)

    def test_idempotent(self):
        rng = PriceRange(0.9, 1.1)
        assert generate_curve(1.0, rng, 0.5, 0.5) == generate_curve(1.0, rng, 0.5, 0.5)

    def test_non_positive_targets_skipped(self):
        curve = generate_curve(1.0, PriceRange(0.9, 1.1), 0.5, 0.5, -150, 50, 4)
        assert [p.price_change_pct for p in curve] == pytest.approx([-50.0, 0.0, 50.0])

    def test_out_of_range_amplification_floor(self):
        rng = PriceRange(0.9, 1.1)
        base = amplification_factor(0.9, 1.1)
        for point in generate_curve(1.0, rng, 0.5, 0.5):
            if point.is_out_of_range:
                assert point.amplification_factor >= 2 * base

    def test_flat_point_uses_base_amplifier(self):
        curve = generate_curve(1.0, PriceRange(0.9, 1.1), 0.5, 0.5, -10, 10, 2)
        middle = curve[1]
        assert middle.il_reference_pct == 0
        assert middle.amplification_factor == pytest.approx(amplification_factor(0.9, 1.1))

    def test_zero_steps_raises(self):
        with pytest.raises(InvalidInputError):
            generate_curve(1.0, PriceRange(0.9, 1.1), 0.5, 0.5, steps=0)


class TestILWarnings:

    def test_out_of_range_is_danger(self):
        warnings = il_warnings(-5.0, Regime.ABOVE_RANGE, 0.5, 10.0)
        assert warnings[0].level == "danger"
        assert "ABOVE" in warnings[0].message

    def test_high_il_without_fees(self):
        warnings = il_warnings(-25.0, Regime.IN_RANGE, 0.5, 0.0)
        assert len(warnings) == 1
        assert warnings[0].level == "danger"
        assert "significant" in warnings[0].recommendation

    def test_moderate_il_recoverable(self):
        warnings = il_warnings(-12.0, Regime.IN_RANGE, 0.5, 365.0)
        assert warnings[0].level == "warning"
        assert "~12 days" in warnings[0].recommendation

    def test_narrow_and_wide(self):
        assert il_warnings(0.0, Regime.IN_RANGE, 0.05, 0.0)[0].level == "warning"
        assert il_warnings(0.0, Regime.IN_RANGE, 1.5, 0.0)[0].level == "info"

    def test_healthy_has_no_warnings(self):
        assert il_warnings(-1.0, Regime.IN_RANGE, 0.5, 20.0) == []


# ── Fee APY ─────────────────────────────────────────────────────────────

class TestEstimateAPY:

    def test_reference_scenario(self):
        """10k volume, 0.30 % fee, 1k position, 1M TVL, 10 % wide range."""
        apy = estimate_apy(10_000, 0.003, 1_000, 1_000_000, 0.1)
        assert apy.capital_efficiency == pytest.approx(10.0)
        assert apy.daily_fees == pytest.approx(10_000 * 0.003 * min(1_000 / 1e6 * 10, 1))
        assert apy.daily_fees == pytest.approx(0.3)
        assert apy.lp_daily_fees == pytest.approx(0.24)
        assert apy.protocol_fee == pytest.approx(0.06)
        assert apy.apy == pytest.approx((1 + 0.24 / 1_000) ** 365 - 1)
        assert apy.apy_pct == pytest.approx(apy.apy * 100)

    @pytest.mark.parametrize("position,tvl", [(0, 1e6), (1000, 0), (-5, 1e6)])
    def test_degenerate_is_all_zero(self, position, tvl):
        apy = estimate_apy(10_000, 0.003, position, tvl, 0.1)
        assert apy.apy == 0
        assert apy.daily_fees == 0
        assert apy.lp_daily_fees == 0
        assert apy.protocol_fee == 0
        assert apy.capital_efficiency == 0

    def test_apy_capped(self):
        apy = estimate_apy(1e12, 0.003, 1_000, 1_000, 0.1)
        assert apy.apy == 1000.0

    def test_effective_share_capped_at_one(self):
        apy = estimate_apy(10_000, 0.003, 1_000, 2_000, 0.1)
        assert apy.daily_fees == pytest.approx(30.0)

    @pytest.mark.parametrize("width,expected", [
        (0.1, 10.0), (1.0, 1.0), (0.001, 100.0), (0.0, 1.0), (-1.0, 1.0),
    ])
    def test_capital_efficiency(self, width, expected):
        assert capital_efficiency(width) == pytest.approx(expected)


# ── Rebalance ───────────────────────────────────────────────────────────

class TestRebalance:

    POOL = dict(position_value_usd=1_000, daily_volume=1_000_000, fee_rate=0.003, pool_tvl=1_000_000)

    @pytest.mark.parametrize("gas", [-5.0, 0.0, 5.0, 1e6])
    def test_back_in_range_always_recommended(self, gas):
        scenario = evaluate(
            1.3, PriceRange(0.9, 1.1), PriceRange(1.2, 1.4),
            gas_cost_per_tx_usd=gas, **self.POOL,
        )
        assert scenario.recommendation is Recommendation.RECOMMENDED
        assert "back in range" in scenario.reason

    def test_new_range_excluding_price(self):
        scenario = evaluate(1.0, PriceRange(0.9, 1.1), PriceRange(1.2, 1.4), **self.POOL)
        assert scenario.recommendation is Recommendation.NOT_RECOMMENDED
        assert "outside the new range" in scenario.reason

    def test_fast_break_even(self):
        scenario = evaluate(1.0, PriceRange(0.5, 1.5), PriceRange(0.95, 1.05), **self.POOL)
        assert scenario.gas_cost_usd == pytest.approx(0.025)
        assert scenario.daily_fee_gain == pytest.approx(21.6)
        assert scenario.break_even_days == pytest.approx(0.025 / 21.6)
        assert scenario.recommendation is Recommendation.RECOMMENDED
        assert scenario.projected_apy > scenario.current_apy

    def test_slow_break_even(self):
        scenario = evaluate(
            1.0, PriceRange(0.5, 1.5), PriceRange(0.95, 1.05),
            gas_cost_per_tx_usd=1_000, **self.POOL,
        )
        assert scenario.break_even_days > 30
        assert scenario.recommendation is Recommendation.NOT_RECOMMENDED
        assert "Not worth it" in scenario.reason

    def test_neutral_break_even(self):
        scenario = evaluate(
            1.0, PriceRange(0.5, 1.5), PriceRange(0.95, 1.05),
            gas_cost_per_tx_usd=162, **self.POOL,
        )
        assert scenario.break_even_days == pytest.approx(15.0)
        assert scenario.recommendation is Recommendation.NEUTRAL

    def test_no_gain_is_infinite(self):
        """Wider new range earns less → never breaks even."""
        scenario = evaluate(1.0, PriceRange(0.9, 1.1), PriceRange(0.9, 1.15), **self.POOL)
        assert scenario.daily_fee_gain < 0
        assert math.isinf(scenario.break_even_days)
        assert scenario.recommendation is Recommendation.NOT_RECOMMENDED

    def test_centered_range(self):
        rng = centered_range(100.0, 10)
        assert rng.price_lower == pytest.approx(90.0)
        assert rng.price_upper == pytest.approx(110.0)

    def test_centered_range_aligned(self):
        rng = centered_range(100.0, 10, tick_spacing=60)
        assert rng.tick_lower % 60 == 0 and rng.tick_upper % 60 == 0
        assert rng.price_lower <= 90.0
        assert rng.price_upper >= 110.0

    def test_rank_candidates_best_first(self):
        candidates = [
            PriceRange(1.2, 1.4),    # excludes price
            PriceRange(0.5, 1.5),    # same as current
            PriceRange(0.95, 1.05),  # narrower → more fees
        ]
        ranked = rank_candidates(1.0, PriceRange(0.5, 1.5), candidates, **self.POOL)
        assert ranked[0].new_range == PriceRange(0.95, 1.05)
        assert ranked[0].recommendation is Recommendation.RECOMMENDED
        assert ranked[-1].recommendation is Recommendation.NOT_RECOMMENDED
