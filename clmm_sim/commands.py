"""
CLMM Simulator — Command Implementations
========================================

All CLI command handlers live here, keeping run.py as a thin argparse
dispatcher. Each public function corresponds to a subcommand
(simulate, curve, rebalance, ticks, info).

Handlers print; they never catch CLMMError themselves. run.py turns those
into a ❌ line and a non-zero exit status.
"""

from __future__ import annotations

import math

from clmm_sim.central_config import MAX_TICK, MIN_TICK, PROJECT_NAME, PROJECT_VERSION, config
from clmm_sim.errors import InvalidInputError
from clmm_sim.impermanent_loss import amplification_factor, generate_curve
from clmm_sim.legal_disclaimers import get_disclaimer
from clmm_sim.models import PriceRange
from clmm_sim.rebalance import centered_range, evaluate
from clmm_sim.simulation import run_simulation
from clmm_sim.tick_math import (
    align_tick_to_spacing,
    get_default_tick_range,
    price_to_sqrt_price_x64,
    price_to_tick,
    tick_to_price,
    tick_to_sqrt_price_x64,
)

_LEVEL_ICONS = {"info": "ℹ️", "warning": "⚠️", "danger": "🚨"}
_RISK_ICONS = {"LOW": "🟢", "MEDIUM": "🟡", "HIGH": "🔴"}


# ── Helpers ──────────────────────────────────────────────────────────────


def resolve_range(
    price: float,
    lower: float | None = None,
    upper: float | None = None,
    range_pct: float | None = None,
    tick_spacing: int | None = None,
) -> PriceRange:
    """Build a range from explicit bounds or ±range_pct around price."""
    if lower is not None and upper is not None:
        if tick_spacing:
            return PriceRange.from_prices(lower, upper, tick_spacing)
        return PriceRange(lower, upper)
    if range_pct is not None:
        return centered_range(price, range_pct, tick_spacing)
    raise InvalidInputError("Give either --lower and --upper, or --range-pct")


def _fmt_days(days: float) -> str:
    return "never" if math.isinf(days) else f"{days:,.1f} days"


def _print_range(price_range: PriceRange) -> None:
    print(f"  📐 Range    : {price_range.price_lower:,.6f} → {price_range.price_upper:,.6f}")
    if price_range.tick_lower is not None:
        print(f"  🔢 Ticks    : [{price_range.tick_lower}, {price_range.tick_upper}]")


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_simulate(
    price: float,
    price_range: PriceRange,
    amount_x: float = 0.0,
    amount_y: float = 0.0,
    fee_rate: float = 0.003,
    volume: float = 0.0,
    tvl: float = 0.0,
) -> None:
    """Full position snapshot: amounts, APY, health, risk and a coarse IL table."""
    result = run_simulation(
        amount_x, amount_y, price, price_range, fee_rate,
        daily_volume=volume, pool_tvl=tvl,
    )

    print(f"\n📊 Position Simulation — price {price:,.6f}")
    print("=" * 55)
    _print_range(price_range)
    print(f"  💧 Liquidity: {result.position.liquidity:,.6f}")
    print(f"  🪙 Token X  : {result.initial_amounts.amount_x:,.6f}")
    print(f"  🪙 Token Y  : {result.initial_amounts.amount_y:,.6f}")
    print(f"  💰 Value    : {result.initial_value:,.4f} (token X units)")
    print()

    apy = result.apy
    print("💸 Fees")
    print(f"  Capital efficiency : {apy.capital_efficiency:,.2f}x")
    print(f"  Daily fees (gross) : {apy.daily_fees:,.6f}")
    print(f"  Daily fees (LP)    : {apy.lp_daily_fees:,.6f}")
    print(f"  Protocol cut       : {apy.protocol_fee:,.6f}")
    print(f"  APY                : {apy.apy_pct:,.2f}%")
    if tvl <= 0:
        print("  (no TVL given — fee figures are zero)")
    print()

    health = result.health
    print(f"❤️ Health: {health.score}/100 ({health.status.value})")
    f = health.factors
    print(
        f"  in-range {f.in_range_score}/30 · IL {f.il_score}/25 · "
        f"fees {f.fee_earning_score}/25 · efficiency {f.capital_efficiency_score}/20"
    )
    print(f"  {health.summary}")
    print()

    risks = result.risks
    print(f"🛡️ Risk: {_RISK_ICONS[risks.overall_risk.value]} {risks.overall_risk.value}")
    print(
        f"  out-of-range {risks.out_of_range_risk.value} · "
        f"volatility {risks.volatility_risk.value} · IL {risks.il_risk.value}"
    )
    for line in risks.warnings:
        print(f"  • {line}")
    for warning in result.warnings:
        print(f"  {_LEVEL_ICONS.get(warning.level, '•')} {warning.message}")
        print(f"     → {warning.recommendation}")
    print()

    move = config.defaults.BREAK_EVEN_REFERENCE_MOVE_PCT
    print(f"⏱️ Fees recover the IL of a +{move:.0f}% move in: {_fmt_days(result.break_even_days)}")
    print()

    print("📉 Impermanent Loss (selected moves)")
    print(f"  {'Move':>8}  {'Price':>14}  {'CLMM IL':>9}  {'V2 IL':>8}  Regime")
    for point in result.il_curve[::5]:
        print(
            f"  {point.price_change_pct:>+7.1f}%  {point.target_price:>14,.6f}  "
            f"{point.il_pct:>8.2f}%  {point.il_reference_pct:>7.2f}%  {point.regime.value}"
        )
    print()
    print(get_disclaimer())


def cmd_curve(
    price: float,
    price_range: PriceRange,
    amount_x: float,
    amount_y: float,
    min_pct: float = config.defaults.CURVE_MIN_PCT,
    max_pct: float = config.defaults.CURVE_MAX_PCT,
    steps: int = config.defaults.CURVE_STEPS,
) -> None:
    """Print the full IL curve."""
    curve = generate_curve(price, price_range, amount_x, amount_y, min_pct, max_pct, steps)
    base = amplification_factor(price_range.price_lower, price_range.price_upper)

    print(f"\n📉 IL Curve — {len(curve)} points, range amplifier {base:.2f}x")
    print("=" * 72)
    _print_range(price_range)
    print(
        f"  {'Move':>8}  {'Price':>14}  {'CLMM IL':>9}  {'V2 IL':>8}  {'Amp':>7}  Regime"
    )
    for point in curve:
        marker = "⚠️" if point.is_out_of_range else "  "
        print(
            f"  {point.price_change_pct:>+7.1f}%  {point.target_price:>14,.6f}  "
            f"{point.il_pct:>8.2f}%  {point.il_reference_pct:>7.2f}%  "
            f"{point.amplification_factor:>6.2f}x  {marker}{point.regime.value}"
        )


def cmd_rebalance(
    price: float,
    old_range: PriceRange,
    new_range: PriceRange,
    value: float,
    volume: float,
    fee_rate: float,
    tvl: float,
    gas_per_tx: float = config.defaults.GAS_COST_PER_TX_USD,
) -> None:
    """Compare the current range with a candidate and print the verdict."""
    scenario = evaluate(price, old_range, new_range, value, volume, fee_rate, tvl, gas_per_tx)
    icon = {
        "recommended": "✅",
        "neutral": "➖",
        "not-recommended": "❌",
    }[scenario.recommendation.value]

    print(f"\n🔄 Rebalance Analysis — price {price:,.6f}")
    print("=" * 55)
    print(f"  Old range  : {old_range.price_lower:,.6f} → {old_range.price_upper:,.6f}")
    print(f"  New range  : {new_range.price_lower:,.6f} → {new_range.price_upper:,.6f}")
    print(f"  Gas (2 tx) : ${scenario.gas_cost_usd:,.4f}")
    print(f"  APY now    : {scenario.current_apy * 100:,.2f}%")
    print(f"  APY new    : {scenario.projected_apy * 100:,.2f}%")
    print(f"  Fee gain   : {scenario.daily_fee_gain:+,.6f} / day")
    print(f"  Break-even : {_fmt_days(scenario.break_even_days)}")
    print()
    print(f"  {icon} {scenario.recommendation.value.upper()}: {scenario.reason}")
    print()
    print(get_disclaimer())


def cmd_ticks(
    price: float | None = None,
    tick: int | None = None,
    tick_spacing: int | None = None,
    range_pct: float = 50,
) -> None:
    """Tick ↔ price conversions, optionally with spacing alignment."""
    if tick is None and price is None:
        raise InvalidInputError("Give --price or --tick")
    if tick is None:
        tick = price_to_tick(price)

    print(f"\n🔢 Tick {tick}")
    print("=" * 55)
    print(f"  Price          : {tick_to_price(tick):.12g}")
    print(f"  sqrtPriceX64   : {tick_to_sqrt_price_x64(tick)}")
    if price is not None:
        print(f"  Input price    : {price:.12g}")
        print(f"  sqrt(input)X64 : {price_to_sqrt_price_x64(price)}")
    if tick_spacing:
        lower = align_tick_to_spacing(tick, tick_spacing)
        upper = align_tick_to_spacing(tick, tick_spacing, round_up=True)
        print(f"  Aligned (s={tick_spacing}) : floor {lower} / ceil {upper}")
        lo, hi = get_default_tick_range(tick, tick_spacing, range_pct)
        print(
            f"  ±{range_pct:g}% range    : [{lo}, {hi}] → "
            f"{tick_to_price(lo):.8g} … {tick_to_price(hi):.8g}"
        )


def cmd_info() -> None:
    """Display system information."""
    print(f"\n📊 {PROJECT_NAME} v{PROJECT_VERSION}")
    print("=" * 55)
    print("🔗 Model      : concentrated liquidity (tick ladder 1.0001^tick)")
    print(f"🔢 Ticks      : [{MIN_TICK}, {MAX_TICK}] — 64.64 fixed-point sqrt prices")
    print(
        f"💸 Fee split  : {config.fees.LP_FEE_SHARE:.0%} LP / "
        f"{config.fees.PROTOCOL_FEE_RATE:.0%} protocol"
    )
    spacings = ", ".join(
        f"{fee:.2%}→{s}" for fee, s in config.fees.FEE_TO_TICK_SPACING.items()
    )
    print(f"📐 Spacing    : {spacings}")
    print()
    print("📁 Modules:")
    print("   run.py                      — CLI entry point")
    print("   clmm_sim/tick_math.py       — tick ↔ price ↔ Q64.64")
    print("   clmm_sim/liquidity_math.py  — liquidity ↔ token amounts")
    print("   clmm_sim/impermanent_loss.py— value-based IL + curves")
    print("   clmm_sim/yield_health.py    — APY, mining rewards, health score")
    print("   clmm_sim/rebalance.py       — rebalance break-even advisor")
    print("   clmm_sim/simulation.py      — full snapshot pipeline")
    print()
    print("🔗 Quick Start:")
    print("   python run.py simulate --price 1 --range-pct 10 --amount-x 500 --amount-y 500 --volume 1e6 --tvl 5e6")
    print("   python run.py curve    --price 1 --lower 0.9 --upper 1.1 --amount-x 0.5 --amount-y 0.5")
    print("   python run.py rebalance --price 1.3 --old-lower 0.9 --old-upper 1.1 --new-range-pct 10 --value 1000")
    print("   python run.py ticks    --price 1.25 --tick-spacing 60")
    print()
    print("📚 References:")
    print("   Uniswap V3 Whitepaper : https://uniswap.org/whitepaper-v3.pdf")
    print("   Cetus CLMM fees       : https://cetus-1.gitbook.io/cetus-docs/clmm/fees")
    print()
    print(get_disclaimer(verbose=True))
