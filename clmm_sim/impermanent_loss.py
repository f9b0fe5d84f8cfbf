"""
Impermanent Loss Engine — value-based IL for concentrated ranges
================================================================

The V2 closed form 2√k/(1+k) − 1 does NOT hold for a concentrated range: the
position stops rebalancing once the price leaves [Pa, Pb] and ends up 100 % in
one token. IL is therefore computed from values:

    IL = V_pool / V_hold − 1

    V_hold = initial amounts repriced at the target price
    V_pool = amounts the fixed liquidity holds at the target price

Inside a range whose geometric centre is the entry price the value-based
result matches the closed form IL_v2 / (1 − 1/√n), n = √(Pb/Pa), which is
kept as an independent cross-check.

Sources:
  Uniswap V3 Whitepaper §6.2   : https://uniswap.org/whitepaper-v3.pdf
  IL in concentrated liquidity : https://arxiv.org/abs/2111.09192
"""

import logging
import math
from typing import List

import numpy as np

from clmm_sim.central_config import config
from clmm_sim.errors import (
    CLMMError,
    InvalidInputError,
    InvalidPriceError,
    InvalidRangeError,
)
from clmm_sim.liquidity_math import amounts_from_liquidity, liquidity_from_amounts
from clmm_sim.models import CLMMILResult, ILCurvePoint, ILWarning, PriceRange, Regime

logger = logging.getLogger(__name__)


# ── Reference formulas ───────────────────────────────────────────────────


def v2_il(k: float) -> float:
    """
    Full-range (constant product) IL in percent for price ratio k = P'/P.

    k=2 → −5.72 %, k=4 → −20.0 %, k=1 → 0.
    """
    if k <= 0:
        raise InvalidPriceError(f"Price ratio must be positive (got {k})")
    sqrt_k = math.sqrt(k)
    return (2 * sqrt_k / (1 + k) - 1) * 100


def amplification_factor(price_lower: float, price_upper: float) -> float:
    """How many times worse than V2 a range's IL is, near its centre (>= 1)."""
    if price_lower <= 0 or price_upper <= 0:
        raise InvalidPriceError("Range prices must be positive")
    if price_lower >= price_upper:
        raise InvalidRangeError("price_lower must be < price_upper")
    n = math.sqrt(price_upper / price_lower)
    return max(1.0, 1 / (1 - 1 / math.sqrt(n)))


def analytical_il(k: float, price_lower: float, price_upper: float) -> float:
    """
    Closed-form concentrated IL in percent.

    Valid only while the price stays inside the range and only for an entry
    at the range's geometric centre √(Pa·Pb). Out-of-range prices need
    value_based_il.
    """
    if price_lower <= 0 or price_upper <= 0:
        raise InvalidPriceError("Range prices must be positive")
    if price_lower >= price_upper:
        raise InvalidRangeError("price_lower must be < price_upper")
    n = math.sqrt(price_upper / price_lower)
    return v2_il(k) / (1 - 1 / math.sqrt(n))


# ── Value-based IL ───────────────────────────────────────────────────────


def value_based_il(
    entry_price: float,
    target_price: float,
    price_range: PriceRange,
    amount_x: float,
    amount_y: float,
) -> CLMMILResult:
    """
    IL of a position opened at entry_price, observed at target_price.

    The deposit is first converted to liquidity and then back to the amounts
    that liquidity actually holds, so leftover tokens from an unbalanced
    deposit never distort the hold baseline.
    """
    if entry_price <= 0 or target_price <= 0:
        raise InvalidPriceError(
            f"Prices must be positive (entry={entry_price}, target={target_price})"
        )

    regime = price_range.regime(target_price)
    sqrt_lower = price_range.sqrt_lower
    sqrt_upper = price_range.sqrt_upper
    liquidity = liquidity_from_amounts(
        math.sqrt(entry_price), sqrt_lower, sqrt_upper, amount_x, amount_y
    )

    if liquidity <= 0 or not math.isfinite(liquidity):
        logger.debug(
            "Degenerate liquidity %s for deposit (x=%s, y=%s); IL reported as 0",
            liquidity,
            amount_x,
            amount_y,
        )
        value = amount_y * target_price + amount_x
        return CLMMILResult(
            il_pct=0.0,
            value_hold=value,
            value_pool=value,
            initial_amount_x=amount_x,
            initial_amount_y=amount_y,
            final_amount_x=amount_x,
            final_amount_y=amount_y,
            regime=regime,
            liquidity=0.0,
            degenerate=True,
        )

    initial = amounts_from_liquidity(
        math.sqrt(entry_price), sqrt_lower, sqrt_upper, liquidity
    )
    final = amounts_from_liquidity(
        math.sqrt(target_price), sqrt_lower, sqrt_upper, liquidity
    )

    value_hold = initial.value_at(target_price)
    value_pool = final.value_at(target_price)
    il_pct = (value_pool / value_hold - 1) * 100 if value_hold > 0 else 0.0

    return CLMMILResult(
        il_pct=il_pct,
        value_hold=value_hold,
        value_pool=value_pool,
        initial_amount_x=initial.amount_x,
        initial_amount_y=initial.amount_y,
        final_amount_x=final.amount_x,
        final_amount_y=final.amount_y,
        regime=regime,
        liquidity=liquidity,
    )


# ── IL curve ─────────────────────────────────────────────────────────────


def generate_curve(
    current_price: float,
    price_range: PriceRange,
    amount_x: float,
    amount_y: float,
    min_pct: float = config.defaults.CURVE_MIN_PCT,
    max_pct: float = config.defaults.CURVE_MAX_PCT,
    steps: int = config.defaults.CURVE_STEPS,
) -> List[ILCurvePoint]:
    """
    IL across a grid of price moves, with the V2 IL at each point for comparison.

    The grid has steps + 1 samples from min_pct to max_pct inclusive. Moves
    that would make the price non-positive are skipped, as is any single
    point that fails; the rest of the curve is still returned.
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")
    if steps < 1:
        raise InvalidInputError(f"steps must be >= 1 (got {steps})")
    if min_pct > max_pct:
        raise InvalidInputError(f"min_pct must be <= max_pct (got {min_pct} > {max_pct})")

    base_amplification = amplification_factor(
        price_range.price_lower, price_range.price_upper
    )
    curve = []

    for pct in np.linspace(min_pct, max_pct, steps + 1):
        pct = float(pct)
        target_price = current_price * (1 + pct / 100)
        if target_price <= 0:
            continue

        try:
            result = value_based_il(
                current_price, target_price, price_range, amount_x, amount_y
            )
            il_reference = v2_il(target_price / current_price)
        except CLMMError as exc:
            logger.debug("Skipping curve point %.2f%%: %s", pct, exc)
            continue

        amplification = base_amplification
        if il_reference != 0:
            amplification = abs(result.il_pct / il_reference)
        if result.is_out_of_range:
            amplification = max(amplification, base_amplification * 2)

        curve.append(
            ILCurvePoint(
                price_change_pct=pct,
                target_price=target_price,
                il_pct=result.il_pct,
                il_reference_pct=il_reference,
                value_hold=result.value_hold,
                value_pool=result.value_pool,
                regime=result.regime,
                amplification_factor=amplification,
            )
        )

    return curve


# ── Warnings ─────────────────────────────────────────────────────────────


def il_warnings(
    il_pct: float, regime: Regime, range_width: float, fee_apr: float
) -> List[ILWarning]:
    """
    Human-readable warnings for a position.

    Args:
        il_pct: current IL in percent (negative = loss)
        regime: where the price sits relative to the range
        range_width: (upper − lower) / current_price
        fee_apr: fee APR in percent
    """
    warnings = []

    if regime is Regime.BELOW_RANGE:
        warnings.append(
            ILWarning(
                level="danger",
                message="⚠️ Price is BELOW your range. Position holds only token Y and earns NO fees.",
                recommendation="Consider rebalancing to a new range around the current price to resume earning fees.",
            )
        )
    elif regime is Regime.ABOVE_RANGE:
        warnings.append(
            ILWarning(
                level="danger",
                message="⚠️ Price is ABOVE your range. Position holds only token X and earns NO fees.",
                recommendation="Consider rebalancing to a new range around the current price to resume earning fees.",
            )
        )

    if il_pct < -10:
        recovery_days = abs(il_pct) / (fee_apr / 365) if fee_apr > 0 else math.inf
        if recovery_days < 30:
            recommendation = f"Fees may recover IL in ~{math.ceil(recovery_days)} days if price stays in range."
        else:
            recommendation = "IL is significant. Consider if potential fees justify the risk."
        warnings.append(
            ILWarning(
                level="danger" if il_pct < config.defaults.HIGH_IL_PCT else "warning",
                message=f"📉 Impermanent Loss: {il_pct:.2f}%.",
                recommendation=recommendation,
            )
        )

    if range_width < 0.1:
        warnings.append(
            ILWarning(
                level="warning",
                message="⚡ Very narrow range (<10%). High capital efficiency but high IL risk.",
                recommendation="Price movements of just 5% could push you out of range. Monitor frequently.",
            )
        )

    if range_width > 1:
        warnings.append(
            ILWarning(
                level="info",
                message="📊 Wide range (>100%). Lower IL risk but also lower fee APR.",
                recommendation="Consider narrowing range for higher returns if you can monitor actively.",
            )
        )

    return warnings
