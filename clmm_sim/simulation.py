"""
Simulation Pipeline — one call, full position snapshot
======================================================

    deposit → liquidity → IL curve → APY → health → warnings → risk → break-even

Everything is evaluated at the moment the position is opened: IL is measured
from the current price, and the break-even estimate asks how many days of fees
would recover the IL of a +20 % move.
"""

import logging
from typing import Tuple

from clmm_sim.central_config import config
from clmm_sim.errors import InvalidInputError, InvalidPriceError
from clmm_sim.impermanent_loss import generate_curve, il_warnings, value_based_il
from clmm_sim.liquidity_math import position_amounts, position_from_amounts
from clmm_sim.models import (
    LiquidityAmounts,
    PriceRange,
    RiskAssessment,
    RiskLevel,
    SimulationResult,
)
from clmm_sim.yield_health import estimate_apy, position_health

logger = logging.getLogger(__name__)

DEFAULT_GRID: Tuple[float, float, int] = (
    config.defaults.CURVE_MIN_PCT,
    config.defaults.CURVE_MAX_PCT,
    config.defaults.CURVE_STEPS,
)

_RISK_SCORES = {RiskLevel.LOW: 1, RiskLevel.MEDIUM: 2, RiskLevel.HIGH: 3}


def break_even_days(il_usd: float, daily_fees: float) -> float:
    """Days of fee income needed to offset an IL amount (inf without fees)."""
    if daily_fees <= 0:
        return float("inf")
    return abs(il_usd) / daily_fees


def assess_risk(current_price: float, price_range: PriceRange) -> RiskAssessment:
    """
    Grade a range LOW / MEDIUM / HIGH on three axes.

      out of range  distance from price to the nearest edge
      volatility    range width relative to price
      IL            concentration (1 / width)

    Overall risk is the average of the three scores.
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")

    warnings = []
    to_lower = (current_price - price_range.price_lower) / current_price
    to_upper = (price_range.price_upper - current_price) / current_price
    min_distance = min(to_lower, to_upper)

    if min_distance < 0.1:
        out_of_range_risk = RiskLevel.HIGH
        warnings.append("Price is very close to range boundary. High risk of going out of range.")
    elif min_distance < 0.25:
        out_of_range_risk = RiskLevel.MEDIUM
        warnings.append("Price is moderately close to range boundary.")
    else:
        out_of_range_risk = RiskLevel.LOW

    width = price_range.width_ratio(current_price)
    if width < 0.2:
        volatility_risk = RiskLevel.HIGH
        warnings.append("Narrow range increases impermanent loss risk during volatility.")
    elif width < 0.5:
        volatility_risk = RiskLevel.MEDIUM
    else:
        volatility_risk = RiskLevel.LOW

    concentration = 1 / width
    if concentration > 5:
        il_risk = RiskLevel.HIGH
        warnings.append("High concentration means higher IL if price moves significantly.")
    elif concentration > 2:
        il_risk = RiskLevel.MEDIUM
    else:
        il_risk = RiskLevel.LOW

    average = (
        _RISK_SCORES[out_of_range_risk] + _RISK_SCORES[volatility_risk] + _RISK_SCORES[il_risk]
    ) / 3
    if average > 2.3:
        overall = RiskLevel.HIGH
    elif average > 1.6:
        overall = RiskLevel.MEDIUM
    else:
        overall = RiskLevel.LOW

    return RiskAssessment(
        out_of_range_risk=out_of_range_risk,
        volatility_risk=volatility_risk,
        il_risk=il_risk,
        overall_risk=overall,
        warnings=tuple(warnings),
    )


def run_simulation(
    amount_x: float,
    amount_y: float,
    current_price: float,
    price_range: PriceRange,
    fee_rate: float,
    daily_volume: float = 0.0,
    pool_tvl: float = 0.0,
    curve_grid: Tuple[float, float, int] = DEFAULT_GRID,
    days_held: int = config.defaults.HEALTH_DAYS_HELD,
) -> SimulationResult:
    """
    Full snapshot of a deposit of (amount_x, amount_y) at current_price.

    Values are in token-X units. Unknown volume/TVL (0) degrade the fee
    outputs to zero instead of failing.
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")
    if amount_x <= 0 and amount_y <= 0:
        raise InvalidInputError("At least one amount must be positive")
    amount_x = max(0.0, amount_x)
    amount_y = max(0.0, amount_y)

    position = position_from_amounts(current_price, price_range, amount_x, amount_y)
    if position.liquidity > 0:
        initial_amounts = position_amounts(position, current_price)
    else:
        logger.warning(
            "Deposit (x=%s, y=%s) backs no liquidity at price %s in [%s, %s]",
            amount_x,
            amount_y,
            current_price,
            price_range.price_lower,
            price_range.price_upper,
        )
        initial_amounts = LiquidityAmounts(amount_x=amount_x, amount_y=amount_y)
    initial_value = amount_y * current_price + amount_x

    min_pct, max_pct, steps = curve_grid
    curve = generate_curve(
        current_price, price_range, amount_x, amount_y, min_pct, max_pct, steps
    )

    width = price_range.width_ratio(current_price)
    apy = estimate_apy(daily_volume, fee_rate, initial_value, pool_tvl, width)
    fee_apr = (
        apy.lp_daily_fees * config.defaults.DAYS_PER_YEAR / initial_value * 100
        if initial_value > 0
        else 0.0
    )

    current = value_based_il(current_price, current_price, price_range, amount_x, amount_y)
    health = position_health(current_price, price_range, current.il_pct, fee_apr, days_held)
    warnings = il_warnings(current.il_pct, current.regime, width, fee_apr)
    risks = assess_risk(current_price, price_range)

    move = config.defaults.BREAK_EVEN_REFERENCE_MOVE_PCT
    reference = value_based_il(
        current_price, current_price * (1 + move / 100), price_range, amount_x, amount_y
    )
    reference_il_usd = abs(reference.il_pct / 100 * initial_value)
    days = break_even_days(reference_il_usd, apy.lp_daily_fees)

    logger.debug(
        "Simulation: L=%.6g value=%.4f apy=%.4f health=%d points=%d",
        position.liquidity,
        initial_value,
        apy.apy,
        health.score,
        len(curve),
    )

    return SimulationResult(
        position=position,
        initial_amounts=initial_amounts,
        initial_value=initial_value,
        il_curve=tuple(curve),
        apy=apy,
        health=health,
        warnings=tuple(warnings),
        risks=risks,
        break_even_days=days,
    )
