"""
Rebalance Advisor — is moving to a new range worth the gas?
===========================================================

A rebalance closes the position and reopens it on a new range: two
transactions. The advisor compares fee income on the old and new range and
turns the difference into a break-even time for the gas spent.

Decision table (first match wins):
  1. new range excludes the current price → not-recommended
  2. old range was out, new range is in   → recommended
  3. break-even < 7 days                   → recommended
  4. break-even > 30 days                  → not-recommended
  5. otherwise                             → neutral
"""

import logging
import math
from typing import Iterable, List, Optional

from clmm_sim.central_config import config
from clmm_sim.errors import InvalidInputError, InvalidPriceError
from clmm_sim.models import PriceRange, RebalanceScenario, Recommendation
from clmm_sim.yield_health import estimate_apy

logger = logging.getLogger(__name__)

_RECOMMENDATION_RANK = {
    Recommendation.RECOMMENDED: 0,
    Recommendation.NEUTRAL: 1,
    Recommendation.NOT_RECOMMENDED: 2,
}


def evaluate(
    current_price: float,
    old_range: PriceRange,
    new_range: PriceRange,
    position_value_usd: float,
    daily_volume: float,
    fee_rate: float,
    pool_tvl: float,
    gas_cost_per_tx_usd: float = config.defaults.GAS_COST_PER_TX_USD,
) -> RebalanceScenario:
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")

    defaults = config.defaults
    gas_cost = gas_cost_per_tx_usd * defaults.REBALANCE_TX_COUNT

    old_apy = estimate_apy(
        daily_volume, fee_rate, position_value_usd, pool_tvl,
        old_range.width_ratio(current_price),
    )
    new_apy = estimate_apy(
        daily_volume, fee_rate, position_value_usd, pool_tvl,
        new_range.width_ratio(current_price),
    )

    fee_gain = new_apy.lp_daily_fees - old_apy.lp_daily_fees
    if fee_gain > 0:
        break_even = gas_cost / max(fee_gain, defaults.MIN_FEE_DELTA)
    else:
        break_even = math.inf

    new_in_range = new_range.contains(current_price)
    old_in_range = old_range.contains(current_price)

    if not new_in_range:
        recommendation = Recommendation.NOT_RECOMMENDED
        reason = "Current price is outside the new range. Position will not earn fees."
    elif not old_in_range:
        recommendation = Recommendation.RECOMMENDED
        reason = "Rebalancing will bring your position back in range to earn fees."
    elif break_even < defaults.BREAK_EVEN_FAST_DAYS:
        recommendation = Recommendation.RECOMMENDED
        reason = f"Higher APY pays off gas cost in {break_even:.1f} days."
    elif break_even > defaults.BREAK_EVEN_SLOW_DAYS:
        recommendation = Recommendation.NOT_RECOMMENDED
        reason = f"Gas cost takes {break_even:.0f} days to recover. Not worth it."
    else:
        recommendation = Recommendation.NEUTRAL
        reason = f"Break-even in {break_even:.1f} days. Consider your risk tolerance."

    logger.debug(
        "Rebalance [%s, %s] → [%s, %s]: gain/day=%.6f break-even=%s → %s",
        old_range.price_lower,
        old_range.price_upper,
        new_range.price_lower,
        new_range.price_upper,
        fee_gain,
        break_even,
        recommendation.value,
    )

    return RebalanceScenario(
        new_range=new_range,
        gas_cost_usd=gas_cost,
        projected_apy=new_apy.apy,
        break_even_days=break_even,
        recommendation=recommendation,
        reason=reason,
        current_apy=old_apy.apy,
        daily_fee_gain=fee_gain,
    )


def centered_range(
    current_price: float, range_percent: float, tick_spacing: Optional[int] = None
) -> PriceRange:
    """
    ±range_percent around the current price ("auto-centre").

    With a tick spacing the bounds are snapped outward onto the pool grid.
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")
    if not 0 < range_percent < 100:
        raise InvalidInputError(
            f"range_percent must be in (0, 100) (got {range_percent})"
        )
    lower = current_price * (1 - range_percent / 100)
    upper = current_price * (1 + range_percent / 100)
    if tick_spacing is None:
        return PriceRange(lower, upper)
    return PriceRange.from_prices(lower, upper, tick_spacing)


def rank_candidates(
    current_price: float,
    old_range: PriceRange,
    candidates: Iterable[PriceRange],
    position_value_usd: float,
    daily_volume: float,
    fee_rate: float,
    pool_tvl: float,
    gas_cost_per_tx_usd: float = config.defaults.GAS_COST_PER_TX_USD,
) -> List[RebalanceScenario]:
    """Evaluate each candidate; best first (recommendation, then break-even, then APY)."""
    scenarios = [
        evaluate(
            current_price, old_range, candidate, position_value_usd,
            daily_volume, fee_rate, pool_tvl, gas_cost_per_tx_usd,
        )
        for candidate in candidates
    ]
    return sorted(
        scenarios,
        key=lambda s: (
            _RECOMMENDATION_RANK[s.recommendation],
            s.break_even_days,
            -s.projected_apy,
        ),
    )
