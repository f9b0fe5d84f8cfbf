"""
Yield & Health — fee APY, liquidity mining and a 0-100 position score
=====================================================================

Fee model:
    capital_efficiency = min(1 / range_width, 100)
    effective_share    = min(position / TVL × capital_efficiency, 1)
    daily_fees         = volume × fee_rate × effective_share   (gross)
    lp_daily_fees      = daily_fees × 80 %                     (after protocol cut)
    APY                = (1 + lp_daily_fees / position)^365 − 1

Ref: https://cetus-1.gitbook.io/cetus-docs/clmm/fees
  "Fees are distributed pro-rata to in-range liquidity
   at the time of the swap."

⚠ ESTIMATE ONLY. Real fees depend on the tick distribution of pool liquidity
and on volume staying constant.
"""

import logging
import math

from clmm_sim.central_config import config
from clmm_sim.errors import InvalidPriceError
from clmm_sim.models import (
    APYEstimate,
    HealthFactors,
    HealthStatus,
    MiningRewards,
    PositionHealth,
    PriceRange,
)

logger = logging.getLogger(__name__)

_ZERO_APY = APYEstimate(
    apy=0.0, daily_fees=0.0, lp_daily_fees=0.0, protocol_fee=0.0, capital_efficiency=0.0
)


def capital_efficiency(range_width_ratio: float) -> float:
    """Narrower range → more fees per dollar; 1 when the width is unknown."""
    if range_width_ratio <= 0:
        return 1.0
    return min(1 / range_width_ratio, config.defaults.CAPITAL_EFFICIENCY_CAP)


def _compound_apy(daily_yield: float) -> float:
    days = config.defaults.DAYS_PER_YEAR
    cap = config.defaults.APY_CAP
    if daily_yield <= 0:
        return 0.0
    # (1 + y)^365 overflows a float long before the cap matters
    if days * math.log1p(daily_yield) >= math.log1p(cap):
        return cap
    return (1 + daily_yield) ** days - 1


def estimate_apy(
    daily_volume: float,
    fee_rate: float,
    position_value_usd: float,
    pool_tvl: float,
    range_width_ratio: float,
) -> APYEstimate:
    """
    Fee APY of a position (see module docstring for the formula).

    Unknown TVL or an empty position yields an all-zero estimate rather than
    an error, so callers without pool data still get a usable result.
    """
    if position_value_usd <= 0 or pool_tvl <= 0:
        logger.debug(
            "APY degenerate (position=%s, tvl=%s); returning zeros",
            position_value_usd,
            pool_tvl,
        )
        return _ZERO_APY

    efficiency = capital_efficiency(range_width_ratio)
    effective_share = min(position_value_usd / pool_tvl * efficiency, 1.0)

    total_fees = daily_volume * fee_rate * effective_share
    protocol_fee = total_fees * config.fees.PROTOCOL_FEE_RATE
    lp_daily_fees = total_fees * config.fees.LP_FEE_SHARE

    apy = _compound_apy(lp_daily_fees / position_value_usd)

    return APYEstimate(
        apy=apy,
        daily_fees=total_fees,
        lp_daily_fees=lp_daily_fees,
        protocol_fee=protocol_fee,
        capital_efficiency=efficiency,
    )


# ── Liquidity mining ─────────────────────────────────────────────────────


def mining_rewards(
    position_value_usd: float,
    pool_tvl: float,
    daily_volume: float,
    fee_rate: float,
    current_price: float,
    price_range: PriceRange,
    daily_rewards_pool: float,
    reward_token_price_usd: float = 1.0,
) -> MiningRewards:
    """
    Fee-based liquidity mining allocation.

    Rewards follow the share of fees a position actually generates, so only
    in-range positions earn and idle liquidity does not dilute active LPs.

    Ref: https://cetus-1.gitbook.io/cetus-docs/clmm/liquidity-mining
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")

    is_active = price_range.contains(current_price)
    if not is_active or position_value_usd <= 0 or pool_tvl <= 0:
        return MiningRewards(
            daily_mining_rewards=0.0,
            daily_mining_rewards_usd=0.0,
            fee_contribution_share=0.0,
            total_apr=0.0,
            mining_apr=0.0,
            fee_apr=0.0,
            is_active=is_active,
            effectiveness_score=0.0,
        )

    efficiency = capital_efficiency(price_range.width_ratio(current_price))
    share = min(position_value_usd / pool_tvl * efficiency, 1.0)

    pool_fees = daily_volume * fee_rate
    own_fees = pool_fees * share
    contribution_pct = own_fees / pool_fees * 100 if pool_fees > 0 else 0.0

    daily_rewards = daily_rewards_pool * share
    daily_rewards_usd = daily_rewards * reward_token_price_usd

    days = config.defaults.DAYS_PER_YEAR
    fee_apr = own_fees * config.fees.LP_FEE_SHARE * days / position_value_usd * 100
    mining_apr = daily_rewards_usd * days / position_value_usd * 100

    # Effectiveness: centred in the range (50 pts) + capital efficiency (50 pts)
    to_lower = (current_price - price_range.price_lower) / current_price
    to_upper = (price_range.price_upper - current_price) / current_price
    centredness = 1 - abs(to_lower - to_upper) / 2
    efficiency_points = min(efficiency / 10, 10)
    effectiveness = min(100.0, centredness * 50 + efficiency_points * 5)

    return MiningRewards(
        daily_mining_rewards=daily_rewards,
        daily_mining_rewards_usd=daily_rewards_usd,
        fee_contribution_share=contribution_pct,
        total_apr=fee_apr + mining_apr,
        mining_apr=mining_apr,
        fee_apr=fee_apr,
        is_active=is_active,
        effectiveness_score=effectiveness,
    )


# ── Position health ──────────────────────────────────────────────────────


def _status_for(score: int) -> HealthStatus:
    if score >= 80:
        return HealthStatus.EXCELLENT
    if score >= 60:
        return HealthStatus.GOOD
    if score >= 40:
        return HealthStatus.FAIR
    if score >= 20:
        return HealthStatus.POOR
    return HealthStatus.CRITICAL


def position_health(
    current_price: float,
    price_range: PriceRange,
    il_pct: float,
    fee_apr: float,
    days_held: int = config.defaults.HEALTH_DAYS_HELD,
) -> PositionHealth:
    """
    Score a position 0-100 from four factors.

      in range       0-30  15 base + distance to the nearest edge
      IL             0-25  0 % → 25, −50 % → 0
      fees vs IL     0-25  full marks once fees over days_held cover IL
      efficiency     0-20  2 pts per unit of capital efficiency
    """
    if current_price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {current_price})")

    in_range = price_range.contains(current_price)
    if in_range:
        edge_distance = min(
            (current_price - price_range.price_lower) / current_price,
            (price_range.price_upper - current_price) / current_price,
        )
        in_range_score = min(30.0, 15 + edge_distance * 150)
    else:
        in_range_score = 0.0

    il_score = min(25.0, max(0.0, 25 + il_pct / 2))

    net_return = il_pct + fee_apr / config.defaults.DAYS_PER_YEAR * days_held
    fee_score = 25.0 if net_return >= 0 else max(0.0, 25 + net_return)

    width = price_range.width_ratio(current_price)
    efficiency_score = min(20.0, (1 / width) * 2)

    score = round(in_range_score + il_score + fee_score + efficiency_score)

    if not in_range:
        summary = "Position is out of range and not earning fees. Consider rebalancing."
    elif il_pct < config.defaults.HIGH_IL_PCT:
        summary = "High impermanent loss. Monitor closely and consider rebalancing if IL continues."
    elif fee_apr > abs(il_pct * 12):
        summary = "Position is healthy. Fee earnings should outpace IL over time."
    else:
        summary = "Position is active. Keep monitoring price movements."

    return PositionHealth(
        score=score,
        status=_status_for(score),
        factors=HealthFactors(
            in_range_score=round(in_range_score),
            il_score=round(il_score),
            fee_earning_score=round(fee_score),
            capital_efficiency_score=round(efficiency_score),
        ),
        summary=summary,
    )
