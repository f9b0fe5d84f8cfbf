"""
CLMM Simulator
==============

Concentrated-liquidity position simulator: tick math, liquidity ↔ amounts,
value-based impermanent loss, fee APY, position health and rebalance
break-even analysis.
"""

import logging

from clmm_sim.central_config import PROJECT_VERSION as __version__
from clmm_sim.errors import (
    CLMMError,
    DegenerateRangeError,
    InvalidInputError,
    InvalidPriceError,
    InvalidRangeError,
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
    liquidity_for_ticks,
    liquidity_from_amounts,
    position_amounts,
    position_from_amounts,
    position_value,
    to_token_units,
)
from clmm_sim.models import (
    APYEstimate,
    CLMMILResult,
    HealthFactors,
    HealthStatus,
    ILCurvePoint,
    ILWarning,
    LiquidityAmounts,
    MiningRewards,
    Position,
    PositionHealth,
    PriceRange,
    RebalanceScenario,
    Recommendation,
    Regime,
    RiskAssessment,
    RiskLevel,
    SimulationResult,
)
from clmm_sim.rebalance import centered_range, evaluate, rank_candidates
from clmm_sim.simulation import assess_risk, break_even_days, run_simulation
from clmm_sim.tick_math import (
    align_tick_to_spacing,
    get_default_tick_range,
    get_tick_spacing,
    price_to_sqrt_price_x64,
    price_to_tick,
    sqrt_price_x64_to_float,
    sqrt_price_x64_to_price,
    sqrt_price_x64_to_tick,
    tick_to_price,
    tick_to_sqrt_price_x64,
)
from clmm_sim.yield_health import (
    capital_efficiency,
    estimate_apy,
    mining_rewards,
    position_health,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())
