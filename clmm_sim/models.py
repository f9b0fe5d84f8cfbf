"""
Value Types — ranges, positions and simulation results
======================================================

Every entity is a frozen dataclass created fresh per simulation call.

Token convention (applies to every module in the package):
  - Prices are quoted as units of token X per ONE unit of token Y.
  - Token X is the numeraire: values are expressed in X units.
  - Token Y is the priced asset: its value moves with the price.
  - BELOW_RANGE → the position holds only token Y (amount_x == 0)
  - ABOVE_RANGE → the position holds only token X (amount_y == 0)
  - IN_RANGE    → a mixture on the constant-liquidity curve

With this assignment the amount formulas are continuous at both range
boundaries and a position that drifts out of range always underperforms
holding, which is what impermanent loss measures.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from clmm_sim.central_config import MAX_TICK
from clmm_sim.errors import InvalidInputError, InvalidPriceError, InvalidRangeError
from clmm_sim.tick_math import (
    align_tick_to_spacing,
    price_to_tick,
    sqrt_price_x64_to_float,
    tick_to_price,
    tick_to_sqrt_price_x64,
)


# ── Enumerations ─────────────────────────────────────────────────────────


class Regime(str, Enum):
    """Where the price sits relative to a range."""

    BELOW_RANGE = "below"
    IN_RANGE = "in-range"
    ABOVE_RANGE = "above"


class Recommendation(str, Enum):
    RECOMMENDED = "recommended"
    NEUTRAL = "neutral"
    NOT_RECOMMENDED = "not-recommended"


class HealthStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ── Price Range ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PriceRange:
    """
    A liquidity range [price_lower, price_upper].

    Built either from raw prices or from aligned ticks. When ticks are
    present the sqrt bounds come from the 64.64 fixed-point ladder instead of
    a floating-point sqrt, so repeated conversions do not drift.
    """

    price_lower: float
    price_upper: float
    tick_lower: Optional[int] = None
    tick_upper: Optional[int] = None

    def __post_init__(self):
        if self.price_lower <= 0 or self.price_upper <= 0:
            raise InvalidPriceError(
                f"Range prices must be positive (got {self.price_lower}, {self.price_upper})"
            )
        if self.price_lower >= self.price_upper:
            raise InvalidRangeError(
                f"price_lower must be < price_upper (got {self.price_lower} >= {self.price_upper})"
            )
        if (self.tick_lower is None) != (self.tick_upper is None):
            raise InvalidInputError("tick_lower and tick_upper must be given together")
        if self.tick_lower is not None and self.tick_lower >= self.tick_upper:
            raise InvalidRangeError(
                f"tick_lower must be < tick_upper (got {self.tick_lower} >= {self.tick_upper})"
            )

    @classmethod
    def from_ticks(cls, tick_lower: int, tick_upper: int) -> "PriceRange":
        if tick_lower >= tick_upper:
            raise InvalidRangeError(
                f"tick_lower must be < tick_upper (got {tick_lower} >= {tick_upper})"
            )
        return cls(
            price_lower=tick_to_price(tick_lower),
            price_upper=tick_to_price(tick_upper),
            tick_lower=tick_lower,
            tick_upper=tick_upper,
        )

    @classmethod
    def from_prices(
        cls, price_lower: float, price_upper: float, tick_spacing: int
    ) -> "PriceRange":
        """
        Snap a price range onto the pool's tick grid.

        The lower bound is floored and the upper bound ceiled, so the aligned
        range always contains the requested one.
        """
        if price_lower >= price_upper:
            raise InvalidRangeError(
                f"price_lower must be < price_upper (got {price_lower} >= {price_upper})"
            )
        tick_lower = align_tick_to_spacing(
            price_to_tick(price_lower), tick_spacing, round_up=False
        )
        upper_floor = price_to_tick(price_upper)
        if upper_floor < MAX_TICK and tick_to_price(upper_floor) < price_upper:
            upper_floor += 1
        tick_upper = align_tick_to_spacing(upper_floor, tick_spacing, round_up=True)
        if tick_upper <= tick_lower:
            tick_upper = tick_lower + tick_spacing
        return cls.from_ticks(tick_lower, tick_upper)

    @property
    def sqrt_lower(self) -> float:
        if self.tick_lower is not None:
            return sqrt_price_x64_to_float(tick_to_sqrt_price_x64(self.tick_lower))
        return math.sqrt(self.price_lower)

    @property
    def sqrt_upper(self) -> float:
        if self.tick_upper is not None:
            return sqrt_price_x64_to_float(tick_to_sqrt_price_x64(self.tick_upper))
        return math.sqrt(self.price_upper)

    def regime(self, price: float) -> Regime:
        if price < self.price_lower:
            return Regime.BELOW_RANGE
        if price > self.price_upper:
            return Regime.ABOVE_RANGE
        return Regime.IN_RANGE

    def contains(self, price: float) -> bool:
        return self.price_lower <= price <= self.price_upper

    def width_ratio(self, current_price: float) -> float:
        """(price_upper − price_lower) / current_price — "a 20% wide range" → 0.2."""
        if current_price <= 0:
            raise InvalidPriceError("current_price must be positive")
        return (self.price_upper - self.price_lower) / current_price


# ── Position ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Position:
    """
    A single CLMM position.

    Liquidity is derived once from a reference price and a pair of token
    amounts and then held fixed while the price moves. Decimals are only
    used to scale raw on-chain integers into token units.
    """

    liquidity: float
    price_range: PriceRange
    decimals_a: int = 0
    decimals_b: int = 0

    def __post_init__(self):
        if self.liquidity < 0 or not math.isfinite(self.liquidity):
            raise InvalidInputError(f"liquidity must be finite and >= 0 (got {self.liquidity})")
        if self.decimals_a < 0 or self.decimals_b < 0:
            raise InvalidInputError("token decimals must be non-negative")

    def regime_at(self, price: float) -> Regime:
        return self.price_range.regime(price)


@dataclass(frozen=True)
class LiquidityAmounts:
    """Token composition of a position at one price (token units)."""

    amount_x: float
    amount_y: float

    def value_at(self, price: float) -> float:
        """Value in token-X units: amount_y · price + amount_x."""
        return self.amount_y * price + self.amount_x


# ── Impermanent Loss ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class CLMMILResult:
    """Value-based IL of one position between an entry and a target price."""

    il_pct: float
    value_hold: float
    value_pool: float
    initial_amount_x: float
    initial_amount_y: float
    final_amount_x: float
    final_amount_y: float
    regime: Regime
    liquidity: float
    degenerate: bool = False  # liquidity could not be derived → IL forced to 0

    @property
    def is_out_of_range(self) -> bool:
        return self.regime is not Regime.IN_RANGE


@dataclass(frozen=True)
class ILCurvePoint:
    price_change_pct: float
    target_price: float
    il_pct: float
    il_reference_pct: float  # full-range (V2) IL at the same price ratio
    value_hold: float
    value_pool: float
    regime: Regime
    amplification_factor: float

    @property
    def is_out_of_range(self) -> bool:
        return self.regime is not Regime.IN_RANGE


@dataclass(frozen=True)
class ILWarning:
    level: str  # "info" | "warning" | "danger"
    message: str
    recommendation: str


# ── Yield & Health ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class APYEstimate:
    """
    Fee yield of a position.

    daily_fees is the gross swap-fee income attributed to the position;
    lp_daily_fees is what the LP keeps after the protocol cut. apy is a
    fraction (0.25 = 25 %) compounded daily from lp_daily_fees.
    """

    apy: float
    daily_fees: float
    lp_daily_fees: float
    protocol_fee: float
    capital_efficiency: float

    @property
    def apy_pct(self) -> float:
        return self.apy * 100

    @property
    def yearly_fees(self) -> float:
        return self.lp_daily_fees * 365


@dataclass(frozen=True)
class MiningRewards:
    daily_mining_rewards: float  # reward-token units per day
    daily_mining_rewards_usd: float
    fee_contribution_share: float  # % of pool fees generated by the position
    total_apr: float  # percent
    mining_apr: float  # percent
    fee_apr: float  # percent
    is_active: bool
    effectiveness_score: float  # 0-100


@dataclass(frozen=True)
class HealthFactors:
    in_range_score: int  # 0-30
    il_score: int  # 0-25
    fee_earning_score: int  # 0-25
    capital_efficiency_score: int  # 0-20


@dataclass(frozen=True)
class PositionHealth:
    score: int  # 0-100
    status: HealthStatus
    factors: HealthFactors
    summary: str


@dataclass(frozen=True)
class RiskAssessment:
    out_of_range_risk: RiskLevel
    volatility_risk: RiskLevel
    il_risk: RiskLevel
    overall_risk: RiskLevel
    warnings: Tuple[str, ...] = ()


# ── Rebalance ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RebalanceScenario:
    new_range: PriceRange
    gas_cost_usd: float
    projected_apy: float  # fraction, same units as APYEstimate.apy
    break_even_days: float  # math.inf when the new range earns no more
    recommendation: Recommendation
    reason: str
    current_apy: float = 0.0
    daily_fee_gain: float = 0.0


# ── Snapshot ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SimulationResult:
    """Everything one simulation request produces."""

    position: Position
    initial_amounts: LiquidityAmounts
    initial_value: float
    il_curve: Tuple[ILCurvePoint, ...]
    apy: APYEstimate
    health: PositionHealth
    warnings: Tuple[ILWarning, ...]
    risks: RiskAssessment
    break_even_days: float
