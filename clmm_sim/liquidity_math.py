"""
Liquidity Math — token amounts ↔ liquidity on a concentrated range
==================================================================

Prices are token X per unit of token Y (see clmm_sim.models). With
s = sqrt(price), sl = sqrt(lower), su = sqrt(upper):

    below range (s <= sl):  x = 0                 y = L·(1/sl − 1/su)
    above range (s >= su):  x = L·(su − sl)       y = 0
    in range:               x = L·(s − sl)        y = L·(1/s − 1/su)

Sources:
  Uniswap V3 Whitepaper §6.2.3 : https://uniswap.org/whitepaper-v3.pdf
  LiquidityAmounts.sol         : https://github.com/Uniswap/v3-periphery/blob/main/contracts/libraries/LiquidityAmounts.sol
"""

import logging
import math
from decimal import Decimal

from clmm_sim.errors import DegenerateRangeError, InvalidInputError, InvalidPriceError
from clmm_sim.models import LiquidityAmounts, Position, PriceRange
from clmm_sim.tick_math import sqrt_price_x64_to_float, tick_to_sqrt_price_x64

logger = logging.getLogger(__name__)


def _check_sqrt_bounds(sqrt_price: float, sqrt_lower: float, sqrt_upper: float) -> None:
    if sqrt_price <= 0 or sqrt_lower <= 0:
        raise InvalidPriceError("sqrt prices must be positive")
    if sqrt_lower >= sqrt_upper:
        raise DegenerateRangeError(
            f"sqrt_lower must be < sqrt_upper (got {sqrt_lower} >= {sqrt_upper})"
        )


# ── Liquidity → amounts ──────────────────────────────────────────────────


def amounts_from_liquidity(
    sqrt_price: float, sqrt_lower: float, sqrt_upper: float, liquidity: float
) -> LiquidityAmounts:
    """Token amounts held by `liquidity` at the given sqrt price."""
    _check_sqrt_bounds(sqrt_price, sqrt_lower, sqrt_upper)
    if liquidity < 0 or not math.isfinite(liquidity):
        raise InvalidInputError(f"liquidity must be finite and >= 0 (got {liquidity})")

    if sqrt_price <= sqrt_lower:
        return LiquidityAmounts(
            amount_x=0.0,
            amount_y=liquidity * (1 / sqrt_lower - 1 / sqrt_upper),
        )
    if sqrt_price >= sqrt_upper:
        return LiquidityAmounts(
            amount_x=liquidity * (sqrt_upper - sqrt_lower),
            amount_y=0.0,
        )
    return LiquidityAmounts(
        amount_x=liquidity * (sqrt_price - sqrt_lower),
        amount_y=liquidity * (1 / sqrt_price - 1 / sqrt_upper),
    )


# ── Amounts → liquidity ──────────────────────────────────────────────────


def liquidity_from_amounts(
    sqrt_price: float,
    sqrt_lower: float,
    sqrt_upper: float,
    amount_x: float,
    amount_y: float,
) -> float:
    """
    Largest liquidity the given amounts can back at sqrt_price.

    Below the range only token Y counts, above it only token X. Inside the
    range both tokens are needed and the scarcer one caps the position.
    """
    _check_sqrt_bounds(sqrt_price, sqrt_lower, sqrt_upper)

    if sqrt_price <= sqrt_lower:
        liquidity = amount_y / (1 / sqrt_lower - 1 / sqrt_upper)
    elif sqrt_price >= sqrt_upper:
        liquidity = amount_x / (sqrt_upper - sqrt_lower)
    else:
        from_y = amount_y / (1 / sqrt_price - 1 / sqrt_upper)
        from_x = amount_x / (sqrt_price - sqrt_lower)
        liquidity = min(from_x, from_y)

    if liquidity < 0:
        logger.warning(
            "Negative implied liquidity %.6g (amount_x=%s, amount_y=%s); clamped to 0",
            liquidity,
            amount_x,
            amount_y,
        )
        return 0.0
    return liquidity


# ── Fixed-point range bounds ─────────────────────────────────────────────


def amounts_for_ticks(
    sqrt_price_x64: int, tick_lower: int, tick_upper: int, liquidity: float
) -> LiquidityAmounts:
    """amounts_from_liquidity with bounds taken from the tick ladder."""
    return amounts_from_liquidity(
        sqrt_price_x64_to_float(sqrt_price_x64),
        sqrt_price_x64_to_float(tick_to_sqrt_price_x64(tick_lower)),
        sqrt_price_x64_to_float(tick_to_sqrt_price_x64(tick_upper)),
        liquidity,
    )


def liquidity_for_ticks(
    sqrt_price_x64: int,
    tick_lower: int,
    tick_upper: int,
    amount_x: float,
    amount_y: float,
) -> float:
    return liquidity_from_amounts(
        sqrt_price_x64_to_float(sqrt_price_x64),
        sqrt_price_x64_to_float(tick_to_sqrt_price_x64(tick_lower)),
        sqrt_price_x64_to_float(tick_to_sqrt_price_x64(tick_upper)),
        amount_x,
        amount_y,
    )


# ── Positions ────────────────────────────────────────────────────────────


def position_from_amounts(
    price: float,
    price_range: PriceRange,
    amount_x: float,
    amount_y: float,
    decimals_a: int = 0,
    decimals_b: int = 0,
) -> Position:
    """Derive a fixed-liquidity position from a deposit made at `price`."""
    if price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {price})")
    liquidity = liquidity_from_amounts(
        math.sqrt(price),
        price_range.sqrt_lower,
        price_range.sqrt_upper,
        amount_x,
        amount_y,
    )
    return Position(
        liquidity=liquidity,
        price_range=price_range,
        decimals_a=decimals_a,
        decimals_b=decimals_b,
    )


def position_amounts(position: Position, price: float) -> LiquidityAmounts:
    if price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {price})")
    return amounts_from_liquidity(
        math.sqrt(price),
        position.price_range.sqrt_lower,
        position.price_range.sqrt_upper,
        position.liquidity,
    )


def position_value(amounts: LiquidityAmounts, price: float) -> float:
    """Value in token-X units."""
    return amounts.value_at(price)


# ── Raw on-chain units ───────────────────────────────────────────────────


def to_token_units(raw_amount: int, decimals: int) -> float:
    """Raw integer (wei / smallest unit) → human token amount."""
    if decimals < 0:
        raise InvalidInputError("decimals must be non-negative")
    return float(Decimal(raw_amount) / (Decimal(10) ** decimals))


def from_token_units(amount: float, decimals: int) -> int:
    """
    Human token amount → raw integer, truncated toward zero.

    Goes through Decimal(str(amount)) so that e.g. 0.1 with 18 decimals
    becomes exactly 10**17.
    """
    if decimals < 0:
        raise InvalidInputError("decimals must be non-negative")
    return int(Decimal(str(amount)) * (Decimal(10) ** decimals))
