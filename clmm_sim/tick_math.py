"""
Tick Math — 64.64 fixed-point price ladder
==========================================

Converts between tick indices, prices and Q64.64 sqrt prices.

    price(tick)       = 1.0001 ** tick
    sqrt_price_x64    = sqrt(1.0001 ** tick) * 2**64

Ticks are bounded to [MIN_TICK, MAX_TICK]; outside that window the sqrt price
no longer fits the 64.64 encoding.

Sources:
  Uniswap V3 Whitepaper §6.1 (ticks)    : https://uniswap.org/whitepaper-v3.pdf
  Cetus CLMM tick math                  : https://cetus-1.gitbook.io/cetus-developer-docs
"""

import logging
import math
from decimal import Decimal, localcontext
from typing import Tuple

from clmm_sim.central_config import MAX_TICK, MIN_TICK, TICK_BASE, config
from clmm_sim.errors import InvalidInputError, InvalidPriceError

logger = logging.getLogger(__name__)

Q64 = 1 << 64
Q128 = 1 << 128

_LN_TICK_BASE = math.log(TICK_BASE)
_TICK_BITS = MAX_TICK.bit_length()  # 19 → bits 0..18


def _build_bit_table() -> Tuple[int, ...]:
    """sqrt(1.0001 ** 2**i) * 2**64 for every bit a valid tick can set."""
    with localcontext() as ctx:
        ctx.prec = 80
        base = Decimal("1.0001")
        return tuple(
            int((base ** (1 << i)).sqrt() * Q64) for i in range(_TICK_BITS)
        )


_SQRT_RATIO_BITS = _build_bit_table()


def _check_tick(tick: int) -> None:
    if not MIN_TICK <= tick <= MAX_TICK:
        raise InvalidInputError(
            f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]"
        )


# ── Tick ↔ sqrt price (fixed point) ──────────────────────────────────────


def tick_to_sqrt_price_x64(tick: int) -> int:
    """
    sqrt(1.0001 ** tick) as a Q64.64 integer.

    Multiplies one pre-computed constant per set bit of |tick| and shifts back
    down by 64 after each step. Negative ticks invert the positive result.
    """
    _check_tick(tick)
    abs_tick = abs(tick)
    ratio = Q64
    for bit, constant in enumerate(_SQRT_RATIO_BITS):
        if abs_tick & (1 << bit):
            ratio = (ratio * constant) >> 64
    if tick < 0:
        ratio = Q128 // ratio
    return ratio


MIN_SQRT_PRICE_X64 = tick_to_sqrt_price_x64(MIN_TICK)
MAX_SQRT_PRICE_X64 = tick_to_sqrt_price_x64(MAX_TICK)


def sqrt_price_x64_to_tick(sqrt_price_x64: int) -> int:
    """
    Greatest tick whose fixed-point sqrt price does not exceed the input.

    A float logarithm gives the estimate; the integer ladder then walks it by
    single ticks until tick_to_sqrt_price_x64(t) <= input < ..(t + 1).
    """
    if sqrt_price_x64 <= 0:
        raise InvalidInputError("sqrt price must be positive")
    if not MIN_SQRT_PRICE_X64 <= sqrt_price_x64 <= MAX_SQRT_PRICE_X64:
        raise InvalidInputError(
            f"sqrt price {sqrt_price_x64} outside the representable tick range"
        )

    ln_sqrt = math.log(sqrt_price_x64) - 64 * math.log(2)
    tick = math.floor(2 * ln_sqrt / _LN_TICK_BASE)
    tick = max(MIN_TICK, min(MAX_TICK, tick))

    while tick < MAX_TICK and tick_to_sqrt_price_x64(tick + 1) <= sqrt_price_x64:
        tick += 1
    while tick > MIN_TICK and tick_to_sqrt_price_x64(tick) > sqrt_price_x64:
        tick -= 1
    return tick


def sqrt_price_x64_to_float(sqrt_price_x64: int) -> float:
    return sqrt_price_x64 / Q64


# ── Tick ↔ price ─────────────────────────────────────────────────────────


def tick_to_price(tick: int) -> float:
    _check_tick(tick)
    return TICK_BASE ** tick


def price_to_tick(price: float) -> int:
    """Greatest tick t with 1.0001**t <= price, clamped to the tick bounds."""
    if price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {price})")
    tick = math.floor(math.log(price) / _LN_TICK_BASE)
    tick = max(MIN_TICK, min(MAX_TICK, tick))
    if tick > MIN_TICK and TICK_BASE ** tick > price:
        tick -= 1
    elif tick < MAX_TICK and TICK_BASE ** (tick + 1) <= price:
        tick += 1
    return tick


def price_to_sqrt_price_x64(
    price: float, decimals_a: int = 0, decimals_b: int = 0
) -> int:
    """
    Human price → Q64.64 sqrt price.

    The on-chain price is expressed in raw integer units, so a human price is
    first divided by 10**(decimals_a - decimals_b).
    """
    if price <= 0:
        raise InvalidPriceError(f"Price must be positive (got {price})")
    with localcontext() as ctx:
        ctx.prec = 60
        adjusted = Decimal(repr(price)) / (Decimal(10) ** (decimals_a - decimals_b))
        return int(adjusted.sqrt() * Q64)


def sqrt_price_x64_to_price(
    sqrt_price_x64: int, decimals_a: int = 0, decimals_b: int = 0
) -> float:
    """Q64.64 sqrt price → human price (inverse of price_to_sqrt_price_x64)."""
    if sqrt_price_x64 <= 0:
        raise InvalidInputError("sqrt price must be positive")
    sqrt_price = sqrt_price_x64_to_float(sqrt_price_x64)
    return sqrt_price * sqrt_price * 10 ** (decimals_a - decimals_b)


# ── Tick spacing ─────────────────────────────────────────────────────────


def align_tick_to_spacing(tick: int, spacing: int, round_up: bool = False) -> int:
    """Floor (lower bound) or ceil (upper bound) a tick to a spacing multiple."""
    if spacing <= 0:
        raise InvalidInputError(f"Tick spacing must be positive (got {spacing})")
    if round_up:
        return -((-tick) // spacing) * spacing
    return (tick // spacing) * spacing


def get_tick_spacing(fee_rate: float) -> int:
    """Tick spacing of a fee tier (decimal fraction, 0.003 = 0.30 %)."""
    spacing_map = config.fees.FEE_TO_TICK_SPACING
    for tier, spacing in spacing_map.items():
        if math.isclose(tier, fee_rate, rel_tol=1e-9):
            return spacing
    raise InvalidInputError(
        f"Unknown fee tier {fee_rate}; known tiers: {sorted(spacing_map)}"
    )


def get_default_tick_range(
    current_tick: int, tick_spacing: int, range_percent: float = 50
) -> Tuple[int, int]:
    """
    Aligned (tick_lower, tick_upper) spanning ±range_percent around a tick.

    Bounds are widened outward while aligning, so the range never ends up
    narrower than requested. Results are clamped to the usable tick window.
    """
    if not 0 < range_percent < 100:
        raise InvalidInputError(
            f"range_percent must be in (0, 100) (got {range_percent})"
        )
    fraction = range_percent / 100
    ticks_down = math.floor(math.log(1 - fraction) / _LN_TICK_BASE)
    ticks_up = math.ceil(math.log(1 + fraction) / _LN_TICK_BASE)

    tick_lower = align_tick_to_spacing(current_tick + ticks_down, tick_spacing)
    tick_upper = align_tick_to_spacing(
        current_tick + ticks_up, tick_spacing, round_up=True
    )

    min_aligned = align_tick_to_spacing(MIN_TICK, tick_spacing, round_up=True)
    max_aligned = align_tick_to_spacing(MAX_TICK, tick_spacing)
    if tick_lower < min_aligned or tick_upper > max_aligned:
        logger.debug(
            "Default range [%d, %d] clamped to the tick window", tick_lower, tick_upper
        )
    tick_lower = max(tick_lower, min_aligned)
    tick_upper = min(tick_upper, max_aligned)
    return tick_lower, tick_upper
