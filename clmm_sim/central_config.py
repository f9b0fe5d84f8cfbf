"""
Project Configuration — protocol constants, simulation defaults, version
========================================================================

Single place for every tunable number the engine uses, so that formulas in the
math modules never carry magic constants.

Sources:
  Cetus CLMM fees           : https://cetus-1.gitbook.io/cetus-docs/clmm/fees
  Cetus liquidity mining    : https://cetus-1.gitbook.io/cetus-docs/clmm/liquidity-mining
  Uniswap V3 Whitepaper §6.1: https://uniswap.org/whitepaper-v3.pdf
"""

import re
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
from types import MappingProxyType

# Installed metadata first, pyproject.toml as the fallback
try:
    PROJECT_VERSION = version("clmm-sim")
except PackageNotFoundError:
    # Running from a source checkout
    _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
    _m = (
        re.search(r'version\s*=\s*"([^"]+)"', _toml.read_text())
        if _toml.exists()
        else None
    )
    PROJECT_VERSION = _m.group(1) if _m else "0.0.0-dev"
PROJECT_NAME = "CLMM Simulator"


# ── Tick ladder (64.64 fixed point) ──────────────────────────────────────

TICK_BASE = 1.0001
MIN_TICK = -443636  # sqrt price must stay representable in 64.64
MAX_TICK = 443636


@dataclass(frozen=True)
class ProtocolFees:
    """Swap-fee split between the protocol treasury and LPs."""

    PROTOCOL_FEE_RATE: float = 0.20  # retained by the protocol
    LP_FEE_SHARE: float = 0.80  # distributed to in-range LPs

    # Available fee tiers (decimal fraction of swap volume)
    FEE_TIERS: tuple = (
        0.0001, 0.0002, 0.0003, 0.0004, 0.0005,
        0.001, 0.0015, 0.002, 0.0025, 0.003,
        0.004, 0.006, 0.008, 0.01, 0.02, 0.04,
    )

    # Fee tier -> tick spacing (immutable mapping)
    FEE_TO_TICK_SPACING = MappingProxyType(
        {
            0.0001: 1,  # 0.01% stable pairs
            0.0005: 10,  # 0.05%
            0.0025: 50,  # 0.25%
            0.003: 60,  # 0.30%
            0.01: 200,  # 1.00%
        }
    )


@dataclass(frozen=True)
class SimulationDefaults:
    """Bounds and thresholds shared by the estimators."""

    # APY / capital efficiency
    CAPITAL_EFFICIENCY_CAP: float = 100.0
    APY_CAP: float = 1000.0  # as a fraction: 1000 = 100,000 %
    DAYS_PER_YEAR: int = 365

    # IL curve grid (percent price change)
    CURVE_MIN_PCT: float = -80.0
    CURVE_MAX_PCT: float = 200.0
    CURVE_STEPS: int = 50

    # Rebalance decision table (days)
    BREAK_EVEN_FAST_DAYS: float = 7.0
    BREAK_EVEN_SLOW_DAYS: float = 30.0
    REBALANCE_TX_COUNT: int = 2  # withdraw + redeposit
    GAS_COST_PER_TX_USD: float = 0.0125
    MIN_FEE_DELTA: float = 1e-12

    # Position health
    HEALTH_DAYS_HELD: int = 30
    HIGH_IL_PCT: float = -20.0

    # Break-even reference move for the snapshot pipeline (percent)
    BREAK_EVEN_REFERENCE_MOVE_PCT: float = 20.0


# Unified configuration
class SimulatorConfig:
    """Unified configuration for the simulator."""

    fees = ProtocolFees()
    defaults = SimulationDefaults()


# Global instance
config = SimulatorConfig()
