"""
Legal Disclaimers
=================

🚨 This software is provided for EDUCATIONAL and INFORMATIONAL purposes ONLY.

⚠️ NOT FINANCIAL ADVICE:
• Simulated figures are model outputs, not forecasts
• Recommendations printed by the rebalance advisor are arithmetic, not advice
• DeFi protocols carry HIGH RISK including total loss of capital

🛡️ USER RESPONSIBILITY:
• Users assume 100% responsibility for their financial decisions
• Developer(s) disclaim ALL LIABILITY for financial losses
"""

CLI_DISCLAIMER = (
    "⚠️ Educational simulator — NOT financial advice. "
    "Results assume constant volume and no price path effects."
)

MODEL_LIMITATIONS = """
📐 MODEL LIMITATIONS:
• Fee share assumes the position's capital is spread like the pool's TVL
• IL is measured against holding the deposit, fees excluded
• Gas costs are flat per transaction; slippage is not modelled
• Liquidity mining rewards assume a constant daily emission
"""


def get_disclaimer(verbose: bool = False) -> str:
    """One-line disclaimer, or the full text with model limitations."""
    if verbose:
        return CLI_DISCLAIMER + "\n" + MODEL_LIMITATIONS
    return CLI_DISCLAIMER
