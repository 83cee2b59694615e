"""
Solana program and transaction risk audit.

Collects on-chain evidence for a program account or a transaction signature,
applies weighted risk rules and reports a trust score, risk level and warnings.
"""

__version__ = "0.1.0"
