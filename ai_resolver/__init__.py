"""
AI resolver for prediction markets.

Three layers:
- agent: typed tool capabilities, their registry and execution middleware
- pipeline: the four-pass decision pipeline over a reasoning service
- signing: EIP-712 proposal digests, signatures and evidence hashes
"""

__version__ = "1.0.0"
