"""
RouteScout - Cross-Exchange Transfer Arbitrage Scanner

Evaluates whether buying a token on one exchange, transferring it (directly
or via a route token) and selling it on another is profitable after
withdrawal fees, deposit fees and trading commission.
"""

__version__ = "1.0.0"
__author__ = "RouteScout Team"
