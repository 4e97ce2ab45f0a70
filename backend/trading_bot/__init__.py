"""
Crossover Trading Bot

Watches live prices for a set of symbols, derives SMA / Vortex crossover
signals from rolling price history and trades through an exchange gateway.
"""

__version__ = "0.1.0"
