"""
Cross-Venue Arbitrage Tracker.

Samples one instrument's price from several sources on a fixed cadence,
flags spreads above a threshold and serves a live dashboard of the
rolling history.
"""

__version__ = "1.0.0"
__author__ = "Tim"
