"""
Bike-share station traffic over a 24-hour cycle.
"""

__version__ = "0.1.0"
