"""Recordflow service: recorded browser scripts to test-automation artifacts"""

__version__ = "0.1.0"
