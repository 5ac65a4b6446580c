"""
openhours - Opening hours and appointment slot scheduling.
"""

__version__ = "0.1.0"
