"""
repeatbooker - expands a booked room slot into its repeated occurrences.
"""

__version__ = "0.1.0"
