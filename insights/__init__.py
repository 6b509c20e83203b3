"""
Rule-based portfolio insights.
"""

from .query_analyzer import QueryAnalyzer, Intent, flatten_holdings

__all__ = ["QueryAnalyzer", "Intent", "flatten_holdings"]
