"""
Portfolio Analytics API - risk and diversification metrics for a portfolio.

Computes concentration risk, asset allocation, a composite diversification
score and rule-based insights from a holdings snapshot, and serves them to
dashboards and AI agents from one canonical computation.
"""

__version__ = "1.0.0"
