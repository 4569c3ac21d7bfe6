"""
Multi-agent dispatch and conversation-protocol core for LLM-backed dashboards.

This package routes user queries to specialised agents, runs their tool
calls against the completion service, merges their results into a
per-session plan and produces one consolidated response.
"""

__version__ = "0.1.0"
