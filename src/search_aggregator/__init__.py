"""
Search Aggregator - streaming ripgrep result aggregation.

Runs ripgrep in JSON mode, folds its event stream into per-file match
groups under line and group caps, filters them through an ignore policy,
and renders a line-numbered report suited to humans and LLM prompts.
"""

__version__ = "0.3.1"
