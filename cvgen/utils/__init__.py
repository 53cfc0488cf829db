"""
Shared utilities for cvgen.

Common functionality used across contexts:
- Logger setup (loguru)
- Job event log
- Timestamps
"""

from cvgen.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
