"""Termux web stack installer (Python-first, state-driven).

Core design goals:
- Resumable installer steps recorded in a state file
- Re-runnable lifecycle commands (no duplicate processes)
- Every generated file rendered from a packaged template
- Core package failures abort, optional ones only warn
- Centralized logging
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
