"""
Turnstile - finite-state routing and dispatch engine

Turnstile stores permitted transitions (optionally guarded), resolves
transition requests against the current state, and notifies observers in a
deterministic priority order, including chain observers that fire when a
whole sequence of transitions happens back-to-back.
"""
import logging

__version__ = "1.0.0"

# Library code stays silent unless the host opts in (see turnstile.core.stdlib_logging).
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__"]
