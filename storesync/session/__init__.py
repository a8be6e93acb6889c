"""
Session — device sign-in state.
"""

from storesync.session._manager import SessionManager

__all__ = ("SessionManager",)
