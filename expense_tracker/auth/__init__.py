"""Auth gate package."""

from expense_tracker.auth.gate import AuthGate

__all__ = ["AuthGate"]
