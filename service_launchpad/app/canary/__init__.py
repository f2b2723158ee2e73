from .guard import CanaryGuard, NATIVE_MINT

__all__ = ["CanaryGuard", "NATIVE_MINT"]
