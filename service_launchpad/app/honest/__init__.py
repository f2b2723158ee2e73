from .status import HonestStatus, HonestStatusService

__all__ = ["HonestStatus", "HonestStatusService"]
