from .content import MemeKitRequest, Preset, Vibe, validate_kit_request
from .kit import AiStatus, MemeKitService

__all__ = ["MemeKitRequest", "Preset", "Vibe", "validate_kit_request", "AiStatus", "MemeKitService"]
