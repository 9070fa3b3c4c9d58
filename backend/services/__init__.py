from .errors import StudioError
from .orchestrator import GenerationOrchestrator
from .store import sessions
from .studio import Studio, create_studio

__all__ = ["sessions", "StudioError", "GenerationOrchestrator", "Studio", "create_studio"]
