from .asset import AssetKind, IncomingFile, RemoteRef, StagedAsset, Validity
from .generation import (
    IN_FLIGHT_STATES,
    CreationStrategy,
    EagerCreation,
    GenerationAttempt,
    GenerationRequest,
    GenerationState,
    InputMode,
    LazyCreation,
    Readiness,
    StudioState,
)
from .session import SESSION_COLUMNS, TERMINAL_STATUSES, Session, SessionStatus

__all__ = [
    "Session",
    "SessionStatus",
    "SESSION_COLUMNS",
    "TERMINAL_STATUSES",
    "AssetKind",
    "IncomingFile",
    "RemoteRef",
    "StagedAsset",
    "Validity",
    "CreationStrategy",
    "EagerCreation",
    "LazyCreation",
    "GenerationAttempt",
    "GenerationRequest",
    "GenerationState",
    "IN_FLIGHT_STATES",
    "InputMode",
    "Readiness",
    "StudioState",
]
