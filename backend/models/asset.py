from dataclasses import dataclass
from enum import Enum


class AssetKind(str, Enum):
    VOICE = "voice"
    TEXT = "text"
    DOCUMENT = "document"


class Validity(str, Enum):
    UNVALIDATED = "unvalidated"
    VALID = "valid"
    REJECTED = "rejected"


@dataclass(frozen=True)
class IncomingFile:
    """A user-supplied file as received from the client, before validation."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class RemoteRef:
    path: str          # storage-relative key, e.g. "voices/1718000000000-sample.wav"
    public_url: str


@dataclass
class StagedAsset:
    kind: AssetKind
    raw: IncomingFile
    remote_ref: RemoteRef | None = None
    validity: Validity = Validity.UNVALIDATED
    rejection_reason: str | None = None

    @property
    def is_uploaded(self) -> bool:
        return self.remote_ref is not None
