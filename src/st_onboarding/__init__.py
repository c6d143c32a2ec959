from .core.state import FormState
from .core.var import FormField
from .core.snapshot import Snapshot
from .form import OnboardingForm
from .wizard import Wizard, FieldBinding
from .persistence import SnapshotStore
from .media import ImageIngestor, IngestResult
from .backends.base import BoundKey, StorageBackend, MemoryBackend
from .backends.file_backend import FileBackend
from .backends.redis_backend import RedisBackend

__all__ = [

    # Core
    "FormState",
    "FormField",
    "Snapshot",
    "OnboardingForm",

    # Wizard
    "Wizard",
    "FieldBinding",
    "ImageIngestor",
    "IngestResult",

    # Persistence
    "SnapshotStore",
    "StorageBackend",
    "BoundKey",
    "MemoryBackend",
    "FileBackend",
    "RedisBackend",
]
