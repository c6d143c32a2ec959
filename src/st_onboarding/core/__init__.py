from .state import FormState
from .var import FormField
from .snapshot import Snapshot
from ..errors import UnknownFieldError, InvalidSnapshotError

__all__ = [
    "FormState",
    "FormField",
    "Snapshot",
    "UnknownFieldError",
    "InvalidSnapshotError",
]
