import datetime
import json
import logging
from typing import Any, Dict

from ..errors import InvalidSnapshotError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Snapshot serialization (used by the persistence adapter)
# ---------------------------------------------------------------------------

def _prepare_for_json(obj: Any) -> Any:
    """
    Recursively convert Python objects into plain JSON values.

    Dates become ISO strings so the stored snapshot stays readable by any client.
    """

    if isinstance(obj, dict):
        return {str(k): _prepare_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_prepare_for_json(i) for i in obj]
    if isinstance(obj, (datetime.date, datetime.datetime, datetime.time)):
        return obj.isoformat()

    if isinstance(obj, (str, int, float, bool, type(None))):
        return obj

    logger.warning(f"skipping non-serializable value of type {type(obj).__name__} (replaced with None)")
    return None


def serialize_state(data: Dict[str, Any]) -> str:
    """Serialize a state dict to a JSON string for external storage."""
    return json.dumps(_prepare_for_json(data))


def deserialize_state(raw: Any) -> Any:
    """
    Deserialize a JSON string back into Python values.

    :raises InvalidSnapshotError: if *raw* is not valid JSON.
    """

    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    try:
        return json.loads(raw)

    except (TypeError, ValueError) as exc:
        raise InvalidSnapshotError(f"not parseable as JSON ({exc})", raw) from exc
