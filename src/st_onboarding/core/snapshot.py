import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

from ..errors import InvalidSnapshotError

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Serializable picture of a form: wizard position, field data and touched flags."""

    step: int = 1
    done: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    touched: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "done": self.done,
            "data": dict(self.data),
            "touched": dict(self.touched),
        }

    @classmethod
    def from_dict(
        cls,
        raw: Any,
        defaults: Mapping[str, Any],
        field_names: Iterable[str],
        max_step: int = 3,
    ) -> "Snapshot":
        """
        Build a snapshot from decoded JSON without trusting its shape.

        The stored data is merged over *defaults*: keys the form does not declare
        are dropped, missing keys take their default, and values of the wrong type
        fall back to the default. Touched flags are kept only for known field names
        with boolean values.

        :raises InvalidSnapshotError: if the top-level structure is not usable.
        """

        if not isinstance(raw, dict):
            raise InvalidSnapshotError("expected a JSON object", type(raw).__name__)

        # ---
        # Wizard position
        step = raw.get("step", 1)
        if isinstance(step, bool) or not isinstance(step, int) or not 1 <= step <= max_step:
            raise InvalidSnapshotError(f"step must be an integer in [1, {max_step}]", step)

        done = raw.get("done", False)
        if not isinstance(done, bool):
            raise InvalidSnapshotError("done must be a boolean", done)

        # Only the last step can be submitted
        if done and step != max_step:
            raise InvalidSnapshotError(f"done requires step {max_step}", step)

        # ---
        # Field data, merged over the canonical defaults
        stored_data = raw.get("data", {})
        if not isinstance(stored_data, dict):
            raise InvalidSnapshotError("data must be an object", type(stored_data).__name__)

        data = {key: copy.deepcopy(default) for key, default in defaults.items()}
        for key, default in defaults.items():
            if key not in stored_data:
                continue

            value = stored_data[key]
            if default is not None and not isinstance(value, type(default)):
                logger.debug(f"Ignoring stored value for '{key}': expected {type(default).__name__}, got {type(value).__name__}")
                continue

            data[key] = value

        # ---
        # Touched flags
        stored_touched = raw.get("touched", {})
        if not isinstance(stored_touched, dict):
            raise InvalidSnapshotError("touched must be an object", type(stored_touched).__name__)

        known = set(field_names)
        touched = {
            name: flag for name, flag in stored_touched.items()
            if name in known and isinstance(flag, bool)
        }

        return cls(step=step, done=done, data=data, touched=touched)
