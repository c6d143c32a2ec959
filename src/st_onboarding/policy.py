import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import validators as v

LAST_STEP = 3

# step -> ordered (field name, validator) pairs
STEP_RULES: Dict[int, List[Tuple[str, v.Validator]]] = {
    1: [
        ("firstName", v.validate_first_name),
        ("lastName", v.validate_last_name),
        ("username", v.validate_username),
    ],
    2: [
        ("email", v.validate_email),
        ("phone", v.validate_phone),
        ("password", v.validate_password),
        ("confirmPassword", v.validate_confirm_password),
    ],
    3: [
        ("dob", v.validate_dob),
        ("profileImage", v.validate_profile_image),
    ],
}


def step_fields(step: int) -> List[str]:
    """Field names owned by *step*, in validation order."""

    return [name for name, _ in STEP_RULES.get(step, [])]


def compute_errors(
    step: int,
    data: Mapping[str, Any],
    today: Optional[datetime.date] = None,
) -> Dict[str, str]:
    """
    Runs every validator of *step* against *data* and merges the messages.

    Each field contributes its own key; if a field had several rules the first
    message wins. The result is empty iff the step is valid. Unknown steps have
    no rules and are always valid.
    """

    errors: Dict[str, str] = {}
    for name, validate in STEP_RULES.get(step, []):
        message = validate(data, today)
        if message is not None:
            errors.setdefault(name, message)

    return errors


def first_invalid_step(
    data: Mapping[str, Any],
    today: Optional[datetime.date] = None,
) -> Optional[int]:
    """Lowest step whose data does not validate, or None when every step passes."""

    for step in sorted(STEP_RULES):
        if compute_errors(step, data, today):
            return step

    return None
