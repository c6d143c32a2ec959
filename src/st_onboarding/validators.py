"""
Field validators.

Each validator takes the form data (keyed by data key) and returns an error
message, or None when the field is valid. Validators never raise for bad input.
"""

import datetime
import re
from typing import Any, Callable, Mapping, Optional

from .utils.dates import age_from_iso

Validator = Callable[..., Optional[str]]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PHONE_DIGITS = 8
PASSWORD_MIN_LENGTH = 6
MINIMUM_AGE = 18

MESSAGES = {
    "firstName": "Please enter your first name.",
    "lastName": "Please enter your last name.",
    "username": "Please enter a username.",
    "email": "Please enter a valid email address.",
    "phone": f"Please enter an {PHONE_DIGITS}-digit phone number.",
    "password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters.",
    "confirmPassword": "Please confirm your password.",
    "passwordMismatch": "Passwords do not match.",
    "dob": "Please enter your date of birth.",
    "underage": f"You must be at least {MINIMUM_AGE} years old.",
    "profileImage": "Please add a profile image.",
}


def only_digits(value: Any) -> str:
    return re.sub(r"[^0-9]", "", str(value or ""))


def is_email(value: Any) -> bool:
    return bool(EMAIL_RE.match(str(value or "").strip()))


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _required(key: str) -> Validator:
    def validate(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
        if not _text(data, key).strip():
            return MESSAGES[key]
        return None

    validate.__name__ = f"validate_{key}"
    return validate


validate_first_name = _required("firstName")
validate_last_name = _required("lastName")
validate_username = _required("username")


def validate_email(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    email = _text(data, "email")
    if not email.strip() or not is_email(email):
        return MESSAGES["email"]
    return None


def validate_phone(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    if len(only_digits(_text(data, "phone"))) != PHONE_DIGITS:
        return MESSAGES["phone"]
    return None


def validate_password(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    # Raw character count, not digits
    password = _text(data, "password")
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        return MESSAGES["password"]
    return None


def validate_confirm_password(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    confirm = _text(data, "confirmPassword")
    if not confirm:
        return MESSAGES["confirmPassword"]
    if confirm != _text(data, "password"):
        return MESSAGES["passwordMismatch"]
    return None


def validate_dob(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    dob = _text(data, "dob")
    if not dob:
        return MESSAGES["dob"]
    if age_from_iso(dob, today) < MINIMUM_AGE:
        return MESSAGES["underage"]
    return None


def validate_profile_image(data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Optional[str]:
    if not data.get("profileImageUrl"):
        return MESSAGES["profileImage"]
    return None
