import datetime
import pytest
import sys
import os
from unittest.mock import MagicMock

# Ensure the src directory is in the path so we can import the package
# This is useful when running tests directly without installing the package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

# Mock streamlit before importing anything else from st_onboarding
# This is necessary because st_onboarding imports streamlit at the top level
mock_st = MagicMock()
mock_st.session_state = {}
sys.modules["streamlit"] = mock_st

from st_onboarding import MemoryBackend, SnapshotStore, Wizard

TODAY = datetime.date(2026, 10, 17)


class FakeUpload:
    """Stand-in for Streamlit's ``UploadedFile``."""

    def __init__(self, payload: bytes, type: str, name: str = "upload"):
        self._payload = payload
        self.type = type
        self.name = name

    def getvalue(self):
        return self._payload


@pytest.fixture(autouse=True)
def reset_mock_state():
    """
    Fixture to reset the mock streamlit state before each test.
    This ensures that tests do not interfere with each other via shared session state.
    """
    mock_st.session_state.clear()


@pytest.fixture()
def today():
    return TODAY


@pytest.fixture()
def backend():
    return MemoryBackend()


@pytest.fixture()
def store(backend):
    # Synchronous writes keep assertions deterministic
    return SnapshotStore(backend, async_writes=False)


@pytest.fixture()
def wizard(store):
    return Wizard(store=store, session={}, today=TODAY)


def fill_step_1(wizard):
    wizard.set_value("firstName", "Ada")
    wizard.set_value("lastName", "Lovelace")
    wizard.set_value("username", "ada")


def fill_step_2(wizard):
    wizard.set_value("email", "ada@example.com")
    wizard.set_value("phone", "9911-2233")
    wizard.set_value("password", "secret1")
    wizard.set_value("confirmPassword", "secret1")


def fill_step_3(wizard):
    wizard.set_value("dob", "1990-05-04")
    wizard.set_value("profileImage", "data:image/png;base64,AAAA")


_FILLERS = {1: fill_step_1, 2: fill_step_2, 3: fill_step_3}


@pytest.fixture()
def fill():
    """Returns a helper that fills the given steps of a wizard with valid data."""

    def _fill(wizard, *steps):
        for step in steps:
            _FILLERS[step](wizard)

    return _fill


@pytest.fixture()
def make_upload():
    return FakeUpload
