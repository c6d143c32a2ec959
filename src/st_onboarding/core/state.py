import streamlit as st
from typing import Any, Callable, Dict, Iterable, MutableMapping, Optional
import copy
import logging

from .meta import FormStateMeta, SESSION_STATE_KEY, DEFAULT_STORAGE_KEY
from .snapshot import Snapshot
from ..errors import UnknownFieldError

# Basic logger setup
logger = logging.getLogger(__name__)

class FormState(metaclass=FormStateMeta):
    """
    Base class for defining multi-step forms.

    Inheriting from this class enables the `FormStateMeta` metaclass capabilities,
    allowing declarative definition of fields with `FormField`. Each instance owns
    one namespace inside a session mapping (`st.session_state` by default) holding
    the field data, the touched flags, the current step and the done flag.

    Every mutation calls the `on_change` callback with the name of the event
    ("value", "touched", "step", "done", "restore" or "reset").
    """

    # Number of steps; `step` is always kept within [1, steps]
    steps: int = 3

    _model_metadata: Dict[str, Dict[str, Any]] = {}
    _field_lookup: Dict[str, str] = {}
    _config: Dict[str, Any] = {"storage_key": DEFAULT_STORAGE_KEY, "autosave": True}

    def __init__(
        self,
        session: Optional[MutableMapping] = None,
        namespace: Optional[str] = None,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        """
        :param session: Mapping that holds the form namespace. Defaults to `st.session_state`.
        :param namespace: Name of the namespace inside the session. Defaults to the class name.
        :param on_change: Callback invoked with the event name after every mutation.
        """

        self._session = session if session is not None else st.session_state
        self._namespace = namespace or type(self).__name__
        self.on_change = on_change

        self._ensure_storage()

    # ---
    # Schema

    @classmethod
    def schema(cls):
        """Returns the metadata definition of the form."""

        return cls._model_metadata

    @classmethod
    def config(cls) -> Dict[str, Any]:
        return dict(cls._config)

    @classmethod
    def resolve(cls, field: str) -> Dict[str, Any]:
        """
        Returns the metadata of a field given its attribute name, data key or field name.

        :raises UnknownFieldError: if the form does not declare the field.
        """

        attr_name = cls._field_lookup.get(field)
        if attr_name is None:
            raise UnknownFieldError(cls.__name__, field)

        return cls._model_metadata[attr_name]

    @classmethod
    def field_names(cls):
        """Field names (as used by touched flags and errors), in declaration order."""

        return [metadata["name"] for metadata in cls._model_metadata.values()]

    @classmethod
    def defaults(cls) -> Dict[str, Any]:
        """Fresh copy of the default data, keyed by data key."""

        return {
            metadata["key"]: copy.deepcopy(metadata["default"])
            for metadata in cls._model_metadata.values()
        }

    # ---
    # Attribute access, handles: value = form.attribute
    def __getattr__(self, key):

        # Avoid recursion while the instance is still being built
        if key.startswith("_"): raise AttributeError(key)

        if key in type(self)._model_metadata:
            return self.get_value(key)

        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{key}'")

    # Attribute setting, handles: form.attribute = value
    def __setattr__(self, key, value):

        if key in type(self)._model_metadata:
            self.set_value(key, value)

        else:
            super().__setattr__(key, value)

    # ---
    # Field data

    def get_value(self, field: str) -> Any:
        metadata = self.resolve(field)
        return self._ns["data"].get(metadata["key"], metadata["default"])

    def set_value(self, field: str, value: Any, touch: bool = True) -> None:
        """Stores a field value and, unless *touch* is False, marks the field touched."""

        metadata = self.resolve(field)

        self._ns["data"][metadata["key"]] = value
        if touch:
            self._ns["touched"][metadata["name"]] = True

        self._notify("value")

    @property
    def data(self) -> Dict[str, Any]:
        """Copy of the field data, keyed by data key."""

        return dict(self._ns["data"])

    # ---
    # Touched flags

    @property
    def touched(self) -> Dict[str, bool]:
        return dict(self._ns["touched"])

    def is_touched(self, field: str) -> bool:
        return bool(self._ns["touched"].get(self.resolve(field)["name"], False))

    def touch(self, field: str, value: bool = True) -> None:
        self.touch_many([field], value)

    def touch_many(self, fields: Iterable[str], value: bool = True) -> None:
        """Marks several fields at once, notifying a single time if anything changed."""

        changed = False
        for field in fields:
            name = self.resolve(field)["name"]
            if self._ns["touched"].get(name) != value:
                self._ns["touched"][name] = value
                changed = True

        if changed:
            self._notify("touched")

    # ---
    # Wizard position

    @property
    def step(self) -> int:
        return self._ns["step"]

    @step.setter
    def step(self, value: int) -> None:

        # Clamp to the valid step range
        value = max(1, min(type(self).steps, int(value)))

        if value != self._ns["step"]:
            logger.debug(f"{self._namespace}: step {self._ns['step']} -> {value}")
            self._ns["step"] = value
            self._notify("step")

    @property
    def done(self) -> bool:
        return self._ns["done"]

    @done.setter
    def done(self, value: bool) -> None:
        value = bool(value)

        if value != self._ns["done"]:
            self._ns["done"] = value
            self._notify("done")

    # ---
    # Snapshots

    def dump(self) -> Snapshot:
        """Returns a snapshot copy of the current state."""

        return Snapshot(
            step=self._ns["step"],
            done=self._ns["done"],
            data=copy.deepcopy(self._ns["data"]),
            touched=dict(self._ns["touched"]),
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Replaces the current state with *snapshot*, merged over the default data."""

        data = self.defaults()
        data.update({k: v for k, v in snapshot.data.items() if k in data})

        self._ns["data"] = data
        self._ns["touched"] = dict(snapshot.touched)
        self._ns["step"] = max(1, min(type(self).steps, snapshot.step))
        self._ns["done"] = bool(snapshot.done)
        self._forget_widgets()

        logger.debug(f"{self._namespace}: restored at step {self._ns['step']} (done={self._ns['done']})")
        self._notify("restore")

    def reset(self) -> None:
        """Resets all fields to their default values and returns to step 1."""

        self._ns.update(self._initial_namespace())
        self._forget_widgets()
        self._notify("reset")

    # ---
    # Streamlit widgets

    def bind(self, field: str, value: Any = None):
        """
        Binds a Streamlit widget to a form field.

        It sets the initial widget value, generates a unique key, and provides a
        callback that stores the widget value in the form (marking it touched).

        :param field: The field to bind (attribute name, data key or field name).
        :param value: (Optional) Initial widget value, used only if the widget has no value yet.
        :return: A dictionary with 'key' and 'on_change' to be unpacked into the widget.
        """

        metadata = self.resolve(field)

        # Creates a unique key for the widget
        widget_key = self._widget_key(metadata["attr"])

        # Sets the initial value, without overwriting what the widget already holds
        if widget_key not in st.session_state:
            st.session_state[widget_key] = self.get_value(field) if value is None else value

        def callback():
            self.set_value(field, st.session_state.get(widget_key))

        return {
            'key': widget_key,
            'on_change': callback,
        }

    # ---
    # Internals

    @property
    def _ns(self) -> Dict[str, Any]:
        return self._session[SESSION_STATE_KEY][self._namespace]

    def _initial_namespace(self) -> Dict[str, Any]:
        return {
            "step": 1,
            "done": False,
            "data": self.defaults(),
            "touched": {},
        }

    def _ensure_storage(self):

        # Ensure the system namespace on the session is defined
        if SESSION_STATE_KEY not in self._session:
            self._session[SESSION_STATE_KEY] = {}

        # Ensure the form namespace on the session is defined
        self.is_new = self._namespace not in self._session[SESSION_STATE_KEY]

        if self.is_new:
            self._session[SESSION_STATE_KEY][self._namespace] = self._initial_namespace()

            # Hook: if the child class has an "on_init" method, calls it.
            if hasattr(type(self), "on_init"):
                self.on_init()

        else:
            # Fields added since the namespace was created start at their default
            data = self._ns["data"]
            for key, default in self.defaults().items():
                data.setdefault(key, default)

    def _widget_key(self, attr_name: str) -> str:
        return f"{self._namespace}_{attr_name}_widget"

    def _forget_widgets(self) -> None:
        """Drop bound widget values so widgets re-read the form on the next bind()."""

        for attr_name in type(self)._model_metadata:
            st.session_state.pop(self._widget_key(attr_name), None)

    def _notify(self, event: str) -> None:
        if self.on_change is not None:
            self.on_change(event)
