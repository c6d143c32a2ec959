import logging

from .var import FormField

# Basic logger setup
logger = logging.getLogger(__name__)

# Constant for the session state key used to store form state data
SESSION_STATE_KEY = "_st_onboarding"

# Storage key used for snapshots when a form does not configure one
DEFAULT_STORAGE_KEY = "join-us-form-v1"

class FormStateMeta(type):
    """
    Metaclass that turns `FormField` declarations into a form schema.

    This metaclass intercepts class creation to scan for `FormField` attributes
    and builds the `_model_metadata` dictionary, plus two lookup tables so a field
    can be addressed by its attribute name, its data key or its field name.

    Key Features:
    - **Declarative Syntax**: Use `FormField` to define fields with defaults.
    - **Key Mapping**: Python attribute names map to the keys used in the stored
      data (e.g. `first_name` -> `firstName`).
    - **Config Class**: An inner `Config` class overrides the form defaults.

    Example:
        class SignupForm(FormState):
            class Config:
                storage_key = "signup-v2"

            first_name: str = FormField(default="", key="firstName")
            dob: str = FormField(default="")
    """

    def __init__(cls, name, bases, dct):
        """
        Initialize the FormState subclass.

        This method:
        1. Initializes the class using `type`.
        2. Merges the `Config` class over the default config.
        3. Scans for `FormField` attributes to build `_model_metadata`.
        4. Removes `FormField` attributes so instance access triggers `__getattr__`.
        """

        # 1. Calling "type" to initialize the class properly
        super().__init__(name, bases, dct)

        # 2. Avoid processing the base class itself
        if name == "FormState": return

        # ---
        # 3. Config class Processing
        default_config = {
            "storage_key": DEFAULT_STORAGE_KEY,
            "autosave": True,
        }

        # Inherit the parent config, then apply this class's overrides
        parent_config = getattr(cls, "_config", None) or {}
        cls._config = dict(default_config)
        cls._config.update(parent_config)

        user_config = dct.get("Config", None)
        if user_config:
            for key in default_config:
                if hasattr(user_config, key):
                    cls._config[key] = getattr(user_config, key)

        # ---
        # 4. _model_metadata initialization and FormField scanning

        # Copy the parent schema so subclasses extend it instead of sharing it
        cls._model_metadata = dict(getattr(cls, "_model_metadata", None) or {})

        for attr_name, attr_value in dct.items():
            if isinstance(attr_value, FormField):
                data_key = attr_value.key or attr_name

                # Build this field metadata schema
                cls._model_metadata[attr_name] = {
                    "attr": attr_name,
                    "default": attr_value.default,
                    "key": data_key,
                    "name": attr_value.name or data_key,
                }

                # Remove the FormField attribute from the class
                # This ensures that accessing instance.attr triggers FormState.__getattr__
                if attr_name in cls.__dict__:
                    delattr(cls, attr_name)

        # ---
        # 5. Lookup tables: every accepted spelling of a field -> attribute name
        cls._field_lookup = {}
        for attr_name, metadata in cls._model_metadata.items():
            cls._field_lookup[attr_name] = attr_name
            cls._field_lookup[metadata["key"]] = attr_name
            cls._field_lookup[metadata["name"]] = attr_name

        logger.debug(f"Form '{name}' declares {len(cls._model_metadata)} field(s)")
