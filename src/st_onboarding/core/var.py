from typing import Any, Optional

class FormField:
    """
    Helper class for declaring form fields.

    This class acts as a placeholder that `FormStateMeta` uses to build the form
    schema. Once the class is created the placeholder is removed, and reading or
    writing the attribute on a form instance goes through the form storage.

    Example:
        class SignupForm(FormState):

            #### Stored under "firstName" in the snapshot
            first_name: str = FormField(default="", key="firstName")

            #### Stored under "profileImageUrl", touched/errors under "profileImage"
            profile_image_url: str = FormField(
                default="",
                key="profileImageUrl",
                name="profileImage",
            )
    """

    def __init__(
        self,
        default: Any = "",
        key: Optional[str] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize a FormField instance.

        :param default: The default value of the field.
        :type default: Any
        :param key: (Optional) The key used in the form data and in the snapshot.
                    Defaults to the attribute name.
        :type key: str, optional
        :param name: (Optional) The field name used for touched flags and errors.
                     Defaults to the key.
        :type name: str, optional
        """

        # Store parameters
        self.default = default
        self.key = key
        self.name = name
