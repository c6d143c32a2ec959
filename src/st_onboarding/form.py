from .core import FormState, FormField
from .utils.dates import DateParts, join_date_parts, split_iso_date

class OnboardingForm(FormState):
    """
    The "Join Us" onboarding form.

    Step 1 collects identity, step 2 contact and credentials, step 3 the date of
    birth and a profile image. Attributes use Python names; the stored data keeps
    the camelCase keys of the persisted snapshot.
    """

    class Config:
        storage_key = "join-us-form-v1"

    # Step 1: identity
    first_name: str = FormField(default="", key="firstName")
    last_name: str = FormField(default="", key="lastName")
    username: str = FormField(default="")

    # Step 2: contact and credentials
    email: str = FormField(default="")
    phone: str = FormField(default="")
    password: str = FormField(default="")
    confirm_password: str = FormField(default="", key="confirmPassword")

    # Step 3: demographics and media
    dob: str = FormField(default="")
    profile_image_url: str = FormField(default="", key="profileImageUrl", name="profileImage")

    @property
    def dob_parts(self) -> DateParts:
        """The date of birth split into year/month/day for a segmented date widget."""

        return split_iso_date(self.dob)

    def set_dob_parts(self, year: str, month: str, day: str) -> None:
        """Composes the date of birth from its parts; incomplete parts store ""."""

        self.set_value("dob", join_date_parts(year, month, day))
