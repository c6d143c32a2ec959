import asyncio
import datetime
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, MutableMapping, Optional

from .core.state import FormState
from .form import OnboardingForm
from .media import ImageIngestor, IngestResult
from .persistence import SnapshotStore
from .policy import LAST_STEP, compute_errors, first_invalid_step, step_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldBinding:
    """What a widget needs to render one field.

    ``error`` is the message to display: it is only set once the field is touched.
    """

    name: str
    value: Any
    error: Optional[str]
    touched: bool
    set_value: Callable[[Any], None]
    set_touched: Callable[..., None]


class Wizard:
    """
    Three-step wizard over a form: navigation, validation gating and persistence.

    Create one instance per form session. When a :class:`SnapshotStore` is given,
    a freshly created form is restored from it before first use, and every
    mutation afterwards writes a new snapshot (``reset`` deletes it instead).

    Errors are never stored: :attr:`errors` recomputes them from the current data
    on every read. Touched flags only decide which errors are displayed;
    :meth:`go_next` always gates on the full error set.

    Example:
        wizard = Wizard(store=SnapshotStore(FileBackend("~/.join-us")))

        wizard.set_value("firstName", "Ada")
        if not wizard.go_next():
            print(wizard.visible_error("lastName"))
    """

    def __init__(
        self,
        form: Optional[FormState] = None,
        store: Optional[SnapshotStore] = None,
        session: Optional[MutableMapping] = None,
        today: Optional[datetime.date] = None,
        ingestor: Optional[ImageIngestor] = None,
    ) -> None:
        """
        :param form: The form to drive. Defaults to a new :class:`OnboardingForm`.
        :param store: (Optional) Snapshot persistence. Without it nothing is persisted.
        :param session: Session mapping for the default form (`st.session_state` if omitted).
        :param today: Fixed "current date" for age checks. Defaults to the real date.
        :param ingestor: Image ingestion helper, mostly for tests.
        """

        self.form = form if form is not None else OnboardingForm(session=session)
        self.store = store
        self.today = today
        self._ingestor = ingestor or ImageIngestor()

        # Restore before listening, so restoring does not write the snapshot back
        if self.store is not None and self.form.is_new:
            self.resume()

        self.form.on_change = self._on_form_change

    # ---
    # Queries

    @property
    def step(self) -> int:
        return self.form.step

    @property
    def done(self) -> bool:
        return self.form.done

    @property
    def errors(self) -> Dict[str, str]:
        """Errors of the current step, recomputed from the current data."""

        return compute_errors(self.form.step, self.form.data, self.today)

    errors_for_current_step = errors

    @property
    def can_continue(self) -> bool:
        return not self.errors

    @property
    def progress(self) -> float:
        return 1.0 if self.form.done else self.form.step / LAST_STEP

    def visible_error(self, field: str) -> Optional[str]:
        """The field's current error, but only once the field has been touched."""

        name = self.form.resolve(field)["name"]
        if not self.form.is_touched(name):
            return None

        return self.errors.get(name)

    def field(self, field: str) -> FieldBinding:
        name = self.form.resolve(field)["name"]

        return FieldBinding(
            name=name,
            value=self.form.get_value(name),
            error=self.visible_error(name),
            touched=self.form.is_touched(name),
            set_value=partial(self.set_value, name),
            set_touched=partial(self.set_touched, name),
        )

    # ---
    # Field edits

    def set_value(self, field: str, value: Any) -> None:
        self.form.set_value(field, value)

    def set_touched(self, field: str, value: bool = True) -> None:
        self.form.touch(field, value)

    def bind(self, field: str, value: Any = None):
        """Streamlit widget binding; see :meth:`FormState.bind`."""

        return self.form.bind(field, value)

    # ---
    # Navigation

    def go_next(self) -> bool:
        """
        Validate the current step and move forward.

        Every field of the step is marked touched first, so all of its errors
        become visible. On step 3 this submits the form.

        :return: True if the wizard advanced (or completed).
        """

        if self.form.done:
            return False

        step = self.form.step
        if step >= LAST_STEP:
            return self.submit()

        self.form.touch_many(step_fields(step))

        errors = self.errors
        if errors:
            logger.debug(f"Step {step} blocked by {sorted(errors)}")
            return False

        self.form.step = step + 1
        return True

    def go_back(self) -> bool:
        """Move one step back without validating. Returns False on step 1."""

        if self.form.done or self.form.step <= 1:
            return False

        self.form.step = self.form.step - 1
        return True

    def submit(self) -> bool:
        """
        Validate the last step and, if the whole form is valid, mark it done.

        Only acts on the last step. Should an earlier step no longer validate
        (its data changed after it was passed), the wizard moves back to it with
        its fields touched instead of completing.

        :return: True if the form is now done.
        """

        if self.form.done or self.form.step != LAST_STEP:
            return False

        self.form.touch_many(step_fields(LAST_STEP))
        if self.errors:
            logger.debug(f"Submit blocked by {sorted(self.errors)}")
            return False

        earlier = first_invalid_step(self.form.data, self.today)
        if earlier is not None:
            logger.debug(f"Submit sent back to step {earlier}")
            self.form.touch_many(step_fields(earlier))
            self.form.step = earlier
            return False

        self.form.done = True
        logger.debug("Form submitted")
        return True

    def reset(self) -> None:
        """Start over: empty form on step 1, and the stored snapshot deleted."""

        self._ingestor.cancel()
        self.form.reset()

    def resume(self) -> bool:
        """Restore the stored snapshot, if there is a usable one."""

        if self.store is None:
            return False

        snapshot = self.store.load()
        if snapshot is None:
            return False

        self.form.restore(snapshot)
        return True

    # ---
    # Profile image

    async def attach_image_async(self, upload: Any) -> IngestResult:
        """Ingest a selected or dropped file as the profile image. Non-images are ignored."""

        return await self._ingestor.ingest(upload, self._apply_image)

    def attach_image(self, upload: Any) -> IngestResult:
        """Blocking variant of :meth:`attach_image_async` for synchronous scripts."""

        return asyncio.run(self.attach_image_async(upload))

    def clear_image(self) -> None:
        self.form.set_value("profileImage", "")

    # ---
    # Internals

    def _apply_image(self, data_url: str) -> None:
        self.form.set_value("profileImage", data_url)

    def _on_form_change(self, event: str) -> None:
        if self.store is None:
            return

        if event == "reset":
            self.store.clear()

        elif self.form.config()["autosave"]:
            self.store.save(self.form.dump())
