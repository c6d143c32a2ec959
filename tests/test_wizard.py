import pytest
from unittest.mock import MagicMock

from st_onboarding import OnboardingForm, Snapshot, SnapshotStore, Wizard
from st_onboarding.validators import MESSAGES


class TestNavigation:
    """Tests for step transitions and validation gating."""

    def test_initial_state(self, wizard):
        assert wizard.step == 1
        assert wizard.done is False
        assert wizard.progress == pytest.approx(1 / 3)

    def test_next_is_blocked_by_errors(self, wizard):
        assert wizard.go_next() is False
        assert wizard.step == 1

    def test_next_touches_every_field_of_the_step(self, wizard):
        wizard.go_next()

        assert wizard.form.touched == {"firstName": True, "lastName": True, "username": True}
        assert wizard.visible_error("firstName") == MESSAGES["firstName"]

    def test_next_advances_when_valid(self, wizard, fill):
        fill(wizard, 1)

        assert wizard.go_next() is True
        assert wizard.step == 2

    def test_partially_valid_step_still_blocks(self, wizard, fill):
        fill(wizard, 1)
        wizard.go_next()
        fill(wizard, 2)
        wizard.set_value("phone", "123456789")

        assert wizard.go_next() is False
        assert wizard.step == 2
        assert set(wizard.errors) == {"phone"}

    def test_back_never_validates(self, wizard, fill):
        fill(wizard, 1)
        wizard.go_next()

        assert wizard.go_back() is True
        assert wizard.step == 1
        # Step 2 was never attempted, so none of its fields got touched
        assert not wizard.form.is_touched("email")

    def test_back_is_floored_at_one(self, wizard):
        assert wizard.go_back() is False
        assert wizard.step == 1

    def test_full_run_completes(self, wizard, fill):
        fill(wizard, 1, 2, 3)

        assert wizard.go_next() is True
        assert wizard.go_next() is True
        assert wizard.go_next() is True

        assert wizard.done is True
        assert wizard.step == 3
        assert wizard.progress == 1.0

    def test_navigation_is_inert_once_done(self, wizard, fill):
        fill(wizard, 1, 2, 3)
        for _ in range(3):
            wizard.go_next()

        assert wizard.go_back() is False
        assert wizard.go_next() is False
        assert wizard.step == 3 and wizard.done


class TestSubmit:

    def test_submit_only_from_last_step(self, wizard, fill):
        fill(wizard, 1, 2, 3)

        assert wizard.submit() is False
        assert wizard.step == 1
        assert wizard.done is False

    def test_submit_validates_last_step(self, wizard, fill):
        fill(wizard, 1, 2)
        wizard.go_next()
        wizard.go_next()

        assert wizard.submit() is False
        assert wizard.done is False
        assert wizard.form.is_touched("dob")
        assert wizard.visible_error("profileImage") == MESSAGES["profileImage"]

    def test_underage_blocks_submit(self, wizard, fill):
        fill(wizard, 1, 2, 3)
        wizard.go_next()
        wizard.go_next()
        wizard.set_value("dob", "2008-10-18")

        assert wizard.submit() is False
        assert wizard.errors == {"dob": MESSAGES["underage"]}

    def test_earlier_step_edited_after_passing_sends_wizard_back(self, wizard, fill):
        fill(wizard, 1, 2, 3)
        wizard.go_next()
        wizard.go_next()
        wizard.set_value("email", "broken")

        assert wizard.submit() is False
        assert wizard.done is False
        assert wizard.step == 2
        assert wizard.visible_error("email") == MESSAGES["email"]

    def test_non_image_upload_leaves_error_present(self, wizard, fill, make_upload):
        fill(wizard, 1, 2)
        wizard.go_next()
        wizard.go_next()
        wizard.set_value("dob", "1990-05-04")

        result = wizard.attach_image(make_upload(b"%PDF-1.4", "application/pdf"))

        assert result.status == "rejected"
        assert wizard.submit() is False
        assert wizard.errors == {"profileImage": MESSAGES["profileImage"]}


class TestErrorDisplay:

    def test_errors_hidden_until_touched(self, wizard):
        assert wizard.errors  # exist
        assert wizard.visible_error("firstName") is None

        wizard.set_value("firstName", " ")

        assert wizard.visible_error("firstName") == MESSAGES["firstName"]
        assert wizard.visible_error("lastName") is None

    def test_errors_are_recomputed_after_each_edit(self, wizard):
        wizard.set_value("firstName", "")
        assert "firstName" in wizard.errors

        wizard.set_value("firstName", "Ada")
        assert "firstName" not in wizard.errors
        assert wizard.visible_error("firstName") is None

    def test_touched_does_not_affect_gating(self, wizard, fill):
        fill(wizard, 1)
        wizard.set_touched("firstName", False)
        wizard.set_touched("lastName", False)

        assert wizard.can_continue is True

    def test_field_binding(self, wizard):
        binding = wizard.field("profileImage")
        assert binding.name == "profileImage"
        assert binding.value == ""
        assert binding.error is None
        assert binding.touched is False

        binding.set_value("https://example.com/me.png")
        assert wizard.field("profileImageUrl").value == "https://example.com/me.png"
        assert wizard.field("profileImage").touched is True

    def test_field_binding_set_touched(self, wizard):
        wizard.field("username").set_touched()

        binding = wizard.field("username")
        assert binding.touched is True
        assert binding.error == MESSAGES["username"]

    def test_errors_for_current_step_alias(self, wizard):
        assert wizard.errors_for_current_step == wizard.errors


class TestPersistence:
    """Tests for snapshot writes, resume and reset."""

    def test_every_mutation_is_persisted(self, wizard, store):
        wizard.set_value("firstName", "Ada")

        restored = store.load()
        assert restored.data["firstName"] == "Ada"
        assert restored.touched == {"firstName": True}

    def test_step_change_is_persisted(self, wizard, store, fill):
        fill(wizard, 1)
        wizard.go_next()

        assert store.load().step == 2

    def test_resume_restores_before_first_use(self, backend, fill, today):
        first = Wizard(store=SnapshotStore(backend, async_writes=False), session={}, today=today)
        fill(first, 1)
        first.go_next()
        first.set_value("email", "ada@example.com")

        # A reload: new session, same storage
        second = Wizard(store=SnapshotStore(backend, async_writes=False), session={}, today=today)

        assert second.step == 2
        assert second.form.email == "ada@example.com"
        assert second.form.is_touched("firstName")
        assert second.form.dump() == first.form.dump()

    def test_warm_session_is_not_overwritten(self, backend, today):
        session = {}
        store = SnapshotStore(backend, async_writes=False)
        store.save(Snapshot(step=3, data=OnboardingForm.defaults()))

        # A previous rerun already built the form in this session
        OnboardingForm(session=session).step = 2

        wizard = Wizard(form=OnboardingForm(session=session), store=store, today=today)
        assert wizard.step == 2

    def test_reset_clears_state_and_snapshot(self, wizard, store, fill):
        fill(wizard, 1, 2, 3)
        for _ in range(3):
            wizard.go_next()
        assert store.load().done is True

        wizard.reset()

        assert wizard.form.dump() == Snapshot(step=1, done=False, data=OnboardingForm.defaults(), touched={})
        assert store.load() is None

    def test_reset_survives_storage_failure(self, wizard, backend):
        backend.delete = MagicMock(side_effect=OSError("disk gone"))
        wizard.set_value("firstName", "Ada")

        wizard.reset()

        assert wizard.form.first_name == ""

    def test_without_store_nothing_is_persisted(self, fill, today):
        wizard = Wizard(session={}, today=today)
        fill(wizard, 1)

        assert wizard.go_next() is True
        assert wizard.resume() is False

    def test_autosave_disabled(self, backend, today):
        class ManualForm(OnboardingForm):
            class Config:
                autosave = False

        store = SnapshotStore(backend, form_cls=ManualForm, async_writes=False)
        wizard = Wizard(form=ManualForm(session={}), store=store, today=today)
        wizard.set_value("firstName", "Ada")

        assert store.load() is None

    def test_image_survives_reload(self, backend, make_upload, today):
        first = Wizard(store=SnapshotStore(backend, async_writes=False), session={}, today=today)
        first.attach_image(make_upload(b"\x89PNG", "image/png"))

        second = Wizard(store=SnapshotStore(backend, async_writes=False), session={}, today=today)

        assert second.form.profile_image_url.startswith("data:image/png;base64,")
        assert second.form.is_touched("profileImage")


class TestImage:

    def test_attach_image(self, wizard, make_upload):
        result = wizard.attach_image(make_upload(b"abc", "image/jpeg"))

        assert result.applied
        assert wizard.form.profile_image_url == "data:image/jpeg;base64,YWJj"
        assert wizard.form.is_touched("profileImage")

    def test_clear_image(self, wizard, make_upload):
        wizard.attach_image(make_upload(b"abc", "image/jpeg"))
        wizard.clear_image()

        assert wizard.form.profile_image_url == ""
        assert wizard.form.is_touched("profileImage")

    def test_rejected_upload_changes_nothing(self, wizard, store, make_upload):
        before = wizard.form.dump()

        wizard.attach_image(make_upload(b"hello", "text/plain"))

        assert wizard.form.dump() == before
        assert store.load() is None
