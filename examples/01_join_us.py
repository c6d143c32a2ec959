"""
Join Us Wizard Example

This example renders the three-step onboarding form.
It highlights:
1. binding widgets to form fields with `wizard.bind(...)`.
2. showing a field's error only once it has been touched.
3. resuming where the user left off: every change is snapshotted to a local
   file, so reloading the page (or restarting the server) keeps the progress.

Run it with:
    streamlit run examples/01_join_us.py
"""

import streamlit as st
from st_onboarding import FileBackend, SnapshotStore, Wizard
from st_onboarding.utils.dates import format_nice_date

st.set_page_config(page_title="Join Us")

# One wizard per browser session. The form itself lives in st.session_state,
# so constructing it again on every rerun picks up the same state.
wizard = Wizard(store=SnapshotStore(FileBackend(".join-us")))


def text_field(label: str, name: str, **kwargs):
    """A text input bound to a form field, with its error shown below it."""

    st.text_input(label, **wizard.bind(name), **kwargs)

    error = wizard.field(name).error
    if error:
        st.error(error)


# ---
# Done screen
if wizard.done:
    st.title("You're All Set!")
    st.write("We've received your submission. Thank you!")

    if st.button("Submit again"):
        wizard.reset()
        st.rerun()

    st.stop()

# ---
# Wizard screens
st.title("Join Us!")
st.caption("Please provide all current information accurately.")
st.progress(wizard.progress)

if wizard.step == 1:
    text_field("First name *", "firstName", placeholder="Your first name")
    text_field("Last name *", "lastName", placeholder="Your last name")
    text_field("Username *", "username", placeholder="Your username")

elif wizard.step == 2:
    text_field("Email *", "email", placeholder="Your email")
    text_field("Phone number *", "phone", placeholder="Your phone number")
    text_field("Password *", "password", type="password")
    text_field("Confirm password *", "confirmPassword", type="password")

elif wizard.step == 3:

    # Segmented date of birth, composed into an ISO date by the form
    st.markdown("**Date of birth \\***")
    year, month, day = wizard.form.dob_parts
    col_y, col_m, col_d = st.columns(3)
    year = col_y.text_input("Year", value=year, placeholder="YYYY")
    month = col_m.text_input("Month", value=month, placeholder="MM")
    day = col_d.text_input("Day", value=day, placeholder="DD")

    if (year, month, day) != tuple(wizard.form.dob_parts):
        wizard.form.set_dob_parts(year, month, day)

    if wizard.form.dob:
        st.caption(format_nice_date(wizard.form.dob))

    dob_error = wizard.field("dob").error
    if dob_error:
        st.error(dob_error)

    # Profile image: browse or drop. Non-image files are ignored.
    st.markdown("**Profile image \\***")
    if wizard.form.profile_image_url:
        st.image(wizard.form.profile_image_url, width=240)
        if st.button("Remove image"):
            wizard.clear_image()
            st.rerun()

    else:
        upload = st.file_uploader("Browse or Drop Image", type=["png", "jpg", "jpeg", "gif", "webp"])
        if upload is not None:
            wizard.attach_image(upload)
            st.rerun()

    image_error = wizard.field("profileImage").error
    if image_error:
        st.error(image_error)

# ---
# Navigation
col_back, col_next = st.columns([1, 2])

with col_back:
    if wizard.step > 1 and st.button("‹ Back", use_container_width=True):
        wizard.go_back()
        st.rerun()

with col_next:
    if st.button(f"Continue {wizard.step}/3 ›", type="primary", use_container_width=True):
        wizard.go_next()
        st.rerun()
