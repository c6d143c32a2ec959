"""
Redis Resume Example

Demonstrates how to keep the onboarding snapshot in Redis so that a user can
resume the form from another browser or after a server restart.

Prerequisites:
    pip install st-onboarding[redis]
    # A running Redis server (default: localhost:6379)

Key concepts:
    1. RedisBackend(...) holds the connection; cache it with st.cache_resource.
    2. session_id controls whose snapshot is loaded / saved.
       - None  → Streamlit's ephemeral session ID (default).
       - str   → a fixed identity, e.g. "juan".
       - callable → resolved on every access, e.g.
         lambda: st.session_state.get("user_email", "anonymous")
    3. default_ttl makes abandoned snapshots expire.
"""

import streamlit as st
from st_onboarding import OnboardingForm, RedisBackend, SnapshotStore, Wizard

st.set_page_config(page_title="Redis Resume Example")


# ---------------------------------------------------------------------------
# 1. Create the Redis backend (once per server process)
# ---------------------------------------------------------------------------
@st.cache_resource
def get_backend() -> RedisBackend:
    return RedisBackend(
        host="localhost",
        port=6379,

        default_ttl=24 * 3600,  # snapshots expire after a day
        key_prefix="join-us",   # Redis keys: join-us:<session_id>:join-us-form-v1

        session_id=lambda: st.session_state.get("user_email", "anonymous"),
    )


# ---------------------------------------------------------------------------
# 2. Pick an identity, then build the wizard on top of Redis
# ---------------------------------------------------------------------------
st.sidebar.text_input("Signed in as", key="user_email", value="anonymous")

# One form namespace per identity: a new identity starts cold and resumes
# from that user's snapshot in Redis.
user = st.session_state.get("user_email", "anonymous")
wizard = Wizard(
    form=OnboardingForm(namespace=f"join-us-{user}"),
    store=SnapshotStore(get_backend()),
)

st.title("Join Us (Redis)")
st.caption("Fill in a step, close the tab, and come back: your progress is still here.")

st.metric("Current step", "done" if wizard.done else f"{wizard.step}/3")

if not wizard.done and wizard.step == 1:
    st.text_input("First name", **wizard.bind("firstName"))
    st.text_input("Last name", **wizard.bind("lastName"))
    st.text_input("Username", **wizard.bind("username"))

    for name, message in wizard.errors.items():
        if wizard.visible_error(name):
            st.error(message)

col1, col2, col3 = st.columns(3)
with col1:
    if st.button("Back", use_container_width=True):
        wizard.go_back()
        st.rerun()
with col2:
    if st.button("Continue", type="primary", use_container_width=True):
        wizard.go_next()
        st.rerun()
with col3:
    if st.button("Start over", use_container_width=True):
        wizard.reset()
        st.rerun()

st.divider()

with st.expander("Debug: current snapshot"):
    st.json(wizard.form.dump().to_dict())
