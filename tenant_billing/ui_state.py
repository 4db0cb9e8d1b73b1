"""
Per-browser UI state for the Streamlit page (kept in st.session_state).

Submit keys: every mutating button is keyed with a token that is
replaced once its action has succeeded. A second click that was queued
against the old key finds no widget with that key on the next run and
is ignored, so a double-clicked submit stores its data once.

Flash messages: a success message is stored before `st.rerun()` and
shown on the next run, next to the control that produced it.
"""

from typing import MutableMapping, Optional
from uuid import uuid4


def submit_key(state: MutableMapping, action: str) -> str:
    """Current widget key for `action`'s submit button."""
    token_key = f"{action}_token"
    if token_key not in state:
        state[token_key] = uuid4().hex
    return f"{action}_submit_{state[token_key]}"


def retire_submit_key(state: MutableMapping, action: str) -> None:
    """Replace the key after a successful submit."""
    state[f"{action}_token"] = uuid4().hex


def set_flash(state: MutableMapping, area: str, message: str) -> None:
    state[f"flash_{area}"] = message


def pop_flash(state: MutableMapping, area: str) -> Optional[str]:
    """Message stored for `area`, shown once."""
    return state.pop(f"flash_{area}", None)
