"""Tests for the Streamlit page's per-browser state helpers."""

import pytest

from tenant_billing.ui_state import (
    pop_flash,
    retire_submit_key,
    set_flash,
    submit_key,
)


class TestSubmitKeys:
    """Tests for single-use submit keys."""

    def test_key_is_stable_between_runs(self):
        """Test reruns without a successful submit keep the same key."""
        state = {}
        assert submit_key(state, "add") == submit_key(state, "add")

    def test_repeated_click_on_retired_key_is_ignored(self):
        """Test a second click queued on the old key no longer matches any button."""
        state = {}
        clicked = submit_key(state, "add")

        retire_submit_key(state, "add")

        assert submit_key(state, "add") != clicked

    def test_actions_are_independent(self):
        """Test retiring one action's key leaves the others alone."""
        state = {}
        import_key = submit_key(state, "import_text")
        submit_key(state, "add")

        retire_submit_key(state, "add")

        assert submit_key(state, "import_text") == import_key

    def test_key_names_the_action(self):
        assert submit_key({}, "delete").startswith("delete_submit_")


class TestFlash:
    """Tests for messages carried across st.rerun()."""

    def test_message_survives_until_shown(self):
        """Test a message set before a rerun is returned on the next run."""
        state = {}
        set_flash(state, "add", "✅ Added Alice")
        assert pop_flash(state, "add") == "✅ Added Alice"

    def test_message_shown_once(self):
        """Test the message is cleared after it is shown."""
        state = {}
        set_flash(state, "add", "✅ Added Alice")
        pop_flash(state, "add")
        assert pop_flash(state, "add") is None

    def test_areas_are_separate(self):
        """Test messages only appear next to their own control."""
        state = {}
        set_flash(state, "import", "✅ Imported 2 records")
        assert pop_flash(state, "add") is None
        assert pop_flash(state, "import") == "✅ Imported 2 records"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
