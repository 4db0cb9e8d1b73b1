"""
Streamlit Frontend for Tenant Billing

One page with:
1. A form to add a single tenant
2. CSV import by file upload or pasted text
3. The tenant table with totals and delete buttons

The UI keeps no data of its own. Every action goes through the
TenantSession and the table always shows the session's current list.
Errors are shown next to the control that caused them and the form
keeps its values so they can be corrected.

Each mutating button is keyed with a single-use submit key
(see tenant_billing.ui_state), so a double click stores data once.
"""

import asyncio
from uuid import UUID

import streamlit as st

from tenant_billing.config import get_settings, validate_all_settings
from tenant_billing.ingestion import (
    CSV_HEADER,
    CSVFormatError,
    IngestionError,
    format_amount,
    get_user_friendly_summary,
    grand_total,
    to_csv,
    total_charge,
)
from tenant_billing.orchestrator import (
    TenantSession,
    create_app_components,
    create_storage,
)
from tenant_billing.services.storage import StorageError, TenantStorageInterface
from tenant_billing.ui_state import (
    pop_flash,
    retire_submit_key,
    set_flash,
    submit_key,
)


CURRENCY = "¥"

# Page configuration
st.set_page_config(
    page_title="Tenant Billing",
    page_icon="🏠",
    layout="wide",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_storage() -> TenantStorageInterface:
    """One store shared by every browser session (cached)."""
    return create_storage(use_storage=True)


def get_session() -> TenantSession:
    """
    This browser session's TenantSession, started on first use.

    The session unsubscribes itself from the shared store once
    Streamlit drops its session_state.
    """
    if "tenant_session" not in st.session_state:
        session, _ = create_app_components(storage=get_storage())
        run_async(session.start())
        st.session_state.tenant_session = session
    return st.session_state.tenant_session


def money(value: float) -> str:
    return f"{CURRENCY}{format_amount(value)}"


def show_flash(area: str):
    message = pop_flash(st.session_state, area)
    if message:
        st.success(message)


def succeed(action: str, area: str, message: str):
    """Retire the submit key, keep the message for the next run, rerun."""
    retire_submit_key(st.session_state, action)
    set_flash(st.session_state, area, message)
    st.rerun()


def main():
    """Main application entry point."""
    session = get_session()

    st.title("🏠 Tenant Billing")

    col1, col2 = st.columns(2)
    with col1:
        render_add_form(session)
    with col2:
        render_import(session)

    st.markdown("---")
    render_table(session)

    with st.sidebar:
        render_status()


def render_add_form(session: TenantSession):
    """Single tenant form."""
    st.subheader("Add Tenant")
    show_flash("add")

    # The form key changes after each successful add
    with st.form(submit_key(st.session_state, "add"), clear_on_submit=False):
        name = st.text_input("Name", key="form_name", placeholder="Tenant name")
        c1, c2, c3 = st.columns(3)
        water = c1.text_input("Water", key="form_water", placeholder="Amount")
        electricity = c2.text_input(
            "Electricity", key="form_electricity", placeholder="Amount"
        )
        rent = c3.text_input("Rent", key="form_rent", placeholder="Amount")
        submitted = st.form_submit_button("Add Tenant", type="primary")

    if submitted:
        try:
            record = run_async(session.add_tenant(name, water, electricity, rent))
        except IngestionError as e:
            st.error(str(e))
        except StorageError as e:
            st.error(str(e))
        else:
            for key in ("form_name", "form_water", "form_electricity", "form_rent"):
                del st.session_state[key]
            succeed("add", "add", f"✅ Added {record.name}")


def render_import(session: TenantSession):
    """CSV upload and paste box."""
    st.subheader("Import Tenants")
    show_flash("import")
    st.markdown(
        f"""
        CSV format:
        - The first line is a header: `{CSV_HEADER}`
        - One tenant per line after that, separated by commas
        - Example: `Zhang San,50,80,2000`
        """
    )

    uploaded = st.file_uploader("CSV file", type=["csv"])
    if uploaded is not None and st.button(
        "Import File", key=submit_key(st.session_state, "import_file")
    ):
        result = show_import(lambda: session.import_file(uploaded.getvalue()))
        if result is not None:
            succeed("import_file", "import", get_user_friendly_summary(result))

    content = st.text_area(
        "Or paste CSV content",
        key="csv_content",
        height=160,
        placeholder="Paste CSV content...",
    )
    if st.button("Import Text", key=submit_key(st.session_state, "import_text")):
        result = show_import(lambda: session.import_csv(content))
        if result is not None:
            del st.session_state["csv_content"]
            succeed("import_text", "import", get_user_friendly_summary(result))


def show_import(start_import):
    """Run an import; show problems in place. Returns the result if rows were stored."""
    try:
        result = run_async(start_import())
    except IngestionError as e:
        st.error(str(e))
        return None
    except StorageError as e:
        st.error(str(e))
        return None

    if result.imported_count:
        return result
    st.error(get_user_friendly_summary(result))
    return None


def render_table(session: TenantSession):
    """Tenant table with totals and delete buttons."""
    tenants = session.tenants

    st.subheader(f"Tenants ({len(tenants)})")
    show_flash("table")
    if not tenants:
        st.info("No tenants yet. Add one above or import a CSV file.")
        return

    header = st.columns([3, 2, 2, 2, 2, 1])
    for column, title in zip(
        header, ["Name", "Water", "Electricity", "Rent", "Total Due", ""]
    ):
        column.markdown(f"**{title}**")

    for tenant in tenants:
        row = st.columns([3, 2, 2, 2, 2, 1])
        row[0].write(tenant.name)
        row[1].write(money(tenant.water))
        row[2].write(money(tenant.electricity))
        row[3].write(money(tenant.rent))
        row[4].markdown(f":green[{money(total_charge(tenant))}]")
        if row[5].button("Delete", key=f"delete_{tenant.id}"):
            st.session_state.pending_delete = str(tenant.id)
            st.rerun()

    st.markdown(f"**Grand total:** {money(grand_total(tenants))}")

    render_delete_confirmation(session)

    try:
        export = to_csv(tenants)
    except CSVFormatError as e:
        st.caption(f"CSV export unavailable: {e}")
    else:
        st.download_button(
            "Download CSV",
            data=export,
            file_name="tenants.csv",
            mime="text/csv",
        )


def render_delete_confirmation(session: TenantSession):
    """Ask before deleting; nothing is removed until confirmed."""
    pending = st.session_state.get("pending_delete")
    if not pending:
        return

    tenant = next((t for t in session.tenants if str(t.id) == pending), None)
    if tenant is None:
        st.session_state.pending_delete = None
        return

    st.warning(f"Delete {tenant.name}? This cannot be undone.")
    c1, c2 = st.columns(2)
    if c1.button(
        "Yes, delete", type="primary", key=submit_key(st.session_state, "delete")
    ):
        st.session_state.pending_delete = None
        try:
            run_async(session.delete_tenant(UUID(pending)))
        except StorageError as e:
            st.error(str(e))
        else:
            succeed("delete", "table", f"Deleted {tenant.name}")
    if c2.button("Cancel"):
        st.session_state.pending_delete = None
        st.rerun()


def render_status():
    """Storage connection status."""
    st.markdown("### Storage")
    status = validate_all_settings()
    if status.get("google_sheets", False):
        st.success("✅ Google Sheets - Configured")
    else:
        error = status.get("google_sheets_error", "Not configured")
        st.warning(f"⚠️ Google Sheets - {error}")
        st.caption("Data is kept in memory until storage is configured.")

    settings = get_settings().app
    st.caption(f"Header handling: {settings.csv_header_mode}")


if __name__ == "__main__":
    main()
