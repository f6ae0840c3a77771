"""
Streamlit Frontend for lttr.

A thin front end over the TrackerStore. Every page reads from and writes
to the one store created at startup; the pages themselves hold no state
beyond what Streamlit needs between reruns.

The UI enforces the form contract:
- Save buttons stay disabled until every required field parses
- Imports report success or failure, never a partial result
"""

from datetime import date

import streamlit as st

from lttr.models.records import Collection, NoteType, SubscriptionType
from lttr.orchestrator import create_app_components
from lttr.services.backup import export_bundle, exported_at, import_bundle
from lttr.store import TrackerStore
from lttr.validation import QUICK_SUPPLIES, FormResult, FormValidator


st.set_page_config(
    page_title="lttr.",
    page_icon="✉️",
    layout="wide",
    initial_sidebar_state="expanded",
)

validator = FormValidator()


@st.cache_resource
def get_components():
    """Get or create application components (cached for the process)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to open local data, running without saving: {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    store, _ = get_components()

    st.sidebar.title("✉️ lttr.")
    st.sidebar.markdown("Track your letter profits and manage your side hustle.")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "✉️ Letters",
            "💵 Responses",
            "🏢 Companies",
            "📦 Supplies",
            "📅 Calendar",
            "⚙️ Settings",
        ],
        index=0,
    )

    if store.user_profile.subscription_type == SubscriptionType.TRIAL:
        st.sidebar.markdown("---")
        if store.is_trial_expired:
            st.sidebar.error("Your free trial has ended.")
        else:
            st.sidebar.info(f"Trial: {store.days_left_in_trial} day(s) left")

    if page == "📊 Dashboard":
        render_dashboard_page(store)
    elif page == "✉️ Letters":
        render_letters_page(store)
    elif page == "💵 Responses":
        render_responses_page(store)
    elif page == "🏢 Companies":
        render_companies_page(store)
    elif page == "📦 Supplies":
        render_supplies_page(store)
    elif page == "📅 Calendar":
        render_calendar_page(store)
    elif page == "⚙️ Settings":
        render_settings_page(store)


def money(store: TrackerStore, amount) -> str:
    return f"{amount:,.2f} {store.settings.currency}"


def save_button(store: TrackerStore, form: FormResult, label: str = "Save") -> None:
    """A save button that is only enabled for a valid form."""
    for message in form.messages():
        st.caption(f"• {message}")
    if st.button(label, type="primary", disabled=not form.can_save):
        if store.submit(form) is not None:
            st.success("Saved!")
            st.rerun()


def render_dashboard_page(store: TrackerStore):
    st.title("📊 Dashboard")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Letters Sent", store.total_letters_sent)
    col2.metric("Responses", store.total_responses_received)
    col3.metric("Total Received", money(store, store.total_amount_received))
    col4.metric("ROI", f"{store.roi:.1f}%")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Average Response", money(store, store.average_response_value))
    col2.metric("Expected", money(store, store.total_expected_responses))
    col3.metric("Supply Cost", money(store, store.total_supply_cost))
    col4.metric("Net Profit", money(store, store.net_profit))

    st.markdown("---")
    st.subheader("Recent Activity")
    activity = store.recent_activity()
    if not activity:
        st.info("No activity yet. Log your first letter to get started.")
    for entry in activity:
        icon = "✉️" if entry.kind == "letter" else "💵"
        st.write(f"{icon} {entry.company_name}, {money(store, entry.amount)} ({entry.day:%d %b %Y})")

    due = store.letters_due_for_follow_up()
    if due:
        st.markdown("---")
        st.subheader("Follow Up")
        for letter in due:
            st.write(f"⏰ {letter.company_name}, sent {letter.date_sent:%d %b %Y}")


def render_letters_page(store: TrackerStore):
    st.title("✉️ Letters")

    with st.expander("➕ Add Letter"):
        company_name = st.text_input("Company Name", key="letter_company")
        expected = st.text_input("Expected Response Amount", key="letter_expected")
        quantity = st.text_input("Quantity", value="1", key="letter_quantity")
        date_sent = st.date_input("Date Sent", value=date.today(), key="letter_date")
        notes = st.text_area("Notes", key="letter_notes")
        save_button(store, validator.letter(company_name, expected, quantity, date_sent, notes))

    search = st.text_input("🔍 Search letters", key="letter_search")
    for letter in store.search(Collection.LETTERS, search):
        col1, col2 = st.columns([4, 1])
        status = "✅ Confirmed" if letter.is_confirmed else "⏳ Pending"
        col1.write(
            f"**{letter.company_name}** x{letter.quantity}, "
            f"{money(store, letter.expected_response)} each, "
            f"sent {letter.date_sent:%d %b %Y}, {status}"
        )
        if col2.button("Mark received", key=f"confirm_{letter.id}", disabled=letter.is_confirmed):
            store.set_confirmed(letter.id)
            st.rerun()
        if col2.button("Delete", key=f"delete_letter_{letter.id}"):
            store.delete_by_id(Collection.LETTERS, letter.id)
            st.rerun()


def render_responses_page(store: TrackerStore):
    st.title("💵 Responses")

    with st.expander("➕ Add Response"):
        company_name = st.text_input("Company Name", key="response_company")
        amount = st.text_input("Amount Received", key="response_amount")
        date_received = st.date_input("Date Received", value=date.today(), key="response_date")
        available = store.available_letters_for_linking
        linked = st.selectbox(
            "Link to Letter (optional)",
            options=[None] + available,
            format_func=lambda l: "None" if l is None else f"{l.company_name} ({l.date_sent:%d %b %Y})",
            key="response_link",
        )
        notes = st.text_area("Notes", key="response_notes")
        save_button(
            store,
            validator.response(
                company_name,
                amount,
                date_received,
                linked.id if linked else None,
                notes,
            ),
        )

    search = st.text_input("🔍 Search responses", key="response_search")
    for response in store.search(Collection.RESPONSES, search):
        col1, col2 = st.columns([4, 1])
        letter = store.linked_letter(response)
        link = f", for letter sent {letter.date_sent:%d %b %Y}" if letter else ""
        col1.write(
            f"**{response.company_name}**, {money(store, response.amount)}, "
            f"received {response.date_received:%d %b %Y}{link}"
        )
        if col2.button("Delete", key=f"delete_response_{response.id}"):
            store.delete_by_id(Collection.RESPONSES, response.id)
            st.rerun()


def render_companies_page(store: TrackerStore):
    st.title("🏢 Companies")

    with st.expander("➕ Add Company"):
        name = st.text_input("Company Name", key="company_name")
        address = st.text_input("Address", key="company_address")
        rate = st.text_input("Response Rate (0-100 %)", key="company_rate")
        low = st.text_input("Expected Response Min", key="company_min")
        high = st.text_input("Expected Response Max", key="company_max")
        notes = st.text_area("Notes", key="company_notes")
        save_button(store, validator.company(name, address, rate, low, high, notes))

    search = st.text_input("🔍 Search companies", key="company_search")
    for company in store.search(Collection.COMPANIES, search):
        stats = store.company_stats(company.name)
        expected = company.expected_response_range
        with st.expander(f"{company.name}, {company.response_rate:.0%} response rate"):
            st.write(company.address)
            st.write(
                f"Expected range: {money(store, expected.minimum)} to {money(store, expected.maximum)}"
            )
            st.write(
                f"Letters sent: {stats.letters_sent} | Responses: {stats.responses_received} | "
                f"Received: {money(store, stats.amount_received)}"
            )
            if company.notes:
                st.caption(company.notes)
            if st.button("Delete", key=f"delete_company_{company.id}"):
                store.delete_by_id(Collection.COMPANIES, company.id)
                st.rerun()


def render_supplies_page(store: TrackerStore):
    st.title("📦 Supplies")
    st.metric("Total Spent", money(store, store.total_supply_cost))

    with st.expander("➕ Add Supply"):
        preset = st.selectbox(
            "Quick add",
            options=[None] + [name for name, _ in QUICK_SUPPLIES],
            format_func=lambda n: "Custom" if n is None else n,
            key="supply_preset",
        )
        preset_cost = dict(QUICK_SUPPLIES).get(preset)
        name = st.text_input("Supply Name", value=preset or "", key=f"supply_name_{preset}")
        cost = st.text_input(
            "Cost",
            value=f"{preset_cost:.2f}" if preset_cost is not None else "",
            key=f"supply_cost_{preset}",
        )
        quantity = st.text_input("Quantity", value="1", key="supply_quantity")
        purchased = st.date_input("Date Purchased", value=date.today(), key="supply_date")
        notes = st.text_area("Notes", key="supply_notes")
        save_button(store, validator.supply(name, cost, quantity, purchased, notes))

    search = st.text_input("🔍 Search supplies", key="supply_search")
    for supply in store.search(Collection.SUPPLIES, search):
        col1, col2 = st.columns([4, 1])
        col1.write(
            f"**{supply.name}** x{supply.quantity}, {money(store, supply.cost)}, "
            f"bought {supply.date_purchased:%d %b %Y}"
        )
        if col2.button("Delete", key=f"delete_supply_{supply.id}"):
            store.delete_by_id(Collection.SUPPLIES, supply.id)
            st.rerun()


def render_calendar_page(store: TrackerStore):
    st.title("📅 Calendar")

    day = st.date_input("Day", value=date.today(), key="calendar_day")
    notes = store.notes_on(day)
    if not notes:
        st.info("No notes for this day.")
    for note in notes:
        st.write(f"**{note.title}** ({note.type.value})")
        if note.notes:
            st.caption(note.notes)

    with st.expander("➕ Add Note"):
        title = st.text_input("Title", key="note_title")
        note_type = st.selectbox(
            "Type",
            options=list(NoteType),
            format_func=lambda t: t.value.title(),
            key="note_type",
        )
        body = st.text_area("Notes", key="note_body")
        save_button(store, validator.note(title, day, note_type, body))


def render_settings_page(store: TrackerStore):
    st.title("⚙️ Settings")

    settings = store.settings
    currency = st.text_input("Currency", value=settings.currency)
    reminder_days = st.number_input(
        "Follow-up Reminder (days)",
        min_value=0,
        value=settings.follow_up_reminder_days,
    )
    notifications = st.toggle("Notifications", value=settings.notifications_enabled)
    if st.button("Save Settings"):
        store.update_settings(settings.model_copy(update={
            "currency": currency.strip() or settings.currency,
            "follow_up_reminder_days": int(reminder_days),
            "notifications_enabled": notifications,
        }))
        st.success("Settings saved.")

    st.markdown("---")
    st.subheader("Export Data")
    st.caption("Copy the data below to back up your information.")
    st.code(export_bundle(store), language="json")

    st.subheader("Import Data")
    pasted = st.text_area("Paste your exported data below:", key="import_text")
    if st.button("Import Data", disabled=not pasted.strip()):
        result = import_bundle(store, pasted)
        if result.success:
            st.success(f"{result.message} (exported {exported_at(pasted):%d %b %Y %H:%M})")
        else:
            st.error(result.message)

    st.markdown("---")
    st.subheader("Danger Zone")
    confirm = st.checkbox("I understand this deletes all letters, responses, companies, supplies and notes.")
    if st.button("Reset All Data", disabled=not confirm):
        store.reset_all()
        st.success("All data reset.")
        st.rerun()


if __name__ == "__main__":
    main()
