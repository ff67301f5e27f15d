"""
Streamlit Frontend for FB finance

This is the user interface people use daily to track income,
expenses and savings goals.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Inline error messages next to the form that caused them
3. Visual feedback for all operations
4. Confirmation before ending a session

The UI never touches storage. Every action goes through the
FinanceTracker controller held in the browser session.
"""

import asyncio
import html
from datetime import date, timedelta
from decimal import Decimal

import pandas as pd
import streamlit as st

from finance_tracker.accounts import DuplicateEmailError, InvalidCredentialsError
from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models.account import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    PICTURE_MIME_TYPES,
    picture_data_uri,
)
from finance_tracker.models.finance import (
    MAX_DESCRIPTION_LENGTH,
    MAX_GOAL_NAME_LENGTH,
    THEME_COLORS,
    TransactionType,
    categories_for,
)
from finance_tracker.orchestrator import FinanceTracker, create_app_components
from finance_tracker.services.storage import JsonFileKeyValueStore, StorageError
from finance_tracker.validation import InputValidationError


PROCESSING_ERROR_MESSAGE = "Something went wrong while saving. Please try again."
QUICK_DEPOSITS = (Decimal("100"), Decimal("500"))


# Page configuration
st.set_page_config(
    page_title="FB finance",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


def apply_theme(primary_color: str, dark_mode: bool):
    """Inject the user's accent color (and dark background if enabled)."""
    background = "#0f172a" if dark_mode else "#ffffff"
    text = "#f1f5f9" if dark_mode else "#0f172a"
    st.markdown(f"""
    <style>
        .stButton>button {{
            width: 100%;
            margin-top: 10px;
        }}
        .stButton>button[kind="primary"] {{
            background-color: {primary_color};
            border-color: {primary_color};
        }}
        .stApp {{
            background-color: {background};
            color: {text};
        }}
        .big-number {{
            font-size: 2.5em;
            font-weight: bold;
            color: {primary_color};
        }}
    </style>
    """, unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def money(value: Decimal) -> str:
    return f"{get_settings().app.currency} {value:,.2f}"


@st.cache_resource
def get_store():
    """Shared local store (cached for the server process)."""
    return JsonFileKeyValueStore()


def get_tracker() -> FinanceTracker:
    """Get or create the controller for this browser session."""
    if "tracker" not in st.session_state:
        try:
            tracker = create_app_components(store=get_store())
        except Exception as e:
            st.error(f"Failed to initialize storage: {e}")
            tracker = create_app_components(use_storage=False)
        tracker.restore_session()
        st.session_state.tracker = tracker
    return st.session_state.tracker


def main():
    """Main application entry point."""
    tracker = get_tracker()
    theme = tracker.theme
    apply_theme(theme.primary_color, theme.dark_mode_enabled)

    if not tracker.is_authenticated:
        render_auth_page(tracker)
        return

    profile = tracker.profile

    # Sidebar navigation
    st.sidebar.title("💰 FB finance")
    if profile.profile_picture:
        st.sidebar.image(profile.profile_picture, width=80)
    st.sidebar.markdown(f"**{profile.name}**  \n{profile.email}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💸 Transactions", "🎯 Goals", "👤 Profile", "⚙️ Settings"],
        index=0,
    )

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(tracker)
    elif page == "💸 Transactions":
        render_transactions_page(tracker)
    elif page == "🎯 Goals":
        render_goals_page(tracker)
    elif page == "👤 Profile":
        render_profile_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_auth_page(tracker: FinanceTracker):
    """Render the login / registration screen."""
    st.title("💰 FB finance")
    st.markdown("Your money, your goals.")

    if st.session_state.get("registered_email"):
        st.success("Account created! Log in to continue.")

    login_tab, register_tab = st.tabs(["Log in", "Create account"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input(
                "Email",
                value=st.session_state.get("registered_email", ""),
            )
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")

        if submitted:
            try:
                tracker.login(email, password)
                st.session_state.pop("registered_email", None)
                st.rerun()
            except (InputValidationError, InvalidCredentialsError) as e:
                st.error(str(e))
            except StorageError:
                st.error(PROCESSING_ERROR_MESSAGE)

    with register_tab:
        with st.form("register_form"):
            name = st.text_input("Name", max_chars=MAX_NAME_LENGTH)
            new_email = st.text_input("Email", key="register_email", max_chars=MAX_EMAIL_LENGTH)
            new_password = st.text_input("Password", type="password", key="register_password")
            created = st.form_submit_button("Create account", type="primary")

        if created:
            try:
                record = tracker.register(name, new_email, new_password)
                st.session_state.registered_email = record.email
                st.rerun()
            except (InputValidationError, DuplicateEmailError) as e:
                st.error(str(e))
            except StorageError:
                st.error(PROCESSING_ERROR_MESSAGE)


def render_dashboard_page(tracker: FinanceTracker):
    """Render totals, the weekly chart, advice and goal previews."""
    st.title(f"📊 Hello, {tracker.profile.name}")

    totals = tracker.totals()
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Balance", money(totals.balance))
    with col2:
        st.metric("Income", money(totals.income))
    with col3:
        st.metric("Expenses", money(totals.expenses))

    st.markdown("### Last 7 days")
    series = tracker.weekly_series()
    chart = pd.DataFrame({
        "date": pd.to_datetime([point.date for point in series]),
        "income": [float(point.income) for point in series],
        "expense": [float(point.expense) for point in series],
    })
    st.area_chart(chart, x="date", y=["income", "expense"])
    st.caption(" · ".join(point.label for point in series))

    st.markdown("### 🤖 Smart advice")
    if st.button("Analyse my finances", type="primary", disabled=tracker.is_advice_pending):
        with st.spinner("Analysing your numbers..."):
            run_async(tracker.request_advice())

    advice = tracker.last_advice
    if advice:
        with st.container(border=True):
            st.markdown(advice.text)

    st.markdown("### 🎯 Goals")
    goals = tracker.goals
    if not goals:
        st.info("No goals yet. Create one on the Goals page.")
    for goal in goals[:3]:
        progress = tracker.goal_progress(goal)
        st.markdown(f"**{goal.name}** - {money(goal.current_amount)} / {money(goal.target_amount)}")
        st.progress(progress / 100)


def render_transactions_page(tracker: FinanceTracker):
    """Render the add form and the searchable transaction list."""
    st.title("💸 Transactions")

    with st.expander("➕ New transaction", expanded=not tracker.transactions):
        transaction_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda x: x.value.title(),
            horizontal=True,
        )
        with st.form("transaction_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                description = st.text_input("Description *", max_chars=MAX_DESCRIPTION_LENGTH)
                amount = st.number_input(
                    f"Amount ({get_settings().app.currency}) *",
                    min_value=0.0,
                    step=0.01,
                    format="%.2f",
                )
            with col2:
                category = st.selectbox(
                    "Category *",
                    options=categories_for(transaction_type),
                    format_func=lambda x: x.title(),
                )
                transaction_date = st.date_input("Date", value=date.today())
            submitted = st.form_submit_button("Save", type="primary")

        if submitted:
            try:
                tracker.add_transaction(
                    description=description,
                    amount=Decimal(str(amount)),
                    transaction_type=transaction_type,
                    category=category,
                    transaction_date=transaction_date,
                )
                st.success("Transaction saved")
            except InputValidationError as e:
                st.error(str(e))
            except StorageError:
                st.error(PROCESSING_ERROR_MESSAGE)

    query = st.text_input("🔍 Search", placeholder="Search by description...")
    transactions = tracker.search_transactions(query)

    if not transactions:
        st.info("No transactions found.")
        return

    for transaction in transactions:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        with col1:
            st.markdown(f"**{transaction.description}**  \n{transaction.category.title()}")
        with col2:
            st.markdown(transaction.date.strftime("%d/%m/%Y"))
        with col3:
            st.markdown(f"{sign} {money(transaction.amount)}")
        with col4:
            if st.button("🗑️", key=f"delete_{transaction.id}"):
                try:
                    tracker.delete_transaction(transaction.id)
                    st.rerun()
                except StorageError:
                    st.error(PROCESSING_ERROR_MESSAGE)


def render_goals_page(tracker: FinanceTracker):
    """Render goal creation, quick deposits and deletion."""
    st.title("🎯 Goals")

    with st.expander("➕ New goal", expanded=not tracker.goals):
        with st.form("goal_form", clear_on_submit=True):
            name = st.text_input("Goal name *", max_chars=MAX_GOAL_NAME_LENGTH)
            col1, col2 = st.columns(2)
            with col1:
                target = st.number_input("Target amount *", min_value=0.0, step=10.0, format="%.2f")
                current = st.number_input("Already saved", min_value=0.0, step=10.0, format="%.2f")
            with col2:
                deadline = st.date_input("Deadline", value=date.today() + timedelta(days=90))
                color_name = st.selectbox(
                    "Color",
                    options=list(THEME_COLORS),
                    format_func=lambda x: x.title(),
                )
            submitted = st.form_submit_button("Create goal", type="primary")

        if submitted:
            try:
                tracker.add_goal(
                    name=name,
                    target_amount=Decimal(str(target)),
                    current_amount=Decimal(str(current)),
                    deadline=deadline,
                    color=THEME_COLORS[color_name],
                )
                st.success("Goal created")
            except InputValidationError as e:
                st.error(str(e))
            except StorageError:
                st.error(PROCESSING_ERROR_MESSAGE)

    for goal in tracker.goals:
        progress = tracker.goal_progress(goal)
        st.markdown("---")
        st.markdown(
            f'<span style="color:{goal.color}">●</span> **{html.escape(goal.name)}** '
            f"(until {goal.deadline.strftime('%d/%m/%Y')})",
            unsafe_allow_html=True,
        )
        st.progress(progress / 100, text=f"{progress:.0f}% - {money(goal.current_amount)} of {money(goal.target_amount)}")

        columns = st.columns(len(QUICK_DEPOSITS) + 1)
        for column, deposit in zip(columns, QUICK_DEPOSITS):
            with column:
                if st.button(f"+{deposit}", key=f"deposit_{deposit}_{goal.id}"):
                    try:
                        tracker.apply_deposit(goal.id, deposit)
                        st.rerun()
                    except StorageError:
                        st.error(PROCESSING_ERROR_MESSAGE)
        with columns[-1]:
            if st.button("🗑️ Delete", key=f"delete_goal_{goal.id}"):
                try:
                    tracker.delete_goal(goal.id)
                    st.rerun()
                except StorageError:
                    st.error(PROCESSING_ERROR_MESSAGE)


def render_profile_page(tracker: FinanceTracker):
    """Render the profile editor."""
    st.title("👤 Profile")
    profile = tracker.profile

    if profile.profile_picture:
        st.image(profile.profile_picture, width=120)

    with st.form("profile_form"):
        name = st.text_input("Name", value=profile.name, max_chars=MAX_NAME_LENGTH)
        upload = st.file_uploader("Change photo", type=list(PICTURE_MIME_TYPES))
        income = st.number_input(
            "Monthly income",
            value=float(profile.monthly_income),
            min_value=0.0,
            step=100.0,
            format="%.2f",
            help="Counted as income in your totals",
        )
        submitted = st.form_submit_button("Save profile", type="primary")

    if submitted:
        changes = {
            "name": name or None,
            "monthly_income": Decimal(str(income)).quantize(Decimal("0.01")),
        }
        try:
            if upload is not None:
                changes["profile_picture"] = picture_data_uri(upload.getvalue(), upload.type)
            tracker.update_profile(changes)
            st.success("Profile updated")
        except InputValidationError as e:
            st.error(str(e))
        except StorageError:
            st.error(PROCESSING_ERROR_MESSAGE)
        except ValueError as e:
            st.error(str(e))


def render_settings_page(tracker: FinanceTracker):
    """Render theme, connection status, activity and logout."""
    st.title("⚙️ Settings")

    st.markdown("### Appearance")
    theme = tracker.theme
    names = list(THEME_COLORS)
    current = next(
        (name for name, value in THEME_COLORS.items() if value == theme.primary_color),
        names[0],
    )
    color_name = st.selectbox(
        "Accent color",
        options=names,
        index=names.index(current),
        format_func=lambda x: x.title(),
    )
    dark_mode = st.toggle("Dark mode", value=theme.dark_mode_enabled)

    if color_name != current or dark_mode != theme.dark_mode_enabled:
        try:
            tracker.update_theme(THEME_COLORS[color_name], dark_mode)
            st.rerun()
        except StorageError:
            st.error(PROCESSING_ERROR_MESSAGE)

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Gemini (AI advice)", "gemini"),
        ("Local storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Ready")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    with st.expander("📜 Recent activity"):
        for event in tracker.recent_activity(limit=20):
            st.markdown(f"`{event.timestamp:%d/%m %H:%M}` {event.description}")

    st.markdown("---")
    st.markdown("### Session")

    if st.session_state.get("confirm_logout"):
        st.warning("Are you sure you want to log out?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Yes, log out", type="primary"):
                tracker.logout()
                st.session_state.confirm_logout = False
                st.rerun()
        with col2:
            if st.button("Cancel"):
                st.session_state.confirm_logout = False
                st.rerun()
    elif st.button("🚪 Log out"):
        st.session_state.confirm_logout = True
        st.rerun()

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API key. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
