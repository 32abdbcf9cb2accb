import logging
import streamlit as st
from sqlmodel import Session

from app.config import settings
from app.deps import engine, init_db
from app.services.gateway import SQLModelGateway
from app.services.sections import build_card, format_timestamp, title_for, use_system_locale
from app.services.session import DashboardSession
from app.services.signoffs import get_signoff_store
from app.services.values import is_meaningful

logging.basicConfig(level=settings.LOG_LEVEL)

# ---------- Setup ----------
init_db()
use_system_locale()
st.set_page_config(page_title="Internal Hand-off Dashboard", page_icon="🗂️", layout="wide")

db = Session(engine)
gateway = SQLModelGateway(db)
store = get_signoff_store(gateway, settings.SIGNOFF_MODE)

if "dash" not in st.session_state:
    st.session_state.dash = DashboardSession(mode=store.mode)
dash: DashboardSession = st.session_state.dash

# st.rerun() raises, so the session is closed in finally
try:
    if "loaded" not in st.session_state:
        dash.load(gateway)
        dash.refresh_signoffs(store)
        st.session_state.loaded = True

    def pick(handoff_id: str):
        dash.select(handoff_id)
        dash.refresh_signoffs(store)

    # ---------- Sidebar ----------
    summary = dash.summary()
    with st.sidebar:
        st.header("Hand-off")
        st.caption("Internal Dashboard")
        st.metric("Total handoffs", summary.total)
        st.caption("Most common phase")
        st.subheader(summary.top_category)
        for phase, count in summary.by_phase.items():
            st.caption(f"{phase}: {count}")
        if st.button("Refresh", use_container_width=True):
            if dash.load(gateway):
                dash.refresh_signoffs(store)

    # ---------- Header ----------
    st.title("Internal Hand-off Dashboard")
    st.caption("Voice → Vapi → n8n → database → this screen")
    if dash.error:
        st.error(dash.error)

    selected = dash.selected
    if selected:
        st.caption(f"Selected: {title_for(selected)}")

    col_list, col_detail = st.columns([1.1, 1])

    # ---------- List ----------
    with col_list:
        st.subheader("All handoffs")
        st.caption(f"{len(dash.rows)} rows")
        if not dash.rows:
            st.info("No records yet.")
        for row in dash.rows:
            card = build_card(row)
            with st.container(border=True):
                label = card.title + (f"  [{card.priority}]" if card.priority else "")
                if st.button(label, key=f"pick_{card.id}", type="primary" if card.id == dash.selected_id else "secondary"):
                    pick(card.id)
                    st.rerun()
                st.caption(f"{card.reporter} • {card.created}")
                if card.summary:
                    st.write(card.summary[:200])

    # ---------- Details ----------
    with col_detail:
        st.subheader("Details")
        if not selected:
            st.write("Click a handoff on the left.")
        else:
            for sec in dash.sections():
                with st.container(border=True):
                    st.markdown(f"**{sec.title}**")
                    for it in sec.items:
                        c1, c2 = st.columns([1, 2])
                        c1.caption(it.label)
                        c2.write(it.value)

            # ---------- Sign-offs ----------
            with st.container(border=True):
                st.markdown("**Sign-offs**")
                dash.form.enabled = st.checkbox("Add sign-off", value=dash.form.enabled, key="sign_enabled")
                if dash.signoffs:
                    for s in dash.signoffs:
                        with st.container(border=True):
                            st.write(f"**{s.signed_by_name} • {s.signed_by_role}**  ·  {format_timestamp(s.created_at)}")
                            st.caption(f"Phase: {s.signed_for_phase}")
                            if is_meaningful(s.notes):
                                st.write(s.notes)
                else:
                    st.caption("No sign-offs yet.")

                if dash.form.enabled:
                    c1, c2, c3 = st.columns(3)
                    dash.form.name = c1.text_input("Your name", value=dash.form.name, key="sign_name")
                    dash.form.role = c2.text_input("Your role (e.g. Solutions Architect)", value=dash.form.role, key="sign_role")
                    dash.form.phase = c3.text_input("Phase you're signing for (e.g. Solutions)", value=dash.form.phase, key="sign_phase")
                    dash.form.notes = st.text_area("Optional notes (what you checked / next step)", value=dash.form.notes, key="sign_notes")
                    b1, b2 = st.columns(2)
                    if b1.button("Submit sign-off", disabled=dash.form.saving):
                        if dash.submit(store):
                            st.session_state.pop("sign_notes", None)
                            st.session_state.pop("sign_enabled", None)
                            st.success("Sign-off saved.")
                            st.rerun()
                        else:
                            st.error(dash.error or "Sign-off failed.")
                    if b2.button("Cancel"):
                        dash.form.enabled = False
                        st.session_state.pop("sign_enabled", None)
                        st.rerun()
finally:
    db.close()
