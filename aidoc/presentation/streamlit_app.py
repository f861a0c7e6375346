import asyncio
import logging
import os
from datetime import datetime

import streamlit as st

from aidoc.application.diagnosis import DiagnosisClient
from aidoc.application.disclaimer import DisclaimerGate
from aidoc.application.history import HistoryStore
from aidoc.application.session import SessionController
from aidoc.domain.models import DiagnosisResult, Severity, SymptomEntry
from aidoc.infrastructure.config import Settings
from aidoc.infrastructure.llm.factory import create_llm_adapter
from aidoc.infrastructure.storage.json_file import JsonFileStorage


logger = logging.getLogger(__name__)


DISCLAIMER = (
    "⚕️ **DISCLAIMER:** AI Doc is NOT a doctor and does NOT provide a diagnosis. "
    "Results are generated by an AI model for informational purposes only and may be wrong. "
    "If you experience emergency symptoms, seek immediate care (call local emergency number)."
)

SEVERITY_STYLES = {
    Severity.EMERGENCY: ("🚨", "error"),
    Severity.HIGH: ("⚠️", "warning"),
    Severity.MEDIUM: ("🟡", "warning"),
    Severity.LOW: ("✅", "success"),
}


def severity_style(severity: Severity) -> tuple:
    """Icon and Streamlit alert kind for a severity banner."""
    return SEVERITY_STYLES.get(severity, ("✅", "success"))


def format_history_label(entry: SymptomEntry) -> str:
    day = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d")
    text = entry.symptoms.strip().splitlines()[0] if entry.symptoms.strip() else entry.symptoms
    if len(text) > 40:
        text = text[:37] + "..."
    return f"{text} · {day} · {entry.result.severity.value} Severity"


def format_result_markdown(result: DiagnosisResult) -> str:
    lines = ["## 🏥 Potential Conditions (NOT a diagnosis)"]
    for condition in result.potential_conditions:
        lines.append(f"**{condition.name}** (Likelihood: {condition.likelihood.value})")
        lines.append(f"- {condition.description}")
        if condition.common_symptoms:
            lines.append(f"- Common symptoms: {', '.join(condition.common_symptoms)}")
    lines.append("")

    lines.append("## 🩺 Recommendation")
    lines.append(result.recommendation)
    lines.append("")

    if result.next_steps:
        lines.append("## 📝 Next Steps")
        for i, step in enumerate(result.next_steps, 1):
            lines.append(f"{i}. {step}")
        lines.append("")

    return "\n".join(lines)


def build_controller(settings: Settings) -> SessionController:
    storage = JsonFileStorage(settings.storage_path)
    controller = SessionController(
        client=DiagnosisClient(create_llm_adapter(settings)),
        history=HistoryStore(storage),
        disclaimer=DisclaimerGate(storage),
    )
    controller.start()
    return controller


def _init_session_state(settings: Settings) -> SessionController:
    if "controller" not in st.session_state:
        st.session_state.controller = build_controller(settings)
    return st.session_state.controller


def _render_disclaimer(controller: SessionController):
    state = controller.view_state()
    if not state.show_disclaimer:
        return
    with st.container(border=True):
        st.markdown("### 🛡️ Before you continue")
        st.markdown(DISCLAIMER)
        col1, col2 = st.columns([1, 1])
        with col1:
            if st.button("I understand", use_container_width=True, key="accept_disclaimer"):
                controller.accept_disclaimer()
                st.rerun()
        with col2:
            if state.has_accepted_disclaimer and st.button("Close", use_container_width=True, key="dismiss_disclaimer"):
                controller.dismiss_disclaimer()
                st.rerun()


def _render_sidebar(controller: SessionController):
    state = controller.view_state()
    header, clear = st.sidebar.columns([3, 1])
    header.markdown("### 🕘 Recent History")
    if state.history and clear.button("Clear", key="clear_history"):
        controller.clear_history()
        st.rerun()

    if not state.history:
        st.sidebar.caption("No recent analyses")
        return
    for entry in state.history:
        if st.sidebar.button(format_history_label(entry), key=f"history_{entry.id}", use_container_width=True):
            controller.select_from_history(entry.id)
            st.rerun()


def _render_result(result: DiagnosisResult):
    icon, kind = severity_style(result.severity)
    banner = getattr(st, kind)
    banner(f"{icon} **{result.severity.value} Severity**")
    st.markdown(format_result_markdown(result))
    # plain text so model output is shown verbatim, not as markdown
    st.text(result.disclaimer)


def main():
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    st.set_page_config(
        page_title="AI Doc",
        page_icon="🩺",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    settings = Settings()
    controller = _init_session_state(settings)

    title, nav = st.columns([4, 1])
    title.markdown("# 🩺 AI Doc")
    if nav.button("Disclaimer", key="reopen_disclaimer"):
        controller.reopen_disclaimer()
        st.rerun()

    _render_disclaimer(controller)
    _render_sidebar(controller)

    state = controller.view_state()
    if state.notification:
        st.error(f"❌ {state.notification}")
        if st.button("Dismiss", key="dismiss_notification"):
            controller.dismiss_notification()
            st.rerun()

    with st.form("symptom_form"):
        symptoms = st.text_area(
            "Describe your symptoms",
            value=state.symptoms,
            placeholder="e.g., I have a persistent dry cough, mild fever, and fatigue for the past 3 days...",
            height=140,
        )
        submit = st.form_submit_button(
            "Analyze Symptoms",
            disabled=state.is_loading or not state.has_accepted_disclaimer,
            use_container_width=True,
        )

    if submit:
        controller.set_symptoms(symptoms)
        if not symptoms.strip():
            st.warning("Please enter symptoms first.")
        else:
            with st.spinner("🔬 Analyzing symptoms..."):
                asyncio.run(controller.submit(symptoms))
            st.rerun()

    result = controller.view_state().result
    if result is None:
        st.info("Enter your symptoms to get an AI-powered health assessment and guidance.")
    else:
        _render_result(result)


if __name__ == "__main__":
    main()
