"""Streamlit UI for document Q&A.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from datetime import datetime  # noqa: E402

import streamlit as st  # noqa: E402

from backend.docqa.config import get_settings  # noqa: E402
from ui.helpers import (  # noqa: E402
    ask_question,
    delete_document,
    document_label,
    error_message,
    get_history,
    get_preview,
    list_documents,
    render_assistant_message,
    upload_document,
)

# Configuration
BACKEND_URL = get_settings().backend_url

# Page config
st.set_page_config(
    page_title="Document Q&A",
    page_icon="📄",
    layout="wide",
)

# Initialize session state
if "selected_doc_id" not in st.session_state:
    st.session_state.selected_doc_id = None
if "error" not in st.session_state:
    st.session_state.error = None

# Title
st.title("📄 Document Q&A")
st.markdown("*Answers come only from the document you select*")
st.divider()

col_left, col_right = st.columns([1, 2])

# =============================================================================
# LEFT COLUMN - UPLOAD + DOCUMENT LIST
# =============================================================================
with col_left:
    st.subheader("📤 Upload")

    with st.form("upload_form", clear_on_submit=True):
        uploaded = st.file_uploader("PDF, DOCX or plain text", type=["pdf", "docx", "txt"])
        submitted = st.form_submit_button("Upload", type="primary", use_container_width=True)

        if submitted and uploaded is not None:
            try:
                created = upload_document(
                    BACKEND_URL,
                    filename=uploaded.name,
                    data=uploaded.getvalue(),
                    mime_type=uploaded.type or "application/octet-stream",
                )
                st.session_state.selected_doc_id = created["doc_id"]
                st.session_state.error = None
            except Exception as e:
                st.session_state.error = error_message(e)

    st.subheader("📚 Your Documents")

    try:
        documents = list_documents(BACKEND_URL)
    except Exception as e:
        documents = []
        st.session_state.error = error_message(e)

    if documents:
        ids = [d["doc_id"] for d in documents]
        index = ids.index(st.session_state.selected_doc_id) if st.session_state.selected_doc_id in ids else 0
        selected_id = st.radio(
            "Select a document",
            options=ids,
            index=index,
            format_func=lambda doc_id: document_label(documents[ids.index(doc_id)]),
        )
        st.session_state.selected_doc_id = selected_id

        if st.button("🗑️ Delete selected", use_container_width=True):
            try:
                delete_document(BACKEND_URL, selected_id)
                st.session_state.selected_doc_id = None
                st.rerun()
            except Exception as e:
                st.session_state.error = error_message(e)
    else:
        st.info("Upload a document to get started.")

    if st.session_state.error:
        st.error(f"❌ {st.session_state.error}")

# =============================================================================
# RIGHT COLUMN - CHAT + PREVIEW
# =============================================================================
with col_right:
    doc_id = st.session_state.selected_doc_id

    if not doc_id:
        st.info("👈 Select or upload a document to ask questions about it.")
    else:
        tab_chat, tab_preview = st.tabs(["💬 Chat", "👁️ Preview"])

        with tab_chat:
            try:
                messages = get_history(BACKEND_URL, doc_id)
            except Exception as e:
                messages = []
                st.error(error_message(e))

            for message in messages:
                with st.chat_message(message["role"]):
                    if message["role"] == "assistant":
                        st.markdown(render_assistant_message(message["content"]))
                    else:
                        st.markdown(message["content"])
                    try:
                        ts = datetime.fromisoformat(message["timestamp"])
                        st.caption(ts.strftime("%Y-%m-%d %H:%M"))
                    except (KeyError, ValueError):
                        pass

            question = st.chat_input("Ask a question about this document")
            if question:
                with st.spinner("Reading the document..."):
                    try:
                        ask_question(BACKEND_URL, doc_id, question)
                        st.rerun()
                    except Exception as e:
                        st.error(f"❌ {error_message(e)}")

        with tab_preview:
            try:
                preview = get_preview(BACKEND_URL, doc_id)
            except Exception as e:
                st.error(error_message(e))
            else:
                if preview.get("available"):
                    st.text_area("Extracted text", preview.get("text") or "", height=500)
                else:
                    st.caption("_Preview is not available for this format._")
