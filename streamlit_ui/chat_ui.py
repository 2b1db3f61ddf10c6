import sys
from pathlib import Path

import streamlit as st

try:
    from core.settings import SETTINGS
    from streamlit_ui.api_client import (
        ApiError,
        ChatApiClient,
        PendingAttachments,
        add_documents,
        add_images,
        format_timestamp,
    )
except ModuleNotFoundError:
    ROOT = Path(__file__).resolve().parents[1]
    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))
    from core.settings import SETTINGS
    from streamlit_ui.api_client import (
        ApiError,
        ChatApiClient,
        PendingAttachments,
        add_documents,
        add_images,
        format_timestamp,
    )


st.set_page_config(page_title="Spaces Chat", layout="wide")

client = ChatApiClient(
    base_url=SETTINGS.UI.API_BASE_URL,
    conversations_endpoint=SETTINGS.UI.ENDPOINT_CONVERSATIONS,
    turn_endpoint=SETTINGS.UI.ENDPOINT_TURN,
    timeout=SETTINGS.UI.REQUEST_TIMEOUT,
)
SPACES = SETTINGS.CHAT.SPACES

# Session state
if "space" not in st.session_state:
    st.session_state.space = SPACES[0]
if "conversation_id" not in st.session_state:
    st.session_state.conversation_id = None
if "messages" not in st.session_state:
    st.session_state.messages = []
if "pending" not in st.session_state:
    st.session_state.pending = PendingAttachments()
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0


def load_conversations(space: int):
    try:
        return client.list_conversations(space)
    except ApiError as e:
        st.error(str(e))
        return []


def open_conversation(conversation_id: str):
    try:
        detail = client.get_conversation(conversation_id)
    except ApiError as e:
        if e.status_code == 404:
            st.session_state.conversation_id = None
            st.session_state.messages = []
        st.error(str(e))
        return
    st.session_state.conversation_id = conversation_id
    st.session_state.messages = detail.get("messages", [])


def start_new_conversation():
    st.session_state.conversation_id = None
    st.session_state.messages = []


def ensure_conversation() -> str:
    if st.session_state.conversation_id:
        return st.session_state.conversation_id
    conversation = client.create_conversation(st.session_state.space)
    st.session_state.conversation_id = conversation["id"]
    return conversation["id"]


# Sidebar: spaces and conversation list
with st.sidebar:
    st.subheader("Spaces")
    space = st.radio(
        "Space",
        SPACES,
        index=SPACES.index(st.session_state.space),
        horizontal=True,
        label_visibility="collapsed",
    )
    if space != st.session_state.space:
        st.session_state.space = space
        start_new_conversation()

    if st.button("New chat", use_container_width=True):
        start_new_conversation()

    confirm_delete = st.checkbox("Confirm deletes", value=False)
    st.divider()
    for conv in load_conversations(st.session_state.space):
        col_open, col_delete = st.columns([5, 1])
        label = conv.get("title") or "New chat"
        caption = format_timestamp(conv.get("updated_at", ""))
        active = conv["id"] == st.session_state.conversation_id
        if col_open.button(
            f"{'▶ ' if active else ''}{label}",
            key=f"open-{conv['id']}",
            help=caption,
            use_container_width=True,
        ):
            open_conversation(conv["id"])
            st.rerun()
        if col_delete.button("🗑", key=f"delete-{conv['id']}", disabled=not confirm_delete):
            try:
                client.delete_conversation(conv["id"])
            except ApiError as e:
                st.error(str(e))
            else:
                if active:
                    start_new_conversation()
                st.rerun()


# Message history
if not st.session_state.messages:
    st.info("Start a conversation: type a message, attach images or PDF/DOCX files.")
for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        if msg["role"] == "assistant":
            st.markdown(msg.get("text", ""))
        else:
            st.text(msg.get("text", ""))


# Pending attachments
pending: PendingAttachments = st.session_state.pending
with st.expander(
    f"Attachments ({len(pending.images)} images, {len(pending.files)} files)"
):
    image_uploads = st.file_uploader(
        f"Images (up to {SETTINGS.CHAT.MAX_IMAGES})",
        type=["png", "jpg", "jpeg", "gif", "webp"],
        accept_multiple_files=True,
        key=f"images-{st.session_state.uploader_key}",
    )
    document_uploads = st.file_uploader(
        f"PDF or DOCX (up to {SETTINGS.CHAT.MAX_DOCUMENTS}, "
        f"{SETTINGS.CHAT.MAX_DOCUMENT_SIZE_MB} MB each)",
        type=["pdf", "docx"],
        accept_multiple_files=True,
        key=f"documents-{st.session_state.uploader_key}",
    )
    if st.button("Attach"):
        warning = add_images(
            pending,
            [(f.name, f.type, f.getvalue()) for f in image_uploads or []],
            SETTINGS.CHAT.MAX_IMAGES,
        )
        warning = add_documents(
            pending,
            [(f.name, f.type, f.getvalue()) for f in document_uploads or []],
            SETTINGS.CHAT.MAX_DOCUMENTS,
            SETTINGS.CHAT.MAX_DOCUMENT_SIZE_MB,
        ) or warning
        if warning:
            st.warning(warning)
        st.session_state.uploader_key += 1
        st.rerun()
    for f in pending.files:
        st.caption(f"📄 {f['name']}")
    if pending.images or pending.files:
        if st.button("Clear attachments"):
            pending.clear()
            st.rerun()


# User input
if prompt := st.chat_input("Type your message..."):
    text = prompt.strip()
    if not text and not pending.images and not pending.files:
        st.warning("Type a message or attach a file.")
    else:
        try:
            conversation_id = ensure_conversation()
        except ApiError as e:
            st.error(str(e))
        else:
            st.session_state.messages.append({"role": "user", "text": text})
            with st.chat_message("user"):
                st.text(text)
                for f in pending.files:
                    st.caption(f"📄 {f['name']}")

            with st.chat_message("assistant"):
                with st.spinner("Generating answer..."):
                    try:
                        result = client.send_turn(
                            conversation_id, text, pending.images, pending.files
                        )
                    except ApiError as e:
                        st.error(str(e))
                        result = None
                if result is not None:
                    answer = result.get("output", "")
                    st.markdown(answer)
                    st.session_state.messages.append(
                        {"role": "assistant", "text": answer}
                    )
            pending.clear()
            if result is not None:
                st.rerun()
