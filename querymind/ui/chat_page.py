"""NiceGUI chat interface driven by ChatClient stream events."""

import html
import logging
import re

from nicegui import background_tasks, ui

from querymind.client.auth import AuthProvider, AuthState, extract_name_from_email, get_initials
from querymind.client.consumer import ChatClient, StreamEvent
from querymind.client.conversation import Message, MessageState
from querymind.client.documents import Document, DocumentError, process_document
from querymind.client.reveal import reveal
from querymind.client.sessions import SessionList

logger = logging.getLogger(__name__)

CURSOR = "▋"

# Set by configure_auth(); without a provider the chat is open to anyone.
_auth_provider: AuthProvider | None = None


def configure_auth(provider: AuthProvider | None) -> None:
    """Plug in the external authentication provider."""
    global _auth_provider
    _auth_provider = provider


def get_auth_provider() -> AuthProvider | None:
    return _auth_provider


def render_message_content(text: str) -> str:
    """Convert the reply markup we support to HTML.

    Supports ``###`` headers and ``**bold**``; everything else is escaped text.
    """
    text = html.escape(text)
    text = re.sub(
        r"^###\s(.*)$",
        r'<div class="text-base font-semibold mt-4 mb-2">\1</div>',
        text,
        flags=re.MULTILINE,
    )
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    return text.replace("\n", "<br>")


CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .header { background: linear-gradient(135deg, #6366F1 0%, #8B5CF6 50%, #EC4899 100%); }

    .message-assistant {
        background: #F1F5F9;
        color: #334155;
        border-radius: 1rem;
    }
    .body--dark .message-assistant { background: #2D2D2D; color: #E5E7EB; }

    .avatar-user { background: #9333EA; }
    .avatar-assistant { background: #6366F1; }

    .typing-dot {
        width: 4px; height: 4px;
        background: #6366F1;
        border-radius: 50%;
        animation: wave 1.5s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes wave {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-4px); }
    }

    .cursor { opacity: 0.7; margin-left: 2px; }

    .input-box {
        border: 1px solid #E2E8F0;
        border-radius: 1.5rem;
    }
    .body--dark .input-box { border-color: #404040; }
</style>
"""


@ui.page("/")
async def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    dark = ui.dark_mode(True)

    auth: AuthState | None = None
    provider = get_auth_provider()
    if provider is not None:
        auth = AuthState(provider)
        if await auth.refresh() is None:
            ui.navigate.to("/auth")
            return

    client = ChatClient()
    ui.context.client.on_disconnect(client.aclose)
    sessions = SessionList(resettable=client)
    reactions: dict[str, str | None] = {}
    documents: list[Document] = []
    labels: dict[str, ui.html] = {}
    revealing: set[str] = set()

    messages_container: ui.column
    sessions_container: ui.column
    documents_row: ui.row
    warning_label: ui.label
    input_field: ui.textarea
    send_btn: ui.button

    user_name = extract_name_from_email(auth.user.email) if auth and auth.user else "You"
    user_initials = get_initials(user_name)

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        with ui.element("div").classes(
            f"w-7 h-7 rounded-full flex items-center justify-center text-xs text-white {css}"
        ):
            ui.label(user_initials if is_user else "QM")

    def render_loading() -> None:
        with ui.row().classes("items-center gap-2"):
            ui.label("loading").classes("text-indigo-500 font-medium")
            with ui.row().classes("gap-1"):
                for _ in range(3):
                    ui.element("div").classes("typing-dot")

    def toggle_reaction(message_id: str, reaction: str) -> None:
        reactions[message_id] = None if reactions.get(message_id) == reaction else reaction
        refresh_messages()

    def copy_message(content: str) -> None:
        ui.clipboard.write(content)
        ui.notify("Message copied!", type="positive", timeout=2000)

    async def regenerate(message_id: str) -> None:
        await client.regenerate(message_id)

    def render_controls(msg: Message) -> None:
        reaction = reactions.get(msg.id)
        with ui.row().classes("items-center gap-1 mt-2"):
            ui.button(
                icon="thumb_up", on_click=lambda m=msg: toggle_reaction(m.id, "like")
            ).props(f"flat round dense size=sm color={'green' if reaction == 'like' else 'grey'}")
            ui.button(
                icon="thumb_down", on_click=lambda m=msg: toggle_reaction(m.id, "dislike")
            ).props(f"flat round dense size=sm color={'red' if reaction == 'dislike' else 'grey'}")
            ui.button(
                icon="content_copy", on_click=lambda m=msg: copy_message(m.content)
            ).props("flat round dense size=sm color=grey")
            ui.button(
                "Regenerate", icon="autorenew", on_click=lambda m=msg: regenerate(m.id)
            ).props("flat dense no-caps size=sm color=grey")

    def render_message(msg: Message) -> None:
        is_user = msg.role == "user"
        direction = "flex-row-reverse" if is_user else "flex-row"

        with ui.row().classes(f"w-full gap-3 items-start no-wrap {direction}"):
            render_avatar(is_user)
            with ui.column().classes(f"max-w-[80%] gap-0 {'items-end' if is_user else 'items-start'}"):
                if is_user:
                    ui.html(render_message_content(msg.content), sanitize=False).classes(
                        "text-sm leading-relaxed whitespace-pre-wrap"
                    )
                    return
                with ui.element("div").classes("message-assistant px-4 py-3"):
                    if client.state_of(msg.id) is MessageState.PENDING:
                        render_loading()
                    else:
                        content = "" if msg.id in revealing else render_message_content(msg.content)
                        if not msg.complete:
                            content += f'<span class="cursor">{CURSOR}</span>'
                        labels[msg.id] = ui.html(content, sanitize=False).classes(
                            "text-sm leading-relaxed"
                        )
                if msg.complete and msg.id not in revealing:
                    render_controls(msg)

    def refresh_messages() -> None:
        labels.clear()
        messages_container.clear()
        with messages_container:
            if not len(client.conversation):
                with ui.column().classes("w-full h-64 items-center justify-center"):
                    ui.label("Start a conversation by typing a message below").classes(
                        "text-gray-400"
                    )
            else:
                for msg in client.conversation:
                    render_message(msg)
        warning = client.rate_limit_warning
        warning_label.set_text(warning or "")
        warning_label.set_visibility(warning is not None)

    async def reveal_reply(message_id: str, text: str) -> None:
        def show(prefix: str, more: bool) -> None:
            label = labels.get(message_id)
            if label is None:
                return
            cursor = f'<span class="cursor">{CURSOR}</span>' if more else ""
            label.set_content(render_message_content(prefix) + cursor)

        try:
            await reveal(text, show)
        finally:
            revealing.discard(message_id)
            refresh_messages()

    def on_event(event: StreamEvent) -> None:
        if event.state is MessageState.STREAMING and event.message_id in labels:
            labels[event.message_id].set_content(
                render_message_content(event.content) + f'<span class="cursor">{CURSOR}</span>'
            )
            return

        if event.state is MessageState.COMPLETE:
            revealing.add(event.message_id)
            refresh_messages()
            background_tasks.create(reveal_reply(event.message_id, event.content))
            return

        refresh_messages()
        if event.state is MessageState.FAILED and event.error:
            ui.notify(event.error, type="negative", timeout=6000)

    client.subscribe(on_event)

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or client.is_busy:
            return
        input_field.value = ""
        send_btn.disable()
        try:
            await client.send(text)
        finally:
            send_btn.enable()

    def clear_messages() -> None:
        reactions.clear()
        revealing.clear()
        client.clear()
        refresh_messages()

    def refresh_sessions() -> None:
        sessions_container.clear()
        with sessions_container:
            for session in sessions.sessions:
                active = session.id == sessions.current_id
                ui.button(
                    session.title,
                    icon="chat_bubble_outline",
                    on_click=lambda s=session: select_session(s.id),
                ).props(f"flat no-caps align=left {'color=primary' if active else 'color=grey'}").classes(
                    "w-full"
                )

    def select_session(session_id: str) -> None:
        sessions.select(session_id)
        refresh_sessions()

    def new_session() -> None:
        sessions.new_session()
        reactions.clear()
        refresh_sessions()
        refresh_messages()

    def clear_all_sessions() -> None:
        sessions.clear_all()
        reactions.clear()
        refresh_sessions()
        refresh_messages()

    async def handle_upload(e) -> None:
        data = await e.file.read()
        try:
            document = await process_document(
                e.file.name, data, e.file.content_type, client.http
            )
        except DocumentError as err:
            logger.warning(f"Upload failed: {err}")
            ui.notify(str(err), type="negative")
            return
        documents.append(document)
        documents_row.clear()
        with documents_row:
            for doc in documents:
                ui.chip(doc.name, icon="description").props("outline dense")
        ui.notify(f"Added {document.name}", type="positive")

    async def logout() -> None:
        if auth is None:
            return
        result = await auth.sign_out()
        if not result.success:
            ui.notify("Failed to logout", type="negative")
            return
        ui.navigate.to("/auth")

    # === UI Layout ===
    with ui.left_drawer(value=True).classes("p-4 gap-2").style("width: 300px"):
        ui.button("New Chat", icon="add", on_click=new_session).props("unelevated no-caps").classes(
            "w-full"
        )
        sessions_container = ui.column().classes("w-full gap-1")
        ui.space()
        ui.button("Clear all", icon="delete_sweep", on_click=clear_all_sessions).props(
            "flat no-caps color=grey"
        ).classes("w-full")
        ui.switch("Dark mode").bind_value(dark, "value")
        if auth and auth.user:
            with ui.row().classes("w-full items-center gap-2 pt-2"):
                render_avatar(is_user=True)
                with ui.column().classes("gap-0"):
                    ui.label(user_name).classes("text-sm font-medium")
                    ui.label(auth.user.email).classes("text-xs text-grey-6")
        refresh_sessions()

    with ui.column().classes("w-full h-screen gap-0"):
        # Header
        with ui.row().classes("w-full header px-4 py-2 items-center justify-between"):
            ui.button(icon="delete_outline", on_click=clear_messages).props(
                "flat round color=white"
            ).tooltip("Clear conversation")
            ui.label("QueryMind").classes("text-xl font-semibold text-white")
            with ui.button(user_initials).props("flat round color=white"):
                with ui.menu():
                    ui.menu_item("Logout", on_click=logout)

        # Messages
        with ui.scroll_area().classes("flex-grow w-full"):
            with ui.column().classes("w-full max-w-[1000px] mx-auto p-8"):
                messages_container = ui.column().classes("w-full gap-6")

        # Input
        with ui.column().classes("w-full items-center p-4 border-t gap-2"):
            warning_label = ui.label().classes("text-amber-600 text-sm")
            documents_row = ui.row().classes("w-full max-w-[1000px] gap-1")
            with ui.row().classes("w-full max-w-[1000px] input-box px-3 py-1 items-end no-wrap"):
                ui.upload(on_upload=handle_upload, auto_upload=True).props(
                    "flat dense accept=.pdf,.txt,.md"
                ).classes("w-10")
                input_field = (
                    ui.textarea(placeholder="What's in your mind?")
                    .props("autogrow borderless dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", send_message)
                )
                send_btn = (
                    ui.button(icon="send", on_click=send_message)
                    .props("round unelevated color=indigo")
                )

    refresh_messages()
