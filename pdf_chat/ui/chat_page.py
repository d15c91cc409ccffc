"""NiceGUI chat pages: new chat, conversation view, account and login."""

import logging
from typing import Optional

from nicegui import app, events, run, ui

from ..config import settings
from ..models import ActionResult
from ..services.pdf_processor import PDFProcessor, PDFProcessingError
from .api_client import ChatApiClient, ChatApiError
from .state import ChatViewState, EntryStatus, UploadState

logger = logging.getLogger(__name__)

api_client = ChatApiClient()
pdf_processor = PDFProcessor()

NO_API_KEY_TITLE = "No API key found!"
NO_API_KEY_CAPTION = 'Please add API key from "My account" section'


def _api_key() -> Optional[str]:
    return app.storage.user.get("api_key") or None


def _auth_token() -> Optional[str]:
    return app.storage.user.get("auth_token") or None


def render_header() -> None:
    with ui.header().classes("items-center justify-between bg-sky-700"):
        ui.link("PDF Chat", "/").classes("text-lg font-semibold text-white no-underline")
        with ui.row().classes("gap-4"):
            ui.link("New chat", "/").classes("text-white")
            ui.link("My account", "/account").classes("text-white")


def render_entries(view: ChatViewState) -> None:
    with ui.column().classes("w-full items-start gap-12 pb-10"):
        for entry in view.entries:
            with ui.column().classes("items-start gap-4"):
                ui.label(entry.question).classes("text-xl font-medium text-sky-700")
                if entry.status is EntryStatus.PENDING:
                    with ui.column().classes("w-96 gap-3"):
                        ui.skeleton().classes("w-[90%] h-[20px] rounded-md")
                        ui.skeleton().classes("w-[60%] h-[20px] rounded-md")
                else:
                    ui.label(entry.answer).classes("text-slate-900 whitespace-pre-wrap")


def render_input(on_submit) -> ui.input:
    with ui.footer().classes("bg-white p-4"):
        with ui.row().classes("w-full items-center gap-2"):
            input_field = (
                ui.input(placeholder="Ask me something...")
                .props("outlined dense autocomplete=off")
                .classes("flex-grow")
                .on("keydown.enter", on_submit)
            )
            ui.button(icon="send", on_click=on_submit).props("round unelevated")
    return input_field


@ui.page("/")
def new_chat_page() -> None:
    """Empty chat; the first message creates a conversation."""
    render_header()
    with ui.column().classes("w-full max-w-3xl mx-auto p-4"):
        ui.label("Ask anything to start a new conversation.").classes("text-slate-500")

    async def submit() -> None:
        message = (input_field.value or "").strip()
        if not message:
            return

        api_key = _api_key()
        if not api_key:
            ui.notify(NO_API_KEY_TITLE, caption=NO_API_KEY_CAPTION)
            return

        input_field.value = ""
        try:
            result = await api_client.new_chat(message, api_key, _auth_token())
        except ChatApiError as e:
            result = ActionResult(message=str(e))

        if result.is_error:
            ui.notify(result.message, type="negative")
        elif result.redirect:
            ui.navigate.to(result.redirect)

    input_field = render_input(submit)


@ui.page("/chat/{conversation_id}")
async def conversation_page(conversation_id: str) -> None:
    """Conversation view with optimistic messages and PDF upload."""
    token = _auth_token()
    if not token:
        ui.navigate.to(settings.login_path)
        return

    render_header()

    try:
        conversation = await api_client.fetch_conversation(conversation_id, token)
    except ChatApiError as e:
        ui.notify(str(e), type="negative")
        return
    if conversation is None:
        ui.label("Conversation not found").classes("text-xl p-4")
        return

    view = ChatViewState(conversation.messages)
    upload = UploadState()
    upload.attach(await api_client.fetch_pdf_name(conversation_id))

    @ui.refreshable
    def messages_view() -> None:
        render_entries(view)

    with ui.column().classes("w-full max-w-3xl mx-auto p-4"):
        messages_view()
        ui.label().bind_text_from(upload, "indicator").classes("text-sm")

    async def submit() -> None:
        message = (input_field.value or "").strip()
        if not message:
            return

        api_key = _api_key()
        if not api_key:
            ui.notify(NO_API_KEY_TITLE, caption=NO_API_KEY_CAPTION)
            return

        input_field.value = ""
        pending = view.add_pending(message)
        messages_view.refresh()

        try:
            result = await api_client.chat(message, api_key, conversation_id)
        except ChatApiError as e:
            result = ActionResult(message=str(e))

        if result.is_error:
            view.discard_pending(pending.id)
            ui.notify(result.message, type="negative")
        else:
            try:
                refreshed = await api_client.fetch_conversation(conversation_id, token)
            except ChatApiError as e:
                refreshed = None
                ui.notify(str(e), type="negative")
            if refreshed is not None:
                view.reconcile(refreshed.messages, pending.id)
            else:
                view.discard_pending(pending.id)
        messages_view.refresh()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        filename = e.file.name
        upload.start()
        try:
            content = await e.file.read()
            text = await run.io_bound(pdf_processor.extract_text, content, filename, upload.update)
            await api_client.update_conversation(conversation_id, filename, text)
            input_field.value = upload.complete(filename, text)
            ui.notify("PDF Processed", caption=f"Extracted {len(text)} characters of text")
        except (PDFProcessingError, ChatApiError) as error:
            logger.error(f"PDF Processing Error: {error}")
            upload.fail()
            ui.notify("Error", caption=str(error), type="negative")
        finally:
            upload.finish()
            uploader.reset()
            dialog.close()

    with ui.dialog() as dialog, ui.card().classes("w-96"):
        ui.label("Upload a PDF").classes("text-xl font-semibold")
        ui.label("Select a PDF file to upload.")
        uploader = ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1).props("accept=.pdf")
        with ui.column().classes("w-full").bind_visibility_from(upload, "is_processing"):
            ui.linear_progress(show_value=False).bind_value_from(upload, "progress_fraction")
            ui.label().bind_text_from(upload, "status").classes("text-sm text-center")
        ui.button("Close", on_click=dialog.close).classes("w-full")

    input_field = render_input(submit)
    with input_field.add_slot("append"):
        ui.button(icon="upload_file", on_click=dialog.open).props("flat round dense")


@ui.page("/account")
def account_page() -> None:
    """Store the LLM API key in this browser's storage."""
    render_header()
    with ui.card().classes("w-full max-w-lg mx-auto mt-8"):
        ui.label("My account").classes("text-xl font-semibold")
        key_input = ui.input("Gemini API key", password=True, password_toggle_button=True,
                             value=_api_key() or "").classes("w-full")

        def save() -> None:
            app.storage.user["api_key"] = (key_input.value or "").strip()
            ui.notify("API key saved")

        ui.button("Save", on_click=save)
        ui.link("Sign in", settings.login_path)


@ui.page("/login")
def login_page() -> None:
    """Accept a Clerk session token for calls that need a signed-in user."""
    render_header()
    with ui.card().classes("w-full max-w-lg mx-auto mt-8"):
        ui.label("Sign in").classes("text-xl font-semibold")
        token_input = ui.input("Session token", password=True, value=_auth_token() or "").classes("w-full")

        def sign_in() -> None:
            app.storage.user["auth_token"] = (token_input.value or "").strip()
            ui.navigate.to("/")

        def sign_out() -> None:
            app.storage.user.pop("auth_token", None)
            token_input.value = ""
            ui.notify("Signed out")

        with ui.row():
            ui.button("Sign in", on_click=sign_in)
            ui.button("Sign out", on_click=sign_out).props("flat")
