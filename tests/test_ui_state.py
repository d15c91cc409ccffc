"""Tests for the chat page's client-local state."""

from pdf_chat.models import MessageEntry
from pdf_chat.ui.state import ChatViewState, EntryStatus, UploadState


def _messages(*questions: str) -> list[MessageEntry]:
    return [MessageEntry(id=f"id{i:06d}", question=q, answer=f"answer to {q}") for i, q in enumerate(questions)]


class TestChatViewState:
    def test_server_messages_are_resolved(self) -> None:
        view = ChatViewState(_messages("one", "two"))

        assert [e.question for e in view.entries] == ["one", "two"]
        assert all(e.status is EntryStatus.RESOLVED for e in view.entries)
        assert not view.has_pending

    def test_add_pending_appends_placeholder(self) -> None:
        view = ChatViewState(_messages("one"))

        entry = view.add_pending("two")

        assert view.entries[-1] is entry
        assert entry.status is EntryStatus.PENDING
        assert entry.answer is None
        assert len(entry.id) == 4
        assert view.has_pending

    def test_reconcile_replaces_pending_with_server_truth(self) -> None:
        view = ChatViewState(_messages("one"))
        pending = view.add_pending("two")

        view.reconcile(_messages("one", "two"), pending.id)

        assert [e.question for e in view.entries] == ["one", "two"]
        assert all(e.status is EntryStatus.RESOLVED for e in view.entries)
        assert not view.has_pending

    def test_reconcile_keeps_other_requests_pending(self) -> None:
        view = ChatViewState(_messages("one"))
        answered = view.add_pending("two")
        waiting = view.add_pending("three")

        view.reconcile(_messages("one", "two"), answered.id)

        assert [e.question for e in view.entries] == ["one", "two", "three"]
        assert view.entries[-1] is waiting
        assert waiting.status is EntryStatus.PENDING
        assert view.entries[1].status is EntryStatus.RESOLVED

    def test_discard_single_pending_entry(self) -> None:
        view = ChatViewState()
        first = view.add_pending("one")
        view.add_pending("two")

        view.discard_pending(first.id)

        assert [e.question for e in view.entries] == ["two"]

    def test_discard_all_pending(self) -> None:
        view = ChatViewState(_messages("kept"))
        view.add_pending("one")
        view.add_pending("two")

        view.discard_pending()

        assert [e.question for e in view.entries] == ["kept"]


class TestUploadState:
    def test_upload_lifecycle(self) -> None:
        upload = UploadState()
        assert upload.indicator == "No PDF Uploaded"

        upload.start()
        assert upload.is_processing
        assert upload.status == "Starting file processing..."

        upload.update(150, "Complete!")
        assert upload.progress == 100
        assert upload.progress_fraction == 1.0

        upload.attach("report.pdf")
        upload.finish()
        assert not upload.is_processing
        assert upload.progress == 0
        assert upload.status == ""
        assert upload.indicator == "PDF Uploaded: report.pdf"

    def test_complete_attaches_pdf_and_returns_trimmed_text(self) -> None:
        upload = UploadState()
        upload.start()

        prefill = upload.complete("report.pdf", "\n  Quarterly results  \n")

        assert prefill == "Quarterly results"
        assert upload.progress == 100
        assert upload.indicator == "PDF Uploaded: report.pdf"

    def test_failure_keeps_previous_pdf(self) -> None:
        upload = UploadState(pdf_name="old.pdf")

        upload.start()
        upload.fail()
        assert upload.status == "Error processing PDF"
        upload.finish()

        assert upload.pdf_name == "old.pdf"

    def test_attach_empty_name_means_no_pdf(self) -> None:
        upload = UploadState(pdf_name="old.pdf")

        upload.attach(None)

        assert upload.indicator == "No PDF Uploaded"
