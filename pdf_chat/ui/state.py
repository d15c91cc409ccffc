"""
Client-local view state for the chat page.

The message view is optimistic: a submitted question is shown at once as a
pending entry and replaced by server truth once the backend answers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..models import MessageEntry
from ..utils import generate_random_id

PENDING_ID_LENGTH = 4


class EntryStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass
class ChatEntry:
    id: str
    question: str
    answer: Optional[str] = None

    @property
    def status(self) -> EntryStatus:
        return EntryStatus.PENDING if self.answer is None else EntryStatus.RESOLVED

    @classmethod
    def from_message(cls, message: MessageEntry) -> "ChatEntry":
        return cls(id=message.id, question=message.question, answer=message.answer)


class ChatViewState:
    """Server-confirmed entries followed by locally pending ones."""

    def __init__(self, messages: Optional[Iterable[MessageEntry]] = None):
        self._confirmed: List[ChatEntry] = [ChatEntry.from_message(m) for m in messages or []]
        self._pending: List[ChatEntry] = []

    @property
    def entries(self) -> List[ChatEntry]:
        return self._confirmed + self._pending

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def add_pending(self, question: str) -> ChatEntry:
        entry = ChatEntry(id=generate_random_id(PENDING_ID_LENGTH), question=question)
        self._pending.append(entry)
        return entry

    def reconcile(self, messages: Iterable[MessageEntry], resolved_id: str) -> None:
        """Take the server's messages as confirmed and drop the pending entry they answer.

        Other pending entries stay after the confirmed ones until their own
        requests finish.
        """
        self._confirmed = [ChatEntry.from_message(m) for m in messages]
        self.discard_pending(resolved_id)

    def discard_pending(self, entry_id: Optional[str] = None) -> None:
        """Drop one pending entry, or all of them when no ID is given."""
        if entry_id is None:
            self._pending = []
        else:
            self._pending = [e for e in self._pending if e.id != entry_id]


@dataclass
class UploadState:
    """Progress of a PDF upload and the attached-PDF indicator."""

    is_processing: bool = False
    progress: int = 0
    status: str = ""
    pdf_name: Optional[str] = None

    @property
    def progress_fraction(self) -> float:
        return self.progress / 100

    @property
    def indicator(self) -> str:
        return f"PDF Uploaded: {self.pdf_name}" if self.pdf_name else "No PDF Uploaded"

    def start(self) -> None:
        self.is_processing = True
        self.progress = 0
        self.status = "Starting file processing..."

    def update(self, progress: int, status: str) -> None:
        self.progress = max(0, min(100, progress))
        self.status = status

    def attach(self, pdf_name: Optional[str]) -> None:
        self.pdf_name = pdf_name or None

    def complete(self, pdf_name: str, text: str) -> str:
        """Attach the uploaded PDF; returns the extracted text for the message input."""
        self.attach(pdf_name)
        self.update(100, "Complete!")
        return text.strip()

    def fail(self) -> None:
        self.status = "Error processing PDF"

    def finish(self) -> None:
        self.is_processing = False
        self.progress = 0
        self.status = ""
