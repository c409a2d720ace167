"""Pydantic models for conversation history and webhook payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ConversationContext:
    """Append-only dialogue history, oldest entry first.

    The whole history is sent with every request so the stateless remote can
    rebuild the conversation. Entries are never removed or reordered.
    """

    def __init__(self) -> None:
        self._entries: list[ConversationEntry] = []

    def append(self, entry: ConversationEntry) -> None:
        self._entries.append(entry)

    def add_user(self, content: str) -> ConversationEntry:
        entry = ConversationEntry(role=Role.USER, content=content)
        self.append(entry)
        return entry

    def add_assistant(self, content: str) -> ConversationEntry:
        entry = ConversationEntry(role=Role.ASSISTANT, content=content)
        self.append(entry)
        return entry

    def snapshot(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    def to_payload(self) -> list[dict[str, str]]:
        return [entry.to_dict() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"ConversationContext({len(self._entries)} entries)"


class TurnRequest(BaseModel):
    """One webhook call: the new question plus the history that includes it."""

    model_config = ConfigDict(frozen=True)

    question: str
    context: tuple[ConversationEntry, ...] = Field(default_factory=tuple)
    model: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "question": self.question,
            "context": [entry.to_dict() for entry in self.context],
        }
        if self.model:
            payload["model"] = self.model
        return payload


class TurnInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    is_exit: bool = False
