"""Append-only conversation log."""

from __future__ import annotations

from typing import Sequence

from models import MessageEntry


class MessageHistory:
    """Chronological list of sent and received audio clips.

    Insertion order is the canonical order; views that show newest first
    reverse the snapshot returned by :meth:`list`.
    """

    def __init__(self) -> None:
        self._entries: list[MessageEntry] = []

    def append(self, entry: MessageEntry) -> None:
        self._entries.append(entry)

    def list(self) -> Sequence[MessageEntry]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
