"""
Transcript accumulation for a single call session.

Thread Safety:
    Not thread-safe. Entries are appended only from the owning session's
    event stream, which is delivered on one event loop.
"""

import logging
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from mock_interviewer.models.interview import TranscriptEntry

__all__ = ["TranscriptAccumulator"]

logger = logging.getLogger(__name__)


class TranscriptAccumulator:
    """
    Append-only log of finalized utterances.

    Interim (partial) utterances only update ``latest_partial``, the value
    shown live to the user; they never enter the durable log.

    Example:
        >>> accumulator = TranscriptAccumulator()
        >>> accumulator.record_message({"type": "transcript", "transcriptType": "final",
        ...                             "role": "user", "transcript": "Hi"})
        True
        >>> len(accumulator)
        1
    """

    def __init__(self) -> None:
        self._entries: List[TranscriptEntry] = []
        self.latest_partial: str = ""

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: TranscriptEntry) -> None:
        """Append a finalized entry to the end of the log."""
        self._entries.append(entry)
        logger.debug(f"Transcript entry #{len(self._entries)} from {entry.speaker.value}")

    def snapshot(self) -> Tuple[TranscriptEntry, ...]:
        """Return the entries in append order. The result is not affected by later appends."""
        return tuple(self._entries)

    def record_message(self, message: Dict[str, Any]) -> bool:
        """
        Apply a voice agent ``message`` event.

        Args:
            message: Event payload, e.g. ``{"type": "transcript",
                "transcriptType": "final", "role": "user", "transcript": "..."}``

        Returns:
            True if a finalized entry was appended
        """
        if message.get("type") != "transcript":
            return False

        text = message.get("transcript") or ""
        self.latest_partial = text

        if message.get("transcriptType") != "final":
            return False

        try:
            entry = TranscriptEntry(role=message.get("role"), content=text)
        except ValidationError as e:
            logger.warning(f"Dropping final transcript with unknown role {message.get('role')!r}: {e}")
            return False

        self.append(entry)
        return True
