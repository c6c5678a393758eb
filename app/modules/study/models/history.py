from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, TypeAdapter

from .items import GenerationMode, InputKind, StudyItem


class HistoryRecord(BaseModel):
    """Snapshot of one completed generation (inputs, outputs, mode, theme)."""

    id: int
    timestamp: datetime
    input_kind: InputKind
    mode: GenerationMode
    # Original text, or the image as a data URI preview
    input_summary: str
    items: list[StudyItem] = Field(default_factory=list)
    theme: str = "default"

    @property
    def preview(self) -> str:
        """Short label for history listings."""
        if self.input_kind == InputKind.IMAGE:
            return "Image input"
        if len(self.input_summary) > 80:
            return self.input_summary[:80] + "..."
        return self.input_summary


HistoryList = TypeAdapter(list[HistoryRecord])
