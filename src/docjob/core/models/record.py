from enum import StrEnum
from typing import List, Optional

from pydantic import BaseModel, Field

from docjob.core.models.job import Chapter


class BookRecord(BaseModel):
    """Editable record that receives the extraction result.

    Only the fields touched by ResultMerger are modelled; anything else the
    caller keeps on the record passes through untouched.
    """

    model_config = {"extra": "allow"}

    id: Optional[str] = None
    title: Optional[str] = None
    page_count: Optional[int] = None
    total_chapters: int = 0
    chapters: List[Chapter] = Field(default_factory=list)


class MergeKind(StrEnum):
    chapters = "chapters"
    page_count = "page_count"
    nothing_extracted = "nothing_extracted"


class MergeOutcome(BaseModel):
    record: BookRecord
    kind: MergeKind

    @property
    def message(self) -> str:
        if self.kind == MergeKind.chapters:
            pages = self.record.page_count or "N/A"
            return (
                f"Document processed successfully. Pages: {pages}, "
                f"chapters: {self.record.total_chapters}"
            )
        if self.kind == MergeKind.page_count:
            return (
                f"Document processed successfully. Pages: {self.record.page_count}; "
                "chapters must be entered manually."
            )
        return "Document processed but nothing was extracted; enter chapters manually."
