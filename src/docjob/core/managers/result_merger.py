from __future__ import annotations

from typing import List

from docjob.core.models.job import Chapter, JobResult
from docjob.core.models.record import BookRecord, MergeKind, MergeOutcome


class ResultMerger:
    """Maps a completed job's result into the caller's editable record.

    The input record is never mutated; a merged copy is returned together
    with the kind of data that was applied.
    """

    def merge(self, result: JobResult, record: BookRecord) -> MergeOutcome:
        if result.chapters:
            update = {
                "chapters": [c.model_copy() for c in result.chapters],
                "total_chapters": len(result.chapters),
            }
            if result.page_count is not None:
                update["page_count"] = result.page_count
            return MergeOutcome(record=record.model_copy(update=update, deep=True), kind=MergeKind.chapters)

        if result.page_count is not None:
            return MergeOutcome(
                record=record.model_copy(update={"page_count": result.page_count}, deep=True),
                kind=MergeKind.page_count,
            )

        return MergeOutcome(record=record.model_copy(deep=True), kind=MergeKind.nothing_extracted)

    # Manual-entry fallback when nothing was extracted

    @staticmethod
    def placeholder_chapters(count: int) -> List[Chapter]:
        if count <= 0:
            raise ValueError(f"Chapter count must be positive, got {count}")
        return [Chapter(number=i, title=f"Chapter {i}") for i in range(1, count + 1)]

    def apply_manual_chapter_count(self, record: BookRecord, count: int) -> BookRecord:
        chapters = self.placeholder_chapters(count)
        return record.model_copy(update={"chapters": chapters, "total_chapters": count}, deep=True)
