"""Unit tests for ResultMerger."""

import pytest

from docjob.core.managers.result_merger import ResultMerger
from docjob.core.models.job import Chapter, JobResult
from docjob.core.models.record import BookRecord, MergeKind


@pytest.fixture
def merger():
    return ResultMerger()


@pytest.fixture
def record():
    return BookRecord(
        id="b1",
        title="Dream Big",
        page_count=None,
        total_chapters=3,
        chapters=[Chapter(number=i, title=f"Old {i}") for i in range(1, 4)],
        price=9.99,
    )


def test_page_count_only_leaves_chapters_untouched(merger, record):
    outcome = merger.merge(JobResult.model_validate({"pageCount": 42, "chapters": []}), record)

    assert outcome.kind == MergeKind.page_count
    assert outcome.record.page_count == 42
    assert outcome.record.total_chapters == 3
    assert [c.title for c in outcome.record.chapters] == ["Old 1", "Old 2", "Old 3"]


def test_chapters_replace_list_and_count(merger, record):
    result = JobResult.model_validate(
        {"pageCount": None, "chapters": [{"number": 1, "title": "Intro"}]}
    )

    outcome = merger.merge(result, record)

    assert outcome.kind == MergeKind.chapters
    assert outcome.record.total_chapters == 1
    assert outcome.record.chapters == [Chapter(number=1, title="Intro")]
    assert outcome.record.page_count is None


def test_chapters_with_page_count_set_both(merger, record):
    result = JobResult(page_count=10, chapters=[Chapter(number=1, title="Intro")])

    outcome = merger.merge(result, record)

    assert outcome.record.page_count == 10
    assert outcome.record.total_chapters == 1


def test_empty_result_leaves_record_unchanged(merger, record):
    outcome = merger.merge(JobResult(), record)

    assert outcome.kind == MergeKind.nothing_extracted
    assert outcome.record == record
    assert "nothing was extracted" in outcome.message


def test_zero_page_count_counts_as_missing(merger, record):
    outcome = merger.merge(JobResult.model_validate({"pageCount": 0, "chapters": None}), record)

    assert outcome.kind == MergeKind.nothing_extracted


def test_merge_does_not_mutate_input(merger, record):
    merger.merge(JobResult(page_count=7, chapters=[Chapter(number=1, title="Intro")]), record)

    assert record.page_count is None
    assert record.total_chapters == 3


def test_extra_record_fields_pass_through(merger, record):
    outcome = merger.merge(JobResult(page_count=7), record)

    assert outcome.record.price == 9.99
    assert outcome.record.title == "Dream Big"


class TestManualFallback:

    def test_placeholder_chapters(self):
        chapters = ResultMerger.placeholder_chapters(3)

        assert [(c.number, c.title) for c in chapters] == [
            (1, "Chapter 1"),
            (2, "Chapter 2"),
            (3, "Chapter 3"),
        ]

    def test_apply_manual_chapter_count(self, merger, record):
        updated = merger.apply_manual_chapter_count(record, 2)

        assert updated.total_chapters == 2
        assert updated.chapters[-1].title == "Chapter 2"

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_count_rejected(self, merger, record, count):
        with pytest.raises(ValueError):
            merger.apply_manual_chapter_count(record, count)
