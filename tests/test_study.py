"""Tests for nova.modules.study — hierarchical resolution and presets."""

import pytest

from nova.core.outcomes import OutcomeStatus
from nova.modules.study import ALL_PARTS, execute


async def _seed(store):
    """Physics/Waves/{Intro, Interference} and Chemistry/Waves Lab."""
    await execute("ADD_STUDY_SUBJECT", {"name": "Physics"}, store)
    await execute("ADD_STUDY_SUBJECT", {"name": "Chemistry"}, store)
    await execute("ADD_STUDY_CHAPTER", {"subject_name": "Chemistry", "chapter_name": "Waves Lab"}, store)
    await execute("ADD_STUDY_CHAPTER", {"subject_name": "Physics", "chapter_name": "Waves"}, store)
    await execute("ADD_STUDY_PART", {"chapter_name": "Waves", "subject_name": "physics", "part_name": "Intro"}, store)
    await execute(
        "ADD_STUDY_PART", {"chapter_name": "Waves", "subject_name": "physics", "part_name": "Interference"}, store,
    )


def _chapter(store, name):
    return next(c for c in store.chapters if c["name"] == name)


def _part(store, name):
    return next(p for p in store.parts if p["name"] == name)


class TestHierarchy:
    @pytest.mark.asyncio
    async def test_chapter_requires_existing_subject(self, study_store):
        outcome = await execute(
            "ADD_STUDY_CHAPTER", {"subject_name": "Biology", "chapter_name": "Cells"}, study_store,
        )
        assert outcome.status is OutcomeStatus.NOT_FOUND
        assert outcome.reference == "Biology"
        assert study_store.chapters == []

    @pytest.mark.asyncio
    async def test_chapter_scoped_to_subject(self, study_store):
        await _seed(study_store)
        physics_waves = _chapter(study_store, "Waves")
        assert _part(study_store, "Intro")["chapter_id"] == physics_waves["id"]

    @pytest.mark.asyncio
    async def test_unscoped_chapter_takes_first_match(self, study_store):
        await _seed(study_store)
        await execute("DELETE_STUDY_CHAPTER", {"chapter_name": "waves"}, study_store)
        assert [c["name"] for c in study_store.chapters] == ["Waves"]

    @pytest.mark.asyncio
    async def test_unknown_subject_in_scope(self, study_store):
        await _seed(study_store)
        outcome = await execute(
            "DELETE_STUDY_CHAPTER", {"subject_name": "Math", "chapter_name": "waves"}, study_store,
        )
        assert outcome.status is OutcomeStatus.NOT_FOUND
        assert len(study_store.chapters) == 2

    @pytest.mark.asyncio
    async def test_delete_part_within_chapter(self, study_store):
        await _seed(study_store)
        await execute(
            "DELETE_STUDY_PART", {"subject_name": "physics", "chapter_name": "waves", "part_name": "inter"},
            study_store,
        )
        assert [p["name"] for p in study_store.parts] == ["Intro"]

    @pytest.mark.asyncio
    async def test_delete_subject_cascades_in_store(self, study_store):
        await _seed(study_store)
        await execute("DELETE_STUDY_SUBJECT", {"name": "physics"}, study_store)
        assert [s["name"] for s in study_store.subjects] == ["Chemistry"]
        assert [c["name"] for c in study_store.chapters] == ["Waves Lab"]
        assert study_store.parts == []


class TestProgress:
    @pytest.mark.asyncio
    async def test_chapter_progress_is_clamped(self, study_store):
        await _seed(study_store)
        await execute(
            "UPDATE_STUDY_PROGRESS",
            {"subject_name": "physics", "chapter_name": "waves", "progress_percentage": 140},
            study_store,
        )
        assert _chapter(study_store, "Waves")["progress_percentage"] == 100.0

    @pytest.mark.asyncio
    async def test_part_progress_with_mastery(self, study_store):
        await _seed(study_store)
        await execute(
            "UPDATE_STUDY_PROGRESS",
            {"subject_name": "physics", "chapter_name": "waves", "part_name": "intro",
             "progress_percentage": "-5", "mastery_rating": 4},
            study_store,
        )
        part = _part(study_store, "Intro")
        assert part["progress_percentage"] == 0.0
        assert part["mastery_rating"] == 4
        assert _chapter(study_store, "Waves")["progress_percentage"] == 0.0

    @pytest.mark.asyncio
    async def test_mastery_out_of_range_is_skipped(self, study_store):
        await _seed(study_store)
        outcome = await execute(
            "UPDATE_STUDY_PROGRESS",
            {"chapter_name": "waves", "progress_percentage": 50, "mastery_rating": 9},
            study_store,
        )
        assert outcome.status is OutcomeStatus.SKIPPED


class TestPresets:
    @pytest.mark.asyncio
    async def test_sub_presets_never_match(self, study_store):
        await _seed(study_store)
        parent = study_store.add_preset("Revision plan")
        study_store.add_preset("Exam drill step", parent_id=parent["id"])

        outcome = await execute(
            "APPLY_STUDY_PRESET", {"preset_name": "exam drill", "chapter_name": "waves"}, study_store,
        )

        assert outcome.status is OutcomeStatus.NOT_FOUND
        assert study_store.applied_presets == []

    @pytest.mark.asyncio
    async def test_chapter_scope(self, study_store):
        await _seed(study_store)
        preset = study_store.add_preset("Exam drill")
        await execute(
            "APPLY_STUDY_PRESET",
            {"preset_name": "drill", "subject_name": "physics", "chapter_name": "waves"},
            study_store,
        )
        assert study_store.applied_presets == [{
            "preset_id": preset["id"],
            "chapter_id": _chapter(study_store, "Waves")["id"],
            "part_id": None,
        }]

    @pytest.mark.asyncio
    async def test_all_parts_scope(self, study_store):
        await _seed(study_store)
        study_store.add_preset("Exam drill")
        await execute(
            "APPLY_STUDY_PRESET",
            {"preset_name": "drill", "subject_name": "physics", "chapter_name": "waves", "part_name": "All Parts"},
            study_store,
        )
        assert study_store.applied_presets[0]["part_id"] == ALL_PARTS

    @pytest.mark.asyncio
    async def test_single_part_scope(self, study_store):
        await _seed(study_store)
        study_store.add_preset("Exam drill")
        await execute(
            "APPLY_STUDY_PRESET",
            {"preset_name": "drill", "subject_name": "physics", "chapter_name": "waves", "part_name": "interference"},
            study_store,
        )
        assert study_store.applied_presets[0]["part_id"] == _part(study_store, "Interference")["id"]
