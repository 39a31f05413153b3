import pytest

from identity import AccountIdentifier, AnonymousIdentifier
from interview_progress import ProgressStore, derive_submission

WHO = AccountIdentifier(user_id="u1")


def test_derive_submission_requires_final_step_and_sections():
    assert derive_submission(5, {"general": True}, "now") == ("completed", "now")
    assert derive_submission(5, None, "now") == ("in-progress", None)
    assert derive_submission(3, {"general": True}, "now") == ("in-progress", None)


def test_missing_record_loads_as_none(tmp_db):
    assert ProgressStore(tmp_db).load_progress(WHO) is None


def test_navigation_updates_are_in_progress(tmp_db):
    store = ProgressStore(tmp_db)
    record = store.update_progress(WHO, 2)
    assert record.current_step == 2
    assert record.submission_status == "in-progress"
    assert record.submitted_at is None

    reached_review = store.update_progress(WHO, 5)
    assert reached_review.submission_status == "in-progress"
    assert store.load_progress(WHO).current_step == 5


def test_final_step_with_sections_completes(tmp_db):
    store = ProgressStore(tmp_db)
    store.update_progress(WHO, 4, None)
    record = store.update_progress(WHO, 5, {"general": True, "culture": False})
    assert record.submission_status == "completed"
    assert record.submitted_at is not None
    assert record.completed_sections == {"general": True, "culture": False}


def test_section_map_is_kept_when_omitted(tmp_db):
    store = ProgressStore(tmp_db)
    store.update_progress(WHO, 4, {"general": True})
    record = store.update_progress(WHO, 3)
    assert record.completed_sections == {"general": True}


def test_completed_record_is_terminal(tmp_db):
    store = ProgressStore(tmp_db)
    done = store.update_progress(WHO, 5, {"general": True})
    again = store.update_progress(WHO, 2)
    assert again.submission_status == "completed"
    assert again.current_step == 5
    assert again.submitted_at == done.submitted_at


def test_step_out_of_range_is_rejected(tmp_db):
    store = ProgressStore(tmp_db)
    with pytest.raises(ValueError):
        store.update_progress(WHO, 0)
    with pytest.raises(ValueError):
        store.update_progress(WHO, 6)


def test_list_progress_rebuilds_identifiers(tmp_db):
    store = ProgressStore(tmp_db)
    store.update_progress(WHO, 2)
    store.update_progress(AnonymousIdentifier(email="guest@example.com"), 3)
    identifiers = {identifier for identifier, _ in store.list_progress()}
    assert identifiers == {WHO, AnonymousIdentifier(email="guest@example.com")}
