import logging
from datetime import date, datetime, timedelta, timezone
import pytest
from meal_plan_wizard.drafts import DraftStore
from meal_plan_wizard.models import ProposedMeal, WizardDraft


@pytest.fixture
def store(tmp_path):
    return DraftStore(base_dir=tmp_path)


def _draft_with_meal():
    return WizardDraft(
        week_of=date(2026, 10, 17),
        proposed_meals=[ProposedMeal(meal_id="m1", day=1, date=date(2026, 10, 17), recipe_name="Tacos")],
    )


def _backdate(store, hours):
    draft = store.load()
    draft.saved_at = datetime.now(tz=timezone.utc) - timedelta(hours=hours)
    (store.base_dir / "draft.json").write_text(draft.model_dump_json())


def test_save_and_load(store, tmp_path):
    store.save(_draft_with_meal())
    assert (tmp_path / "draft.json").exists()
    loaded = store.load()
    assert loaded.proposed_meals[0].recipe_name == "Tacos"
    assert loaded.saved_at is not None


def test_load_raises_when_none(store):
    with pytest.raises(FileNotFoundError, match="No plan in progress"):
        store.load()


def test_restorable_returns_recent_draft_with_progress(store):
    store.save(_draft_with_meal())
    restored = store.load_restorable()
    assert restored is not None
    assert restored.week_of == date(2026, 10, 17)


def test_restorable_ignores_missing_file(store):
    assert store.load_restorable() is None


def test_restorable_discards_expired_draft(store):
    store.save(_draft_with_meal())
    _backdate(store, 25)
    assert store.load_restorable() is None
    assert not store.exists()


def test_restorable_keeps_draft_within_ttl(store):
    store.save(_draft_with_meal())
    _backdate(store, 23)
    assert store.load_restorable() is not None


def test_restorable_discards_draft_without_progress(store):
    store.save(WizardDraft(week_of=date(2026, 10, 17), user_description="something light"))
    assert store.load_restorable() is None
    assert not store.exists()


def test_restorable_keeps_draft_with_only_selected_recipes(store):
    store.save(WizardDraft(week_of=date(2026, 10, 17), selected_recipe_ids=["r1"]))
    assert store.load_restorable() is not None


def test_corrupt_draft_is_discarded_and_logged(store, tmp_path, caplog):
    (tmp_path / "draft.json").write_text("{not json")
    with caplog.at_level(logging.WARNING, logger="meal_plan_wizard.drafts"):
        assert store.load_restorable() is None
    assert "unreadable draft" in caplog.text
    assert not store.exists()


def test_custom_ttl(tmp_path):
    store = DraftStore(base_dir=tmp_path, ttl_hours=1)
    store.save(_draft_with_meal())
    _backdate(store, 2)
    assert store.load_restorable() is None


def test_discard_without_file_is_fine(store):
    store.discard()
    assert not store.exists()
