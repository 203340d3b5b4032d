from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from pydantic import ValidationError
from meal_plan_wizard.models import WizardDraft
from meal_plan_wizard.wizard import MealPlanWizard

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


class DraftStore:
    def __init__(self, base_dir: Path | None = None, ttl_hours: int = 24):
        self.base_dir = base_dir or (Path.home() / ".meal_plan_wizard")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.ttl = timedelta(hours=ttl_hours)
        self._path = self.base_dir / "draft.json"

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, draft: WizardDraft) -> None:
        draft.saved_at = _now()
        self._path.write_text(draft.model_dump_json(indent=2))

    def load(self) -> WizardDraft:
        if not self._path.exists():
            raise FileNotFoundError("No plan in progress. Run: mealplan start")
        return WizardDraft.model_validate_json(self._path.read_text())

    def load_restorable(self) -> WizardDraft | None:
        """Return the saved draft if it is recent and has meaningful progress.

        Anything else on disk is deleted: an expired draft, one with nothing
        worth restoring, or a file that no longer parses.
        """
        if not self._path.exists():
            return None
        try:
            draft = self.load()
        except ValidationError:
            logger.warning("Discarding unreadable draft file %s", self._path.name)
            self.discard()
            return None
        if draft.saved_at is None or _now() - draft.saved_at > self.ttl:
            logger.warning("Discarding draft for week of %s saved more than %s ago", draft.week_of, self.ttl)
            self.discard()
            return None
        if not MealPlanWizard(draft).has_progress():
            self.discard()
            return None
        return draft

    def discard(self) -> None:
        self._path.unlink(missing_ok=True)
