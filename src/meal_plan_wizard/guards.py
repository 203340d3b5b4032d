from __future__ import annotations
from datetime import date
from enum import Enum
from typing import Iterable
from meal_plan_wizard.models import WizardDraft


class Step(str, Enum):
    INPUT = "input"
    REVIEW = "review"
    STAPLES = "staples"
    EVENTS = "events"
    GROCERIES = "groceries"
    FINALIZE = "finalize"


# Command that shows each step
STEP_COMMANDS = {
    Step.INPUT: "mealplan suggest",
    Step.REVIEW: "mealplan meals",
    Step.STAPLES: "mealplan staples",
    Step.EVENTS: "mealplan events",
    Step.GROCERIES: "mealplan groceries",
    Step.FINALIZE: "mealplan finalize",
}


def redirect_for(step: Step, draft: WizardDraft) -> Step | None:
    """Step to send the user back (or past) to when ``step`` cannot be shown."""
    if step is Step.INPUT:
        return None
    if not draft.proposed_meals:
        return Step.INPUT
    if step is Step.EVENTS and not draft.week_events:
        return Step.GROCERIES
    return None


def _unassigned(draft: WizardDraft) -> int:
    assigned = {a.event_id for a in draft.event_assignments if a.assigned_user_ids}
    return sum(1 for e in draft.week_events if e.id not in assigned)


def blockers(step: Step, draft: WizardDraft, planned_weeks: Iterable[date] = ()) -> list[str]:
    problems = []
    if step in (Step.INPUT, Step.FINALIZE) and draft.week_of in set(planned_weeks):
        problems.append("A plan already exists for this week. Please select a different week.")
    if step in (Step.REVIEW, Step.FINALIZE) and not draft.proposed_meals:
        problems.append("No meals planned yet.")
    if step in (Step.EVENTS, Step.FINALIZE):
        count = _unassigned(draft)
        if count:
            problems.append(f"{count} event(s) still need someone assigned.")
    return problems


def next_step(step: Step, draft: WizardDraft) -> Step | None:
    if step is Step.STAPLES:
        return Step.EVENTS if draft.week_events else Step.GROCERIES
    order = list(Step)
    index = order.index(step)
    return order[index + 1] if index + 1 < len(order) else None
