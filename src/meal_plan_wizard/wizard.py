"""In-progress weekly plan draft and the transitions every wizard step uses.

None of these operations talk to the network and none of them fail: an
operation naming an id that is not in the draft leaves the draft unchanged.
"""
from __future__ import annotations
import logging
from datetime import date
from uuid import uuid4
from meal_plan_wizard.dates import date_for_day, events_in_week, next_anchor, parse_local_date
from meal_plan_wizard.models import (
    CalendarEvent,
    EventAssignment,
    GroceryItemDraft,
    ProposedMeal,
    StapleItem,
    WizardDraft,
)

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def new_draft(today: date, week_of: date | None = None) -> WizardDraft:
    return WizardDraft(week_of=week_of or next_anchor(today))


class MealPlanWizard:
    def __init__(self, draft: WizardDraft):
        self.draft = draft

    # Week and preferences

    def set_week_of(self, week_of: date | str) -> None:
        """Move the draft to another week.

        Events, their assignments and carried-over staples belong to the
        old week and are dropped so the next step reloads them; meals keep
        their day index and take that day's date in the new week.
        """
        week_of = parse_local_date(week_of)
        if week_of == self.draft.week_of:
            return
        logger.debug("Week changed from %s to %s", self.draft.week_of, week_of)
        self.draft.week_of = week_of
        self.draft.week_events = []
        self.draft.event_assignments = []
        self.draft.staple_items = []
        self.draft.staples_loaded = False
        for meal in self.draft.proposed_meals:
            meal.date = date_for_day(week_of, meal.day)

    def set_user_description(self, description: str) -> None:
        self.draft.user_description = description

    def toggle_recipe_selection(self, recipe_id: str) -> None:
        selected = self.draft.selected_recipe_ids
        if recipe_id in selected:
            self.draft.selected_recipe_ids = [r for r in selected if r != recipe_id]
        else:
            self.draft.selected_recipe_ids = selected + [recipe_id]

    def set_selected_recipe_ids(self, recipe_ids: list[str]) -> None:
        self.draft.selected_recipe_ids = list(dict.fromkeys(recipe_ids))

    def has_progress(self) -> bool:
        return bool(self.draft.proposed_meals or self.draft.selected_recipe_ids)

    # Meals

    def set_proposed_meals(self, meals: list[ProposedMeal]) -> None:
        self.draft.proposed_meals = list(meals)

    def set_week_events(self, events: list[CalendarEvent]) -> None:
        self.draft.week_events = events_in_week(events, self.draft.week_of)
        in_week = {e.id for e in self.draft.week_events}
        self.draft.event_assignments = [a for a in self.draft.event_assignments if a.event_id in in_week]

    def set_ai_explanation(self, explanation: str) -> None:
        self.draft.ai_explanation = explanation

    def find_meal(self, meal_id: str) -> ProposedMeal | None:
        return next((m for m in self.draft.proposed_meals if m.meal_id == meal_id), None)

    def meals_for_day(self, day: int) -> list[ProposedMeal]:
        return sorted((m for m in self.draft.proposed_meals if m.day == day), key=lambda m: m.sort_order)

    def _next_sort_order(self, day: int, excluding: str | None = None) -> int:
        orders = [m.sort_order for m in self.draft.proposed_meals if m.day == day and m.meal_id != excluding]
        return max(orders) + 1 if orders else 0

    def update_meal_by_id(self, meal_id: str, **changes) -> None:
        changes.pop("meal_id", None)
        self.draft.proposed_meals = [
            m.model_copy(update=changes) if m.meal_id == meal_id else m
            for m in self.draft.proposed_meals
        ]

    def remove_meal(self, meal_id: str) -> None:
        self.draft.proposed_meals = [m for m in self.draft.proposed_meals if m.meal_id != meal_id]

    def add_meal_to_day(self, day: int, meal_date: date | str, **fields) -> ProposedMeal:
        for slot_field in ("meal_id", "day", "date", "sort_order"):
            fields.pop(slot_field, None)
        meal = ProposedMeal(
            **fields,
            meal_id=new_id("meal"),
            day=day,
            date=parse_local_date(meal_date),
            sort_order=self._next_sort_order(day),
        )
        self.draft.proposed_meals = self.draft.proposed_meals + [meal]
        return meal

    def swap_meals_by_id(self, meal_id_a: str, meal_id_b: str) -> None:
        """Exchange the day slots of two meals.

        Only day, date and sort order move; recipe, assignment and every
        other field stay with their meal id.
        """
        if meal_id_a == meal_id_b:
            return
        a = self.find_meal(meal_id_a)
        b = self.find_meal(meal_id_b)
        if a is None or b is None:
            return
        slot_a = {"day": a.day, "date": a.date, "sort_order": a.sort_order}
        slot_b = {"day": b.day, "date": b.date, "sort_order": b.sort_order}
        self.update_meal_by_id(meal_id_a, **slot_b)
        self.update_meal_by_id(meal_id_b, **slot_a)

    def move_meal_to_day(self, meal_id: str, day: int) -> None:
        meal = self.find_meal(meal_id)
        if meal is None or meal.day == day:
            return
        self.update_meal_by_id(
            meal_id,
            day=day,
            date=date_for_day(self.draft.week_of, day),
            sort_order=self._next_sort_order(day, excluding=meal_id),
        )

    # Staples

    def set_staple_items(self, staples: list[StapleItem]) -> None:
        self.draft.staple_items = list(staples)
        self.draft.staples_loaded = True

    def add_staple_item(self, **fields) -> StapleItem:
        fields.pop("id", None)
        staple = StapleItem(**fields, id=new_id("staple"))
        self.draft.staple_items = self.draft.staple_items + [staple]
        return staple

    def update_staple_item(self, staple_id: str, **changes) -> None:
        changes.pop("id", None)
        self.draft.staple_items = [
            s.model_copy(update=changes) if s.id == staple_id else s
            for s in self.draft.staple_items
        ]

    def remove_staple_item(self, staple_id: str) -> None:
        self.draft.staple_items = [s for s in self.draft.staple_items if s.id != staple_id]

    # Event assignments

    def set_event_assignments(self, assignments: list[EventAssignment]) -> None:
        self.draft.event_assignments = list(assignments)

    def assigned_user_ids(self, event_id: str) -> list[str]:
        for assignment in self.draft.event_assignments:
            if assignment.event_id == event_id:
                return list(assignment.assigned_user_ids)
        return []

    def update_event_assignment(self, event_id: str, user_ids: list[str]) -> None:
        replacement = EventAssignment(event_id=event_id, assigned_user_ids=list(user_ids))
        others = [a for a in self.draft.event_assignments if a.event_id != event_id]
        if len(others) == len(self.draft.event_assignments):
            self.draft.event_assignments = others + [replacement]
        else:
            self.draft.event_assignments = [
                replacement if a.event_id == event_id else a for a in self.draft.event_assignments
            ]

    def toggle_event_user_assignment(self, event_id: str, user_id: str) -> None:
        user_ids = self.assigned_user_ids(event_id)
        if user_id in user_ids:
            user_ids.remove(user_id)
        else:
            user_ids.append(user_id)
        self.update_event_assignment(event_id, user_ids)

    def unassigned_events(self) -> list[CalendarEvent]:
        return [e for e in self.draft.week_events if not self.assigned_user_ids(e.id)]

    # Groceries

    def set_grocery_items(self, items: list[GroceryItemDraft]) -> None:
        self.draft.grocery_items = list(items)

    def merge_staples(self) -> None:
        """Append staples the generated list doesn't already cover."""
        covered = {i.ingredient_id for i in self.draft.grocery_items if i.ingredient_id}
        covered_names = {i.ingredient_name.lower() for i in self.draft.grocery_items}
        merged = []
        for staple in self.draft.staple_items:
            if staple.ingredient_id and staple.ingredient_id in covered:
                continue
            if staple.ingredient_name.lower() in covered_names:
                continue
            if staple.ingredient_id:
                covered.add(staple.ingredient_id)
            covered_names.add(staple.ingredient_name.lower())
            merged.append(
                GroceryItemDraft(
                    id=new_id("staple"),
                    ingredient_id=staple.ingredient_id,
                    ingredient_name=staple.ingredient_name,
                    department=staple.department,
                    store_id=staple.store_id,
                    store_name=staple.store_name,
                    total_quantity=staple.quantity,
                    unit=staple.unit,
                    is_staple=True,
                )
            )
        self.draft.grocery_items = self.draft.grocery_items + merged

    def find_grocery_item(self, item_id: str) -> GroceryItemDraft | None:
        return next((i for i in self.draft.grocery_items if i.id == item_id), None)

    def add_grocery_item(self, **fields) -> GroceryItemDraft:
        fields.pop("id", None)
        fields.setdefault("is_manual_add", True)
        item = GroceryItemDraft(**fields, id=new_id("manual"))
        self.draft.grocery_items = self.draft.grocery_items + [item]
        return item

    def update_grocery_item(self, item_id: str, **changes) -> None:
        changes.pop("id", None)
        self.draft.grocery_items = [
            i.model_copy(update=changes) if i.id == item_id else i
            for i in self.draft.grocery_items
        ]

    def remove_grocery_item(self, item_id: str) -> None:
        self.draft.grocery_items = [i for i in self.draft.grocery_items if i.id != item_id]

    def toggle_grocery_item_checked(self, item_id: str) -> None:
        item = self.find_grocery_item(item_id)
        if item is not None:
            self.update_grocery_item(item_id, checked=not item.checked)

    def unchecked_grocery_items(self) -> list[GroceryItemDraft]:
        return [i for i in self.draft.grocery_items if not i.checked]

    def reset(self, today: date) -> None:
        self.draft = new_draft(today)
