from datetime import date
from meal_plan_wizard.models import (
    CalendarEvent,
    FinalizeResult,
    GroceryItemDraft,
    ProposedMeal,
    Recipe,
    StoreInfo,
    WeeklyPlanSummary,
    WizardDraft,
)


def test_recipe_reads_camel_case():
    recipe = Recipe.model_validate(
        {"id": "r1", "name": "Tacos", "timeRating": 2, "yieldsLeftovers": True, "cuisine": "Mexican"}
    )
    assert recipe.time_rating == 2
    assert recipe.yields_leftovers is True


def test_event_defaults():
    event = CalendarEvent.model_validate({"id": "e1", "title": "Soccer", "startTime": "2026-10-17T17:00:00Z"})
    assert event.all_day is False
    assert event.end_time is None


def test_weekly_plan_week_of_accepts_timestamp():
    plan = WeeklyPlanSummary.model_validate({"id": "p1", "weekOf": "2026-10-17T00:00:00.000Z"})
    assert plan.week_of == date(2026, 10, 17)


def test_proposed_meal_wire_format():
    meal = ProposedMeal(meal_id="m1", day=1, date=date(2026, 10, 17), recipe_id="r1", recipe_name="Tacos")
    wire = meal.to_wire()
    assert wire["mealId"] == "m1"
    assert wire["date"] == "2026-10-17"
    assert wire["recipeName"] == "Tacos"
    assert "customMealName" not in wire


def test_proposed_meal_day_must_be_in_week():
    import pytest
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        ProposedMeal(meal_id="m1", day=8, date=date(2026, 10, 24), recipe_name="Tacos")


def test_grocery_item_defaults():
    item = GroceryItemDraft(id="g1", ingredient_name="onion")
    assert item.department == "Other"
    assert item.total_quantity == "1"
    assert item.checked is False
    assert item.recipe_breakdown == []


def test_store_info_reads_department_order():
    store = StoreInfo.model_validate({"id": "s1", "name": "Costco", "departmentOrder": ["Bakery", "Produce"]})
    assert store.department_order == ["Bakery", "Produce"]


def test_finalize_result_reads_counts():
    result = FinalizeResult.model_validate(
        {"weeklyPlanId": "wp1", "groceryListId": "gl1", "mealCount": 7, "itemCount": 20, "eventAssignmentCount": 2}
    )
    assert result.meal_count == 7
    assert result.event_assignment_count == 2


def test_draft_json_roundtrip(tmp_path):
    draft = WizardDraft(
        week_of=date(2026, 10, 17),
        selected_recipe_ids=["r1"],
        proposed_meals=[ProposedMeal(meal_id="m1", day=2, date=date(2026, 10, 18), recipe_name="Soup")],
    )
    path = tmp_path / "draft.json"
    path.write_text(draft.model_dump_json())
    loaded = WizardDraft.model_validate_json(path.read_text())
    assert loaded.version == 1
    assert loaded.proposed_meals[0].date == date(2026, 10, 18)
    assert loaded.staples_loaded is False
