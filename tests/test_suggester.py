import json
from datetime import date
import pytest
from unittest.mock import MagicMock, patch
from meal_plan_wizard.config import Config
from meal_plan_wizard.models import CalendarEvent, Recipe
from meal_plan_wizard.suggester import SuggestionError, suggest_replacement, suggest_week

SATURDAY = date(2026, 10, 17)

WEEK_RESPONSE = json.dumps({
    "meals": [
        {"day": 1, "date": "2026-10-17", "recipeId": "r1", "recipeName": "Tacos", "reasoning": "Busy Saturday"},
        {"day": 2, "date": "2026-10-18", "recipeId": "r2", "recipeName": "Lasagna", "reasoning": "Sunday cooking"},
        {"day": 3, "date": "2026-10-19", "recipeId": "bogus", "recipeName": "Stir Fry", "reasoning": "Quick"},
    ],
    "explanation": "A balanced week.",
})


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    return Config()


@pytest.fixture
def recipes():
    return [
        Recipe(id="r1", name="Tacos", time_rating=2, cuisine="Mexican"),
        Recipe(id="r2", name="Lasagna", time_rating=4, yields_leftovers=True),
        Recipe(id="r3", name="Stir Fry", time_rating=1),
        Recipe(id="r4", name="Roast Chicken", time_rating=5),
    ]


@pytest.fixture
def events():
    return [CalendarEvent(id="e1", title="Soccer", start_time="2026-10-17", all_day=True)]


def _mock_client(text):
    mock_client = MagicMock()
    mock_client.messages.create.return_value.content = [MagicMock(text=text)]
    return mock_client


def test_suggest_week_returns_meals(config, recipes, events):
    mock_client = _mock_client(WEEK_RESPONSE)
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=mock_client):
        result = suggest_week(recipes, events, SATURDAY, config, selected_ids=["r2"])

    assert [m.recipe_id for m in result.proposed_meals] == ["r1", "r2", "r3"]
    assert [m.date for m in result.proposed_meals] == [SATURDAY, date(2026, 10, 18), date(2026, 10, 19)]
    assert result.explanation == "A balanced week."
    assert len({m.meal_id for m in result.proposed_meals}) == 3


def test_suggest_week_marks_user_selected_recipes(config, recipes, events):
    mock_client = _mock_client(WEEK_RESPONSE)
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=mock_client):
        result = suggest_week(recipes, events, SATURDAY, config, selected_ids=["r2"])

    flags = {m.recipe_id: m.is_ai_suggested for m in result.proposed_meals}
    assert flags == {"r1": True, "r2": False, "r3": True}


def test_suggest_week_prompt_includes_schedule_and_preferences(config, recipes, events):
    mock_client = _mock_client(WEEK_RESPONSE)
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=mock_client):
        suggest_week(recipes, events, SATURDAY, config, description="More fish", selected_ids=["r2"])

    kwargs = mock_client.messages.create.call_args[1]
    prompt = kwargs["messages"][0]["content"]
    assert "More fish" in prompt
    assert "Soccer (all day)" in prompt
    assert "BUSY DAY" in prompt
    assert "[ID: r2]" in prompt and "USER SELECTED" in prompt
    assert kwargs["model"] == config.anthropic_model
    assert kwargs["system"] == config.system_prompt


def test_suggest_week_accepts_fenced_json(config, recipes):
    mock_client = _mock_client(f"Here is the plan:\n```json\n{WEEK_RESPONSE}\n```")
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=mock_client):
        result = suggest_week(recipes, [], SATURDAY, config)
    assert len(result.proposed_meals) == 3


def test_suggest_week_skips_days_outside_week(config, recipes):
    response = json.dumps({"meals": [
        {"day": 9, "recipeId": "r1"},
        {"day": "x", "recipeId": "r1"},
        {"day": 7, "recipeId": "r4"},
    ]})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        result = suggest_week(recipes, [], SATURDAY, config)
    assert [(m.day, m.date) for m in result.proposed_meals] == [(7, date(2026, 10, 23))]


def test_unknown_recipe_falls_back_to_unused_recipe(config, recipes):
    response = json.dumps({"meals": [
        {"day": 1, "recipeId": "r1"},
        {"day": 2, "recipeId": "nope", "recipeName": "Mystery"},
    ]})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        result = suggest_week(recipes, [], SATURDAY, config)
    assert [m.recipe_id for m in result.proposed_meals] == ["r1", "r2"]


def test_suggest_week_invalid_json_raises(config, recipes):
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client("not json at all")):
        with pytest.raises(SuggestionError, match="parse"):
            suggest_week(recipes, [], SATURDAY, config)


def test_suggest_week_no_meals_raises(config, recipes):
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client('{"meals": []}')):
        with pytest.raises(SuggestionError, match="no usable meals"):
            suggest_week(recipes, [], SATURDAY, config)


def test_suggest_week_requires_recipes(config):
    with pytest.raises(SuggestionError, match="No recipes found"):
        suggest_week([], [], SATURDAY, config)


def test_suggest_week_requires_api_key(monkeypatch, recipes):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    with pytest.raises(SuggestionError, match="ANTHROPIC_API_KEY"):
        suggest_week(recipes, [], SATURDAY, Config())


def test_suggest_replacement_excludes_used_recipes(config, recipes):
    response = json.dumps({"recipeId": "r3", "recipeName": "Stir Fry", "reasoning": "Fast"})
    mock_client = _mock_client(response)
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=mock_client):
        meal = suggest_replacement(
            recipes, 2, date(2026, 10, 18), [], config, exclude_ids=["r1", "r2"], current_recipe_id="r2"
        )

    assert meal.recipe_id == "r3"
    assert meal.is_ai_suggested is True
    assert meal.ai_reasoning == "Fast"
    prompt = mock_client.messages.create.call_args[1]["messages"][0]["content"]
    assert "[ID: r1]" not in prompt
    assert "[ID: r2]" in prompt


def test_suggest_replacement_prefers_quick_recipe_on_busy_day(config, recipes, events):
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client('{"recipeId": "nope"}')):
        meal = suggest_replacement(recipes, 1, SATURDAY, events, config, exclude_ids=["r1"])
    assert meal.recipe_id == "r3"


def test_suggest_replacement_nothing_available(config, recipes):
    with pytest.raises(SuggestionError, match="No available recipes"):
        suggest_replacement(recipes, 1, SATURDAY, [], config, exclude_ids=["r1", "r2", "r3", "r4"])


def test_suggest_week_skips_meals_that_are_not_objects(config, recipes):
    response = json.dumps({"meals": ["Tacos on Saturday", {"day": 2, "recipeId": "r2"}]})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        result = suggest_week(recipes, [], SATURDAY, config)
    assert [m.recipe_id for m in result.proposed_meals] == ["r2"]


def test_suggest_week_only_non_objects_raises(config, recipes):
    response = json.dumps({"meals": ["Tacos on Saturday"]})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        with pytest.raises(SuggestionError, match="no usable meals"):
            suggest_week(recipes, [], SATURDAY, config)


def test_suggest_week_meals_not_a_list_raises(config, recipes):
    response = json.dumps({"meals": "Tacos every night"})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        with pytest.raises(SuggestionError, match="list of meals"):
            suggest_week(recipes, [], SATURDAY, config)


def test_suggest_replacement_ignores_non_string_recipe_id(config, recipes):
    response = json.dumps({"recipeId": ["r3"], "recipeName": "Stir Fry", "reasoning": 42})
    with patch("meal_plan_wizard.suggester.anthropic.Anthropic", return_value=_mock_client(response)):
        meal = suggest_replacement(recipes, 2, date(2026, 10, 18), [], config)
    assert meal.recipe_id == "r3"
    assert meal.ai_reasoning == "42"
