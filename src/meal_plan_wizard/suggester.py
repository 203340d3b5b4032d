from __future__ import annotations
import json
import logging
import re
from datetime import date
from typing import Iterable, NamedTuple
import anthropic
from meal_plan_wizard.config import Config
from meal_plan_wizard.constants import DAY_NAMES, time_rating_label
from meal_plan_wizard.dates import date_for_day, event_date, event_time_label, week_dates
from meal_plan_wizard.models import CalendarEvent, ProposedMeal, Recipe
from meal_plan_wizard.wizard import new_id

logger = logging.getLogger(__name__)


class SuggestionError(Exception):
    pass


class WeekSuggestion(NamedTuple):
    proposed_meals: list[ProposedMeal]
    explanation: str


def _extract_json(text: str) -> str:
    """Pull the JSON object out of a reply that may be fenced or wrapped in prose."""
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if fenced:
        return fenced.group(1).strip()
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        return match.group(0)
    return text.strip()


def _recipe_line(recipe: Recipe, selected: bool = False) -> str:
    details = [
        f"Time: {time_rating_label(recipe.time_rating)}",
        f"Cuisine: {recipe.cuisine or 'N/A'}",
        f"Category: {recipe.category or 'entree'}",
    ]
    if recipe.yields_leftovers:
        details.append("Yields leftovers")
    if selected:
        details.append("USER SELECTED")
    return f"- {recipe.name} [ID: {recipe.id}] ({', '.join(details)})"


def _event_summary(events: Iterable[CalendarEvent]) -> str:
    return ", ".join(
        f"{e.title} (all day)" if e.all_day else f"{e.title} at {event_time_label(e)}" for e in events
    )


def _schedule_context(events: list[CalendarEvent], week_of: date) -> str:
    lines = []
    for index, day in enumerate(week_dates(week_of)):
        day_events = [e for e in events if event_date(e) == day]
        label = f"{DAY_NAMES[index]} ({day.isoformat()})"
        if day_events:
            lines.append(f"{label}: {_event_summary(day_events)} - BUSY DAY, suggest quick meal")
        else:
            lines.append(f"{label}: No events - flexible schedule")
    return "\n".join(lines)


def _ask(config: Config, prompt: str) -> dict:
    if not config.anthropic_api_key:
        raise SuggestionError("ANTHROPIC_API_KEY environment variable is required for meal suggestions")
    client = anthropic.Anthropic(api_key=config.anthropic_api_key)

    logger.debug("Suggestion prompt is %d chars", len(prompt))
    response = client.messages.create(
        model=config.anthropic_model,
        max_tokens=4096,
        system=config.system_prompt,
        messages=[{"role": "user", "content": prompt}],
    )

    raw_text = response.content[0].text
    try:
        data = json.loads(_extract_json(raw_text))
    except (json.JSONDecodeError, AttributeError) as e:
        raise SuggestionError(
            f"Failed to parse meal suggestion as JSON: {e}\n\nRaw response:\n{raw_text}"
        ) from e
    if not isinstance(data, dict):
        raise SuggestionError("Meal suggestion was not a JSON object")
    return data


def _reasoning(item: dict) -> str | None:
    reasoning = item.get("reasoning")
    return str(reasoning) if reasoning is not None else None


def _resolve_recipe(
    recipe_id: str | None,
    recipe_name: str | None,
    recipes: list[Recipe],
    used_ids: set[str],
    preferred_ids: list[str],
) -> Recipe:
    by_id = {r.id: r for r in recipes}
    if isinstance(recipe_id, str) and recipe_id in by_id:
        return by_id[recipe_id]

    logger.warning("Model returned unknown recipe id %r (%s); finding fallback", recipe_id, recipe_name)
    wanted = str(recipe_name or "").lower()
    for recipe in recipes:
        if recipe.name.lower() == wanted and recipe.id not in used_ids:
            return recipe
    for recipe in recipes:
        if recipe.id not in used_ids and (not preferred_ids or recipe.id in preferred_ids):
            return recipe
    for recipe in recipes:
        if recipe.id not in used_ids:
            return recipe
    return recipes[0]


def suggest_week(
    recipes: list[Recipe],
    events: list[CalendarEvent],
    week_of: date,
    config: Config,
    description: str = "",
    selected_ids: Iterable[str] = (),
) -> WeekSuggestion:
    """Ask the model for one dinner per day of the week starting ``week_of``."""
    if not recipes:
        raise SuggestionError("No recipes found in your household. Please add some recipes first.")
    selected = list(selected_ids)
    dates = week_dates(week_of)

    recipe_list = "\n".join(_recipe_line(r, r.id in selected) for r in recipes)
    prompt = (
        f"Plan dinners for the week starting {dates[0].isoformat()}.\n\n"
        f"Household preferences:\n{description or 'No specific preferences provided.'}\n\n"
        f"Schedule:\n{_schedule_context(events, week_of)}\n\n"
        f"Available recipes:\n{recipe_list}\n\n"
        + ("Every USER SELECTED recipe must appear in the plan.\n\n" if selected else "")
        + "Return a JSON object:\n"
        '{"meals": [{"day": 1, "date": "' + dates[0].isoformat() + '", "recipeId": "...", '
        '"recipeName": "...", "reasoning": "..."}, ...], "explanation": "..."}\n'
        f"Days are numbered 1 ({DAY_NAMES[0]}, {dates[0].isoformat()}) to 7 ({DAY_NAMES[6]}, {dates[6].isoformat()})."
    )
    data = _ask(config, prompt)

    suggested = data.get("meals") or []
    if not isinstance(suggested, list):
        raise SuggestionError("Meal suggestion did not contain a list of meals")

    used: set[str] = set()
    meals = []
    for item in suggested:
        if not isinstance(item, dict):
            logger.warning("Skipping suggested meal that is not an object: %r", item)
            continue
        try:
            day = int(item.get("day"))
        except (TypeError, ValueError):
            logger.warning("Skipping suggested meal without a day: %r", item)
            continue
        if not 1 <= day <= 7:
            logger.warning("Skipping suggested meal for day %s", day)
            continue
        recipe = _resolve_recipe(item.get("recipeId"), item.get("recipeName"), recipes, used, selected)
        used.add(recipe.id)
        meals.append(
            ProposedMeal(
                meal_id=new_id("meal"),
                day=day,
                date=date_for_day(week_of, day),
                recipe_id=recipe.id,
                recipe_name=recipe.name,
                recipe_time_rating=recipe.time_rating,
                ai_reasoning=_reasoning(item),
                is_ai_suggested=recipe.id not in selected,
            )
        )
    if not meals:
        raise SuggestionError("The meal suggestion contained no usable meals")
    return WeekSuggestion(proposed_meals=meals, explanation=str(data.get("explanation") or ""))


def suggest_replacement(
    recipes: list[Recipe],
    day: int,
    meal_date: date,
    events: list[CalendarEvent],
    config: Config,
    exclude_ids: Iterable[str] = (),
    current_recipe_id: str | None = None,
) -> ProposedMeal:
    """Suggest a different recipe for one day's slot.

    Recipes already used elsewhere in the week are excluded, except the
    one currently in the slot.
    """
    excluded = set(exclude_ids)
    available = [r for r in recipes if r.id not in excluded or r.id == current_recipe_id]
    if not available:
        raise SuggestionError("No available recipes to suggest")

    busy = bool(events)
    day_name = DAY_NAMES[day - 1] if 1 <= day <= 7 else "Unknown"
    prompt = (
        f"Suggest one dinner for {day_name} ({meal_date.isoformat()}).\n"
        f"Events that day: {_event_summary(events) if busy else 'No events'}\n"
        + ("This is a BUSY DAY, prefer a quick recipe.\n" if busy else "")
        + ("Choose something different from the recipe currently planned.\n" if current_recipe_id else "")
        + "\nAvailable recipes:\n"
        + "\n".join(_recipe_line(r) for r in available)
        + '\n\nReturn a JSON object: {"recipeId": "...", "recipeName": "...", "reasoning": "..."}'
    )
    data = _ask(config, prompt)

    by_id = {r.id: r for r in available}
    recipe_id = data.get("recipeId")
    recipe = by_id.get(recipe_id) if isinstance(recipe_id, str) else None
    if recipe is None:
        logger.warning("Model returned unknown recipe id %r; finding fallback", data.get("recipeId"))
        wanted = str(data.get("recipeName") or "").lower()
        recipe = next((r for r in available if r.name.lower() == wanted), None)
    if recipe is None and busy:
        recipe = next((r for r in available if r.time_rating and r.time_rating <= 2), None)
    if recipe is None:
        recipe = available[0]

    return ProposedMeal(
        meal_id=new_id("meal"),
        day=day,
        date=meal_date,
        recipe_id=recipe.id,
        recipe_name=recipe.name,
        recipe_time_rating=recipe.time_rating,
        ai_reasoning=_reasoning(data),
        is_ai_suggested=True,
    )
