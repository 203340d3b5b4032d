from __future__ import annotations
import logging
from contextlib import contextmanager
from datetime import date
import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from meal_plan_wizard.client import ApiError, HouseholdClient
from meal_plan_wizard.config import Config
from meal_plan_wizard.constants import ANCHOR_WEEKDAY, DAY_NAMES, DAY_NAMES_SHORT, time_rating_label
from meal_plan_wizard.dates import anchor_options, date_for_day, event_date, event_time_label, format_week_range, today_in
from meal_plan_wizard.drafts import DraftStore
from meal_plan_wizard.guards import STEP_COMMANDS, Step, blockers, next_step, redirect_for
from meal_plan_wizard.suggester import SuggestionError, suggest_replacement, suggest_week
from meal_plan_wizard.views import (
    format_grocery_list,
    group_by_department,
    group_by_store_and_department,
    quantity_label,
    unchecked_count,
)
from meal_plan_wizard.wizard import MealPlanWizard, new_draft

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def _config() -> Config:
    try:
        return Config()
    except ValidationError as e:
        _fail(f"Invalid configuration: {e.errors()[0]['msg']}")


def _store(config: Config) -> DraftStore:
    return DraftStore(base_dir=config.wizard_dir, ttl_hours=config.draft_ttl_hours)


def _load(store: DraftStore) -> MealPlanWizard:
    try:
        return MealPlanWizard(store.load())
    except FileNotFoundError as e:
        _fail(str(e))
    except ValidationError:
        _fail("The saved plan could not be read. Run: mealplan start")


def _require(step: Step, wizard: MealPlanWizard) -> None:
    redirect = redirect_for(step, wizard.draft)
    if redirect is Step.INPUT:
        _fail(f"No meals planned yet. Run: {STEP_COMMANDS[Step.INPUT]}")
    if redirect is not None:
        _fail(f"Nothing to do at this step. Run: {STEP_COMMANDS[redirect]}")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        _fail(f"'{value}' is not a date (expected YYYY-MM-DD)")


def _check_anchor(week_of: date) -> None:
    if week_of.weekday() != ANCHOR_WEEKDAY:
        _fail(f"Weeks start on {DAY_NAMES[0]}; {week_of.isoformat()} is a {week_of:%A}.")


def _check_day(day: int) -> None:
    if not 1 <= day <= 7:
        _fail(f"Day must be between 1 ({DAY_NAMES[0]}) and 7 ({DAY_NAMES[6]}).")


@contextmanager
def _household(config: Config):
    client = HouseholdClient(config)
    try:
        yield client
    except ApiError as e:
        _fail(str(e))
    finally:
        client.close()


def _print_next(step: Step, wizard: MealPlanWizard) -> None:
    upcoming = next_step(step, wizard.draft)
    if upcoming is not None:
        console.print(f"\nNext: [bold]{STEP_COMMANDS[upcoming]}[/bold]")


@click.group()
@click.option("--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool):
    """Meal Plan Wizard: build a week of dinners and the grocery list to match."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@cli.command()
def weeks():
    """Show the weeks you can plan, marking those that already have a plan."""
    config = _config()
    with _household(config) as client:
        planned = client.planned_weeks()

    table = Table(title="Weeks")
    table.add_column("Week of", style="cyan")
    table.add_column("Dates")
    table.add_column("Status")
    for option in anchor_options(today_in(config.timezone), planned_weeks=planned):
        status = "[yellow]Planned[/yellow]" if option.has_plan else "[green]Open[/green]"
        table.add_row(option.date.isoformat(), format_week_range(option.date), status)
    console.print(table)


@cli.command()
@click.option("--week", "week", default=None, help="Saturday the week starts on (YYYY-MM-DD)")
@click.option("--description", default="", help="Preferences for this week's meals")
def start(week: str | None, description: str):
    """Start planning a week, or resume the plan in progress."""
    config = _config()
    store = _store(config)

    saved = store.load_restorable()
    if saved is not None:
        resume = click.confirm(
            f"You have an unfinished plan for the week of {saved.week_of.isoformat()}. Resume it?",
            default=True,
        )
        if resume:
            console.print(f"[green]✓[/green] Resumed plan for [bold]{format_week_range(saved.week_of)}[/bold]")
            wizard = MealPlanWizard(saved)
            upcoming = Step.REVIEW if wizard.draft.proposed_meals else Step.INPUT
            console.print(f"Run [bold]{STEP_COMMANDS[upcoming]}[/bold] to continue.")
            return
        store.discard()
        console.print("Discarded the saved plan.")

    today = today_in(config.timezone)
    week_of = _parse_date(week) if week else None
    if week_of is not None:
        _check_anchor(week_of)
    draft = new_draft(today, week_of)
    draft.user_description = description
    store.save(draft)
    console.print(f"\n[green]✓[/green] Planning the week of [bold]{format_week_range(draft.week_of)}[/bold]")
    console.print(
        "Pick favourites with [bold]mealplan select[/bold], then run [bold]mealplan suggest[/bold].\n"
    )


@cli.command()
def discard():
    """Throw away the plan in progress."""
    _store(_config()).discard()
    console.print("[green]✓[/green] Discarded the plan in progress.")


@cli.command()
@click.argument("week_of")
def week(week_of: str):
    """Move the plan in progress to another week."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    new_week = _parse_date(week_of)
    _check_anchor(new_week)
    wizard.set_week_of(new_week)
    if wizard.draft.proposed_meals:
        with _household(config) as client:
            wizard.set_week_events(client.list_events())
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Now planning [bold]{format_week_range(new_week)}[/bold]")


@cli.command()
@click.argument("text")
def describe(text: str):
    """Describe what you feel like eating this week."""
    store = _store(_config())
    wizard = _load(store)
    wizard.set_user_description(text)
    store.save(wizard.draft)
    console.print("[green]✓[/green] Preferences saved.")


@cli.command()
@click.option("--status", default=None, help="Only recipes with this status (active, wishlist, archived)")
def recipes(status: str | None):
    """List household recipes, marking the ones selected for this week."""
    config = _config()
    store = _store(config)
    selected = set(_load(store).draft.selected_recipe_ids) if store.exists() else set()
    with _household(config) as client:
        found = client.list_recipes(status=status)

    if not found:
        console.print("No recipes found.")
        return
    table = Table(title="Recipes")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Time")
    table.add_column("Cuisine")
    for recipe in found:
        mark = "[green]✓[/green]" if recipe.id in selected else ""
        table.add_row(mark, recipe.id, recipe.name, time_rating_label(recipe.time_rating), recipe.cuisine or "-")
    console.print(table)


@cli.command()
@click.argument("recipe_ids", nargs=-1, required=True)
def select(recipe_ids: tuple[str, ...]):
    """Toggle recipes you want included in this week's plan."""
    store = _store(_config())
    wizard = _load(store)
    for recipe_id in recipe_ids:
        wizard.toggle_recipe_selection(recipe_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] {len(wizard.draft.selected_recipe_ids)} recipe(s) selected.")


@cli.command()
def suggest():
    """Ask for a week of dinners based on your recipes, schedule and preferences."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    draft = wizard.draft

    with _household(config) as client:
        problems = blockers(Step.INPUT, draft, client.planned_weeks())
        if problems:
            _fail(problems[0])
        household_recipes = client.list_recipes()
        try:
            events = client.list_events()
        except ApiError as e:
            logger.warning("Continuing without calendar events: %s", e)
            events = []

    wizard.set_week_events(events)
    console.print(f"[dim]Planning {format_week_range(draft.week_of)} from {len(household_recipes)} recipes...[/dim]")
    try:
        suggestion = suggest_week(
            household_recipes,
            wizard.draft.week_events,
            draft.week_of,
            config,
            description=draft.user_description,
            selected_ids=draft.selected_recipe_ids,
        )
    except SuggestionError as e:
        store.save(wizard.draft)
        _fail(str(e))

    wizard.set_proposed_meals(suggestion.proposed_meals)
    wizard.set_ai_explanation(suggestion.explanation)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Suggested {len(suggestion.proposed_meals)} meals.\n")
    _print_meals(wizard)
    _print_next(Step.INPUT, wizard)


def _print_meals(wizard: MealPlanWizard) -> None:
    draft = wizard.draft
    table = Table(title=f"Dinners for {format_week_range(draft.week_of)}")
    table.add_column("Day")
    table.add_column("Date")
    table.add_column("Meal ID", style="cyan")
    table.add_column("Recipe")
    table.add_column("Time")
    table.add_column("Cook")
    table.add_column("Source")
    for day in range(1, 8):
        meals = wizard.meals_for_day(day)
        if not meals:
            table.add_row(DAY_NAMES_SHORT[day - 1], date_for_day(draft.week_of, day).isoformat(), "", "[dim]-[/dim]", "", "", "")
        for meal in meals:
            table.add_row(
                DAY_NAMES_SHORT[day - 1],
                meal.date.isoformat(),
                meal.meal_id,
                meal.custom_meal_name or meal.recipe_name,
                time_rating_label(meal.recipe_time_rating),
                meal.assigned_user_id or "-",
                "AI" if meal.is_ai_suggested else "You",
            )
    console.print(table)
    if draft.ai_explanation:
        console.print(f"\n[dim]{draft.ai_explanation}[/dim]")


@cli.command()
def meals():
    """Review the proposed dinners."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    _print_meals(wizard)
    _print_next(Step.REVIEW, wizard)


@cli.group("meal")
def meal():
    """Change the proposed dinners."""
    pass


def _meal_or_fail(wizard: MealPlanWizard, meal_id: str):
    found = wizard.find_meal(meal_id)
    if found is None:
        _fail(f"No meal with id '{meal_id}'. Use 'mealplan meals' to see meal ids.")
    return found


@meal.command("swap")
@click.argument("first_id")
@click.argument("second_id")
def meal_swap(first_id: str, second_id: str):
    """Swap the days of two meals."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    first = _meal_or_fail(wizard, first_id)
    second = _meal_or_fail(wizard, second_id)
    wizard.swap_meals_by_id(first_id, second_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Swapped {first.recipe_name} and {second.recipe_name}.")


@meal.command("move")
@click.argument("meal_id")
@click.argument("day", type=int)
def meal_move(meal_id: str, day: int):
    """Move a meal to another day (1 = Saturday ... 7 = Friday)."""
    _check_day(day)
    store = _store(_config())
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    moved = _meal_or_fail(wizard, meal_id)
    wizard.move_meal_to_day(meal_id, day)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Moved {moved.recipe_name} to {DAY_NAMES[day - 1]}.")


@meal.command("remove")
@click.argument("meal_id")
def meal_remove(meal_id: str):
    """Remove a meal from the plan."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    removed = _meal_or_fail(wizard, meal_id)
    wizard.remove_meal(meal_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Removed: {removed.recipe_name}")


@meal.command("add")
@click.argument("day", type=int)
@click.option("--recipe", "recipe_id", default=None, help="Recipe ID to cook that day")
@click.option("--name", "custom_name", default=None, help="A meal that isn't a saved recipe (e.g. 'Eat out')")
def meal_add(day: int, recipe_id: str | None, custom_name: str | None):
    """Add a meal to a day from your recipes or as a free-text meal."""
    _check_day(day)
    if not recipe_id and not custom_name:
        _fail("Give a --recipe ID or a --name.")
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.REVIEW, wizard)

    fields = {"recipe_name": custom_name or "", "custom_meal_name": custom_name}
    if recipe_id:
        with _household(config) as client:
            recipe = next((r for r in client.list_recipes() if r.id == recipe_id), None)
        if recipe is None:
            _fail(f"No recipe with id '{recipe_id}'. Use 'mealplan recipes' to see recipe ids.")
        fields.update(recipe_id=recipe.id, recipe_name=recipe.name, recipe_time_rating=recipe.time_rating)

    added = wizard.add_meal_to_day(day, date_for_day(wizard.draft.week_of, day), **fields)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Added {added.custom_meal_name or added.recipe_name} on {DAY_NAMES[day - 1]}.")


@meal.command("replace")
@click.argument("meal_id")
def meal_replace(meal_id: str):
    """Ask for a different recipe for one meal."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    current = _meal_or_fail(wizard, meal_id)
    others = [m.recipe_id for m in wizard.draft.proposed_meals if m.recipe_id and m.meal_id != meal_id]
    day_events = [e for e in wizard.draft.week_events if event_date(e) == current.date]

    with _household(config) as client:
        household_recipes = client.list_recipes()
    try:
        replacement = suggest_replacement(
            household_recipes,
            current.day,
            current.date,
            day_events,
            config,
            exclude_ids=others,
            current_recipe_id=current.recipe_id,
        )
    except SuggestionError as e:
        _fail(str(e))

    wizard.update_meal_by_id(
        meal_id,
        recipe_id=replacement.recipe_id,
        recipe_name=replacement.recipe_name,
        recipe_time_rating=replacement.recipe_time_rating,
        custom_meal_name=None,
        ai_reasoning=replacement.ai_reasoning,
        is_ai_suggested=True,
    )
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] {current.recipe_name} → [bold]{replacement.recipe_name}[/bold]")
    if replacement.ai_reasoning:
        console.print(f"  [dim]{replacement.ai_reasoning}[/dim]")


@meal.command("assign")
@click.argument("meal_id")
@click.argument("user_id", required=False)
def meal_assign(meal_id: str, user_id: str | None):
    """Set who cooks a meal (omit USER_ID to clear)."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.REVIEW, wizard)
    assigned = _meal_or_fail(wizard, meal_id)
    wizard.update_meal_by_id(meal_id, assigned_user_id=user_id)
    store.save(wizard.draft)
    who = user_id or "nobody"
    console.print(f"[green]✓[/green] {assigned.recipe_name} is cooked by {who}.")


@cli.command()
def staples():
    """Show this week's staples, carrying them over from last week's plan."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.STAPLES, wizard)

    if not wizard.draft.staples_loaded and not wizard.draft.staple_items:
        with _household(config) as client:
            carried, previous_week = client.previous_staples(wizard.draft.week_of)
        wizard.set_staple_items(carried)
        store.save(wizard.draft)
        if previous_week:
            console.print(f"[dim]Carried over {len(carried)} staple(s) from the week of {previous_week.isoformat()}.[/dim]")

    if not wizard.draft.staple_items:
        console.print("No staples this week. Use [bold]mealplan staple add[/bold] to add some.")
    else:
        console.print("\n[bold]Staples[/bold] (bought every week)\n")
        for s in wizard.draft.staple_items:
            label = f"{s.quantity} {s.unit}".strip()
            console.print(f"  • [cyan]{s.id}[/cyan] {label} {s.ingredient_name} [dim]({s.department})[/dim]")
    _print_next(Step.STAPLES, wizard)


@cli.group("staple")
def staple():
    """Manage this week's staples."""
    pass


@staple.command("add")
@click.argument("name")
@click.option("--quantity", default="1", show_default=True)
@click.option("--unit", default="")
@click.option("--department", default="Other", show_default=True)
def staple_add(name: str, quantity: str, unit: str, department: str):
    """Add a staple to this week's list."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.STAPLES, wizard)
    wizard.add_staple_item(ingredient_name=name, quantity=quantity, unit=unit, department=department)
    wizard.draft.staples_loaded = True
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Added staple: [bold]{f'{quantity} {unit}'.strip()} {name}[/bold]")


@staple.command("edit")
@click.argument("staple_id")
@click.option("--quantity", default=None)
@click.option("--unit", default=None)
def staple_edit(staple_id: str, quantity: str | None, unit: str | None):
    """Change a staple's quantity or unit."""
    store = _store(_config())
    wizard = _load(store)
    if not any(s.id == staple_id for s in wizard.draft.staple_items):
        _fail(f"No staple with id '{staple_id}'.")
    changes = {k: v for k, v in {"quantity": quantity, "unit": unit}.items() if v is not None}
    wizard.update_staple_item(staple_id, **changes)
    store.save(wizard.draft)
    console.print("[green]✓[/green] Staple updated.")


@staple.command("remove")
@click.argument("staple_id")
def staple_remove(staple_id: str):
    """Remove a staple from this week's list."""
    store = _store(_config())
    wizard = _load(store)
    removed = next((s for s in wizard.draft.staple_items if s.id == staple_id), None)
    if removed is None:
        _fail(f"No staple with id '{staple_id}'.")
    wizard.remove_staple_item(staple_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Removed staple: [bold]{removed.ingredient_name}[/bold]")


@cli.command()
def events():
    """Show this week's events and who is covering each one."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.EVENTS, wizard)

    with _household(config) as client:
        try:
            members = {m.id: m.label for m in client.list_members()}
        except ApiError as e:
            logger.warning("Could not load household members: %s", e)
            members = {}

    table = Table(title=f"Events for {format_week_range(wizard.draft.week_of)}")
    table.add_column("Day")
    table.add_column("Event ID", style="cyan")
    table.add_column("Title")
    table.add_column("Time")
    table.add_column("Assigned")
    for event in wizard.draft.week_events:
        names = [members.get(uid, uid) for uid in wizard.assigned_user_ids(event.id)]
        table.add_row(
            f"{event_date(event):%a}",
            event.id,
            event.title,
            event_time_label(event),
            ", ".join(names) if names else "[red]Unassigned[/red]",
        )
    console.print(table)

    if members:
        console.print("\nHousehold: " + ", ".join(f"[cyan]{uid}[/cyan] {label}" for uid, label in members.items()))
    for problem in blockers(Step.EVENTS, wizard.draft):
        console.print(f"\n[yellow]{problem}[/yellow] Use [bold]mealplan event assign EVENT_ID USER_ID[/bold].")
    if not blockers(Step.EVENTS, wizard.draft):
        _print_next(Step.EVENTS, wizard)


@cli.group("event")
def event():
    """Assign household members to this week's events."""
    pass


@event.command("assign")
@click.argument("event_id")
@click.argument("user_id")
def event_assign(event_id: str, user_id: str):
    """Toggle whether a household member covers an event."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.EVENTS, wizard)
    if not any(e.id == event_id for e in wizard.draft.week_events):
        _fail(f"No event with id '{event_id}' this week.")
    wizard.toggle_event_user_assignment(event_id, user_id)
    store.save(wizard.draft)
    if user_id in wizard.assigned_user_ids(event_id):
        console.print(f"[green]✓[/green] Assigned {user_id}.")
    else:
        console.print(f"[green]✓[/green] Unassigned {user_id}.")


def _print_groceries(wizard: MealPlanWizard, config: Config, stores=None) -> None:
    items = wizard.draft.grocery_items
    if stores is not None:
        sections = [
            (store_name, departments) for store_name, departments in group_by_store_and_department(items, stores)
        ]
    else:
        sections = [(None, group_by_department(items, config.department_order))]

    for store_name, departments in sections:
        if store_name:
            console.print(f"\n[bold magenta]{store_name}[/bold magenta]")
        for department, dept_items in departments:
            console.print(f"\n[bold]{department}[/bold]")
            for item in dept_items:
                tag = " (staple)" if item.is_staple else " (added)" if item.is_manual_add else ""
                line = escape(f"  {'[x]' if item.checked else '[ ]'} {quantity_label(item)} {item.ingredient_name}{tag}")
                if item.checked:
                    line = f"[dim]{line}[/dim]"
                sources = ", ".join(b.recipe_name for b in item.recipe_breakdown)
                if sources:
                    line += f" [dim]({escape(sources)})[/dim]"
                console.print(f"{line} [cyan]{item.id}[/cyan]")

    console.print(f"\n[bold]{unchecked_count(items)}[/bold] of {len(items)} items to buy.")


@cli.command()
@click.option("--regenerate", is_flag=True, help="Rebuild the list from the current meals and staples")
@click.option("--by-store", is_flag=True, help="Group by store before department")
def groceries(regenerate: bool, by_store: bool):
    """Build and show the grocery list for this week's meals and staples."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.GROCERIES, wizard)

    stores = None
    with _household(config) as client:
        if regenerate or not wizard.draft.grocery_items:
            console.print("[dim]Building grocery list...[/dim]")
            items = client.generate_grocery_list(wizard.draft.proposed_meals, wizard.draft.staple_items)
            wizard.set_grocery_items(items)
            wizard.merge_staples()
            store.save(wizard.draft)
        if by_store:
            stores = client.list_stores()

    if not wizard.draft.grocery_items:
        console.print("Nothing to buy. Use [bold]mealplan grocery add[/bold] to add items.")
        return
    _print_groceries(wizard, config, stores)
    _print_next(Step.GROCERIES, wizard)


@cli.group("grocery")
def grocery():
    """Edit this week's grocery list."""
    pass


def _grocery_or_fail(wizard: MealPlanWizard, item_id: str):
    found = wizard.find_grocery_item(item_id)
    if found is None:
        _fail(f"No grocery item with id '{item_id}'. Use 'mealplan groceries' to see item ids.")
    return found


@grocery.command("add")
@click.argument("name")
@click.option("--quantity", default="1", show_default=True)
@click.option("--unit", default="")
@click.option("--department", default="Pantry", show_default=True)
@click.option("--store", "store_name", default=None, help="Store to buy it at")
def grocery_add(name: str, quantity: str, unit: str, department: str, store_name: str | None):
    """Add an item to the grocery list."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.GROCERIES, wizard)
    wizard.add_grocery_item(
        ingredient_name=name, total_quantity=quantity, unit=unit, department=department, store_name=store_name
    )
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Added: {f'{quantity} {unit}'.strip()} {name}")


@grocery.command("edit")
@click.argument("item_id")
@click.option("--name", default=None)
@click.option("--quantity", default=None)
@click.option("--unit", default=None)
@click.option("--store", "store_name", default=None)
def grocery_edit(item_id: str, name: str | None, quantity: str | None, unit: str | None, store_name: str | None):
    """Rename, requantify or move an item to another store."""
    store = _store(_config())
    wizard = _load(store)
    _grocery_or_fail(wizard, item_id)
    changes = {
        "ingredient_name": name,
        "total_quantity": quantity,
        "unit": unit,
        "store_name": store_name,
    }
    wizard.update_grocery_item(item_id, **{k: v for k, v in changes.items() if v is not None})
    store.save(wizard.draft)
    console.print("[green]✓[/green] Item updated.")


@grocery.command("remove")
@click.argument("item_id")
def grocery_remove(item_id: str):
    """Remove an item from the grocery list."""
    store = _store(_config())
    wizard = _load(store)
    removed = _grocery_or_fail(wizard, item_id)
    wizard.remove_grocery_item(item_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] Removed: {removed.ingredient_name}")


@grocery.command("check")
@click.argument("item_ids", nargs=-1, required=True)
def grocery_check(item_ids: tuple[str, ...]):
    """Toggle items you already have (checked items are left off the list)."""
    store = _store(_config())
    wizard = _load(store)
    for item_id in item_ids:
        _grocery_or_fail(wizard, item_id)
        wizard.toggle_grocery_item_checked(item_id)
    store.save(wizard.draft)
    console.print(f"[green]✓[/green] {unchecked_count(wizard.draft.grocery_items)} items to buy.")


@grocery.command("have")
def grocery_have():
    """Walk through the list and check off what you already have."""
    store = _store(_config())
    wizard = _load(store)
    _require(Step.GROCERIES, wizard)
    to_check = [i for i in wizard.unchecked_grocery_items() if not i.is_manual_add]
    if not to_check:
        console.print("Nothing to check.")
        return

    console.print(f"\n[bold]Pantry check:[/bold] {len(to_check)} item(s) to confirm\n")
    for item in to_check:
        while True:
            answer = click.prompt(
                f"  Do you have {quantity_label(item)} {item.ingredient_name}? (y/n)"
            ).strip().lower()
            if answer in ("y", "yes"):
                wizard.toggle_grocery_item_checked(item.id)
                break
            elif answer in ("n", "no"):
                break
            else:
                console.print("  [yellow]Please enter y or n[/yellow]")

    store.save(wizard.draft)
    console.print(f"\n[bold]{unchecked_count(wizard.draft.grocery_items)}[/bold] items to buy.")


@cli.command()
@click.option("--notes", default=None, help="Notes to save with the plan")
def finalize(notes: str | None):
    """Save the plan, its meals and the grocery list to the household."""
    config = _config()
    store = _store(config)
    wizard = _load(store)
    _require(Step.FINALIZE, wizard)

    with _household(config) as client:
        problems = blockers(Step.FINALIZE, wizard.draft, client.planned_weeks())
        if problems:
            _fail(problems[0])
        try:
            result = client.create_complete(wizard.draft, notes=notes)
        except ApiError as e:
            err_console.print("Your plan is still saved. Run [bold]mealplan finalize[/bold] to try again.")
            _fail(str(e))

    to_buy = wizard.unchecked_grocery_items()
    output = format_grocery_list(to_buy, config.department_order)
    output_path = config.wizard_dir / f"{wizard.draft.week_of.isoformat()}.txt"
    output_path.write_text(output)
    store.discard()

    console.print(f"\n[green]✓[/green] Saved plan [bold]{result.weekly_plan_id}[/bold] for {format_week_range(wizard.draft.week_of)}")
    console.print(f"  {result.meal_count} meals, {result.item_count} grocery items, {result.event_assignment_count} event assignments")
    console.print(f"\n{output}")
    console.print(f"\n[dim]Saved to {output_path}[/dim]")


@cli.group("recipe")
def recipe():
    """Manage household recipes."""
    pass


@recipe.command("import")
@click.argument("url")
def recipe_import(url: str):
    """Import a recipe from a web page into the household's wishlist."""
    if not url.startswith(("http://", "https://")):
        _fail(f"'{url}' is not a web address.")
    config = _config()
    console.print("[dim]Importing...[/dim]")
    with _household(config) as client:
        imported = client.import_recipe_from_url(url)
    console.print(f"[green]✓[/green] Imported [bold]{imported.name}[/bold] ({imported.id})")
