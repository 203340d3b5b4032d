from __future__ import annotations
import logging
from datetime import date
from typing import Any, Optional
import httpx
from meal_plan_wizard.config import Config
from meal_plan_wizard.models import (
    CalendarEvent,
    FinalizeResult,
    GroceryItemDraft,
    HouseholdMember,
    ProposedMeal,
    Recipe,
    StapleItem,
    StoreInfo,
    WeeklyPlanSummary,
    WizardDraft,
)

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "meal-plan-wizard/0.1",
}


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback


class HouseholdClient:
    """Thin wrappers over the household server's JSON endpoints.

    Each call is a single round trip. A non-success response raises
    ApiError carrying the server's ``error`` text, or ``fallback`` when the
    body has none; network failures raise ApiError with a generic message.
    """

    def __init__(self, config: Config):
        headers = dict(HEADERS)
        if config.household_api_token:
            headers["Authorization"] = f"Bearer {config.household_api_token}"
        self._http = httpx.Client(
            base_url=config.household_api_url,
            headers=headers,
            timeout=config.request_timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> HouseholdClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise ApiError(f"Request to {path} timed out.")
        except httpx.TransportError:
            raise ApiError("Could not reach the household server. Check your connection and try again.")

        if response.status_code >= 400:
            raise ApiError(_error_message(response, fallback), status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(fallback, status_code=response.status_code) from e

    def list_recipes(self, status: str | None = None) -> list[Recipe]:
        params = {"status": status} if status else None
        data = self._request("GET", "/api/recipes", "Failed to load recipes", params=params)
        return [Recipe.model_validate(r) for r in data.get("recipes", [])]

    def list_weekly_plans(self) -> list[WeeklyPlanSummary]:
        data = self._request("GET", "/api/weekly-plans", "Failed to fetch weekly plans")
        return [WeeklyPlanSummary.model_validate(p) for p in data.get("weeklyPlans") or []]

    def planned_weeks(self) -> set[date]:
        return {plan.week_of for plan in self.list_weekly_plans()}

    def list_events(self) -> list[CalendarEvent]:
        data = self._request("GET", "/api/events", "Failed to load events")
        return [CalendarEvent.model_validate(e) for e in data.get("events") or []]

    def list_members(self) -> list[HouseholdMember]:
        data = self._request("GET", "/api/household/members", "Failed to fetch household members")
        return [HouseholdMember.model_validate(m) for m in data.get("members") or []]

    def list_stores(self) -> list[StoreInfo]:
        data = self._request("GET", "/api/stores", "Failed to fetch stores")
        return [StoreInfo.model_validate(s) for s in data.get("stores") or []]

    def previous_staples(self, week_of: date) -> tuple[list[StapleItem], Optional[date]]:
        data = self._request(
            "GET",
            "/api/weekly-plans/previous-staples",
            "Failed to fetch previous staples",
            params={"weekOf": week_of.isoformat()},
        )
        staples = [StapleItem.model_validate(s) for s in data.get("staples") or []]
        previous = data.get("previousWeekOf")
        return staples, date.fromisoformat(previous[:10]) if previous else None

    def generate_grocery_list(
        self,
        meals: list[ProposedMeal],
        staples: list[StapleItem] | None = None,
    ) -> list[GroceryItemDraft]:
        payload = {
            "meals": [m.to_wire() for m in meals],
            "staples": [s.to_wire() for s in staples or []],
        }
        data = self._request(
            "POST", "/api/weekly-plans/generate-grocery-list", "Failed to generate grocery list", json=payload
        )
        return [GroceryItemDraft.model_validate(i) for i in data.get("groceryItems") or []]

    def create_complete(self, draft: WizardDraft, notes: str | None = None) -> FinalizeResult:
        payload = {
            "weekOf": draft.week_of.isoformat(),
            "meals": [m.to_wire() for m in draft.proposed_meals],
            "groceryItems": [i.to_wire() for i in draft.grocery_items if not i.checked],
            "eventAssignments": [a.to_wire() for a in draft.event_assignments if a.assigned_user_ids],
        }
        if notes:
            payload["notes"] = notes
        data = self._request(
            "POST", "/api/weekly-plans/create-complete", "Failed to create weekly plan", json=payload
        )
        return FinalizeResult.model_validate(data)

    def import_recipe_from_url(self, url: str) -> Recipe:
        data = self._request(
            "POST", "/api/recipes/create-from-url", "Failed to import recipe", json={"url": url}
        )
        if not data.get("recipe"):
            raise ApiError("Failed to import recipe")
        return Recipe.model_validate(data["recipe"])
