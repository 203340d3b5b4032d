from __future__ import annotations
import datetime as dt
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Records exchanged with the household API as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Recipe(WireModel):
    id: str
    name: str
    description: Optional[str] = None
    time_rating: Optional[int] = None
    cost_rating: Optional[int] = None
    yields_leftovers: bool = False
    category: Optional[str] = None
    cuisine: Optional[str] = None
    last_made: Optional[str] = None
    status: Optional[str] = None
    average_rating: Optional[float] = None


class CalendarEvent(WireModel):
    id: str
    title: str
    start_time: str
    end_time: Optional[str] = None
    all_day: bool = False


class HouseholdMember(WireModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.email or self.id


class WeeklyPlanSummary(WireModel):
    id: str
    week_of: dt.date
    notes: Optional[str] = None

    @field_validator("week_of", mode="before")
    @classmethod
    def calendar_day(cls, v):
        # the server stores weekOf as midnight UTC
        return v[:10] if isinstance(v, str) else v


class ProposedMeal(WireModel):
    meal_id: str
    day: int = Field(ge=1, le=7)
    date: dt.date
    recipe_id: Optional[str] = None
    recipe_name: str
    recipe_time_rating: Optional[int] = None
    custom_meal_name: Optional[str] = None
    ai_reasoning: Optional[str] = None
    is_ai_suggested: bool = False
    sort_order: int = 0
    assigned_user_id: Optional[str] = None


class StapleItem(WireModel):
    id: str
    ingredient_id: Optional[str] = None
    ingredient_name: str
    department: str = "Other"
    store_id: Optional[str] = None
    store_name: Optional[str] = None
    quantity: str = "1"
    unit: str = ""


class EventAssignment(WireModel):
    event_id: str
    assigned_user_ids: list[str] = Field(default_factory=list)


class RecipeBreakdown(WireModel):
    recipe_id: str
    recipe_name: str
    quantity: str
    unit: str = ""


class GroceryItemDraft(WireModel):
    id: str
    ingredient_id: Optional[str] = None
    ingredient_name: str
    department: str = "Other"
    store_id: Optional[str] = None
    store_name: Optional[str] = None
    total_quantity: str = "1"
    unit: str = ""
    recipe_breakdown: list[RecipeBreakdown] = Field(default_factory=list)
    is_manual_add: bool = False
    is_staple: bool = False
    checked: bool = False


class StoreInfo(WireModel):
    id: str
    name: str
    department_order: Optional[list[str]] = None


class WizardDraft(BaseModel):
    version: int = 1
    week_of: dt.date
    user_description: str = ""
    selected_recipe_ids: list[str] = Field(default_factory=list)
    proposed_meals: list[ProposedMeal] = Field(default_factory=list)
    week_events: list[CalendarEvent] = Field(default_factory=list)
    staple_items: list[StapleItem] = Field(default_factory=list)
    staples_loaded: bool = False
    event_assignments: list[EventAssignment] = Field(default_factory=list)
    grocery_items: list[GroceryItemDraft] = Field(default_factory=list)
    ai_explanation: Optional[str] = None
    saved_at: Optional[dt.datetime] = None


class FinalizeResult(WireModel):
    weekly_plan_id: str
    grocery_list_id: Optional[str] = None
    meal_count: int = 0
    item_count: int = 0
    event_assignment_count: int = 0
