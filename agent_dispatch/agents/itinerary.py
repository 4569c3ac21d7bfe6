"""
Itinerary Agent for the travel planner preset.

This module implements the integrator of the travel preset: it turns the
flights, hotels and activities gathered in the plan into a day-by-day
itinerary and produces the consolidated response for the user. When the
model is unavailable it still builds a default itinerary from the plan.
"""

import copy
from datetime import date
from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, AgentResult, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import AssistantMessage, ToolDefinition
from agent_dispatch.utils import (
    ValidationError,
    add_days,
    generate_id,
    parse_iso_date,
    utc_now,
)

DEFAULT_TRIP_DAYS = 3
CHECK_IN_TIME = "15:00"
CHECK_OUT_TIME = "11:00"
FIRST_ACTIVITY_HOUR = 9
ACTIVITY_SPACING_HOURS = 2

# (label, start time, duration in minutes, hours that count as occupied)
MEALS = (
    ("Breakfast", "08:00", 60, range(7, 10)),
    ("Lunch", "13:00", 60, range(12, 15)),
    ("Dinner", "19:00", 90, range(18, 21)),
)

ITINERARY_INSTRUCTIONS = """You are a specialized travel itinerary agent.
Your goal is to create comprehensive, well-organized travel plans that incorporate flight, accommodation, and activity details.
Use the generate_itinerary and modify_itinerary tools to create and update travel plans.
Prioritize logical, time-efficient itineraries that respect travel times, group activities by proximity,
account for check-in/check-out times and flight schedules, and include meal breaks.
Present itineraries in a clear, chronological format with timing details."""

ITINERARY_TOOLS = [
    ToolDefinition(
        name="generate_itinerary",
        description="Generate a structured day-by-day travel itinerary",
        parameters={
            "destination": {
                "type": "string",
                "description": "Main destination for the trip",
            },
            "start_date": {
                "type": "string",
                "description": "Start date of the trip in YYYY-MM-DD format",
            },
            "end_date": {
                "type": "string",
                "description": "End date of the trip in YYYY-MM-DD format",
            },
            "include_flights": {
                "type": "boolean",
                "description": "Whether to include flight information",
            },
            "include_hotels": {
                "type": "boolean",
                "description": "Whether to include hotel information",
            },
            "include_activities": {
                "type": "boolean",
                "description": "Whether to include activities",
            },
        },
        required=("destination",),
    ),
    ToolDefinition(
        name="modify_itinerary",
        description="Modify an existing itinerary with new information",
        parameters={
            "itinerary_id": {
                "type": "string",
                "description": "Identifier of the existing itinerary to modify",
            },
            "changes": {
                "type": "object",
                "description": "Changes to apply to the itinerary",
                "properties": {
                    "add_activities": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "day": {"type": "integer"},
                                "activity": {"type": "string"},
                                "time": {"type": "string"},
                                "duration": {"type": "integer"},
                            },
                        },
                    },
                    "remove_activities": {
                        "type": "array",
                        "items": {"type": "string"},
                    },
                    "modify_dates": {
                        "type": "object",
                        "properties": {
                            "new_start_date": {"type": "string"},
                            "new_end_date": {"type": "string"},
                        },
                    },
                },
            },
        },
        required=("itinerary_id",),
    ),
]


def primary_flight(flights: Any) -> dict[str, Any] | None:
    """The flight the trip is built around: first search option or the record itself."""
    if isinstance(flights, list):
        flights = flights[0] if flights else None
    if not isinstance(flights, dict):
        return None
    options = flights.get("flights")
    if isinstance(options, list) and options:
        flight = dict(options[0])
        for key in ("return_date", "return_departure_time", "return_arrival_time"):
            if flights.get(key) and key not in flight:
                flight[key] = flights[key]
        return flight
    return flights


def hotel_stays(hotels: Any) -> list[dict[str, Any]]:
    """Hotel records to book: the first search option, or the stored records."""
    if isinstance(hotels, dict):
        options = hotels.get("hotels")
        if isinstance(options, list):
            return [options[0]] if options else []
        return [hotels]
    if isinstance(hotels, list):
        return [hotel for hotel in hotels if isinstance(hotel, dict)]
    return []


def activity_list(activities: Any) -> list[dict[str, Any]]:
    if isinstance(activities, dict):
        activities = activities.get("activities", [activities])
    if isinstance(activities, list):
        return [activity for activity in activities if isinstance(activity, dict)]
    return []


def _time_of(timestamp: str | None) -> str | None:
    if not timestamp or "T" not in timestamp:
        return None
    return timestamp.split("T", 1)[1][:5]


def _hour(time_str: str) -> int:
    return int(time_str.split(":", 1)[0])


def _day_count(start: date, end: date) -> int:
    """Days an itinerary spans; nights between the dates, at least one."""
    return max(1, (end - start).days)


def _hotel_field(stay: dict[str, Any], snake: str, camel: str) -> Any:
    return stay.get(snake, stay.get(camel))


def generate_itinerary(params: dict[str, Any], plan: dict[str, Any]) -> dict[str, Any]:
    """
    Build a day-by-day itinerary from the plan.

    Args:
        params: Tool arguments (destination, dates, include flags)
        plan: Flattened plan with ``flights``, ``hotels`` and ``activities``

    Returns:
        Itinerary dictionary with transportation, accommodations and daily plans
    """
    flight = primary_flight(plan.get("flights"))
    stays = hotel_stays(plan.get("hotels"))
    first_stay = stays[0] if stays else {}

    start = (
        parse_iso_date(params.get("start_date"))
        or parse_iso_date((flight or {}).get("departure_time"))
        or parse_iso_date(_hotel_field(first_stay, "check_in_date", "checkInDate"))
        or utc_now().date()
    )
    end = (
        parse_iso_date(params.get("end_date"))
        or parse_iso_date(_hotel_field(first_stay, "check_out_date", "checkOutDate"))
        or parse_iso_date((flight or {}).get("return_departure_time"))
        or parse_iso_date((flight or {}).get("return_date"))
    )
    if end is None or end < start:
        end = parse_iso_date(add_days(start, DEFAULT_TRIP_DAYS))
    duration = _day_count(start, end)

    itinerary: dict[str, Any] = {
        "id": generate_id("itin"),
        "destination": params.get("destination")
        or (flight or {}).get("destination")
        or first_stay.get("location")
        or "Unknown",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "duration": duration,
        "transportation": [],
        "accommodations": [],
        "daily_plans": [],
    }

    if params.get("include_flights") is not False and flight:
        itinerary["transportation"].append(
            {
                "type": "Flight",
                "operator": flight.get("airline"),
                "departure_location": flight.get("origin"),
                "departure_time": flight.get("departure_time"),
                "arrival_location": flight.get("destination"),
                "arrival_time": flight.get("arrival_time"),
                "confirmation_code": flight.get("id"),
            }
        )
        if flight.get("return_departure_time"):
            itinerary["transportation"].append(
                {
                    "type": "Flight",
                    "operator": flight.get("airline"),
                    "departure_location": flight.get("destination"),
                    "departure_time": flight["return_departure_time"],
                    "arrival_location": flight.get("origin"),
                    "arrival_time": flight.get("return_arrival_time"),
                    "confirmation_code": f"{flight.get('id')}-R",
                }
            )

    if params.get("include_hotels") is not False:
        for stay in stays:
            itinerary["accommodations"].append(
                {
                    "type": "Hotel",
                    "name": stay.get("name"),
                    "location": stay.get("location"),
                    "address": stay.get("address"),
                    "check_in_date": _hotel_field(stay, "check_in_date", "checkInDate"),
                    "check_out_date": _hotel_field(stay, "check_out_date", "checkOutDate"),
                    "confirmation_code": stay.get("id"),
                }
            )

    activities = (
        activity_list(plan.get("activities"))
        if params.get("include_activities") is not False
        else []
    )
    per_day = -(-len(activities) // duration) if activities else 0

    for day in range(1, duration + 1):
        current = add_days(start, day - 1)
        entries = _day_entries(itinerary, day, duration, current)

        first = (day - 1) * per_day
        for offset, activity in enumerate(activities[first : first + per_day]):
            hour = FIRST_ACTIVITY_HOUR + offset * ACTIVITY_SPACING_HOURS
            entries.append(
                {
                    "time": f"{hour:02d}:00",
                    "description": activity.get("name", "Activity"),
                    "location": activity.get("location"),
                    "type": "Activity",
                    "duration": activity.get("duration") or 120,
                }
            )

        for label, time_str, minutes, busy_hours in MEALS:
            if not any(_hour(entry["time"]) in busy_hours for entry in entries):
                entries.append(
                    {
                        "time": time_str,
                        "description": label,
                        "type": "Meal",
                        "duration": minutes,
                    }
                )

        entries.sort(key=lambda entry: entry["time"])
        itinerary["daily_plans"].append({"day": day, "date": current, "activities": entries})

    return itinerary


def _day_entries(
    itinerary: dict[str, Any], day: int, duration: int, current: str
) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    accommodations = itinerary["accommodations"]
    transportation = itinerary["transportation"]

    if day == 1 and accommodations:
        entries.append(
            {
                "time": CHECK_IN_TIME,
                "description": f"Check-in at {accommodations[0]['name']}",
                "type": "Accommodation",
                "duration": 30,
            }
        )
    if day == duration and accommodations:
        entries.append(
            {
                "time": CHECK_OUT_TIME,
                "description": f"Check-out from {accommodations[0]['name']}",
                "type": "Accommodation",
                "duration": 30,
            }
        )

    legs = []
    if day == 1 and transportation:
        legs.append(transportation[0])
    if day == duration and len(transportation) > 1:
        legs.append(transportation[1])
    for leg in legs:
        departure = leg.get("departure_time") or ""
        if departure.split("T", 1)[0] == current and _time_of(departure):
            entries.append(
                {
                    "time": _time_of(departure),
                    "description": (
                        f"Flight from {leg['departure_location']} "
                        f"to {leg['arrival_location']}"
                    ),
                    "type": "Transportation",
                    "duration": 0,
                }
            )
    return entries


def generate_default_itinerary(plan: dict[str, Any]) -> dict[str, Any]:
    """Itinerary covering everything the plan holds, with derived dates."""
    return generate_itinerary(
        {"include_flights": True, "include_hotels": True, "include_activities": True},
        plan,
    )


def _reschedule(itinerary: dict[str, Any], new_dates: dict[str, Any]) -> None:
    start = parse_iso_date(new_dates.get("new_start_date") or itinerary["start_date"])
    end = parse_iso_date(new_dates.get("new_end_date") or itinerary["end_date"])
    if start is None or end is None:
        raise ValidationError("Itinerary dates must be ISO dates (YYYY-MM-DD)")
    if end < start:
        raise ValidationError("Itinerary end date is before its start date")

    duration = _day_count(start, end)
    days = itinerary["daily_plans"][:duration]
    while len(days) < duration:
        days.append({"day": len(days) + 1, "activities": []})
    for index, daily in enumerate(days):
        daily["day"] = index + 1
        daily["date"] = add_days(start, index)

    itinerary.update(
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        duration=duration,
        daily_plans=days,
    )


def modify_itinerary(params: dict[str, Any], plan: dict[str, Any]) -> dict[str, Any]:
    """
    Apply date and activity changes to the stored (or a default) itinerary.

    Date changes are applied first so added activities address the new
    schedule. Days beyond a shortened trip are dropped; extra days start empty.
    """
    itinerary = copy.deepcopy(plan.get("itinerary")) or generate_default_itinerary(plan)
    changes = params.get("changes") or {}

    new_dates = changes.get("modify_dates") or {}
    if new_dates:
        _reschedule(itinerary, new_dates)

    for added in changes.get("add_activities") or []:
        for daily in itinerary["daily_plans"]:
            if daily["day"] == added.get("day"):
                daily["activities"].append(
                    {
                        "time": added.get("time") or "10:00",
                        "description": added.get("activity", "Activity"),
                        "type": "Activity",
                        "duration": added.get("duration") or 60,
                    }
                )
                daily["activities"].sort(key=lambda entry: entry["time"])

    for removed in changes.get("remove_activities") or []:
        for daily in itinerary["daily_plans"]:
            daily["activities"] = [
                entry for entry in daily["activities"] if removed not in entry["description"]
            ]

    return itinerary


def summarize_itinerary(itinerary: dict[str, Any] | None) -> str:
    """Readable overview of an itinerary."""
    if not itinerary:
        return (
            "No itinerary available yet. Please provide destination and travel "
            "dates to create one."
        )

    lines = [
        f"{itinerary['duration']}-day itinerary for {itinerary['destination']} "
        f"({itinerary['start_date']} to {itinerary['end_date']}):",
        "",
    ]
    if itinerary.get("transportation"):
        lines.append("Transportation:")
        for leg in itinerary["transportation"]:
            lines.append(
                f"- {leg['type']} from {leg['departure_location']} to "
                f"{leg['arrival_location']} at {_time_of(leg.get('departure_time')) or 'TBD'}"
            )
        lines.append("")
    if itinerary.get("accommodations"):
        lines.append("Accommodations:")
        for stay in itinerary["accommodations"]:
            lines.append(
                f"- {stay['name']} in {stay['location']} "
                f"({stay['check_in_date']} to {stay['check_out_date']})"
            )
        lines.append("")

    lines.append("Daily Schedule Highlights:")
    for daily in itinerary.get("daily_plans", []):
        lines.append(f"Day {daily['day']} ({daily['date']}):")
        key_entries = [e for e in daily["activities"] if e["type"] != "Meal"][:3]
        lines.extend(f"- {e['time']}: {e['description']}" for e in key_entries)
        if len(daily["activities"]) > 3:
            lines.append(f"- And {len(daily['activities']) - len(key_entries)} more activities")
        lines.append("")

    return "\n".join(lines).strip()


def _plan_of(context: AgentContext | None) -> dict[str, Any]:
    return context.current_plan if context is not None else {}


class ItineraryAgent(BaseAgent):
    """Integrator of the travel preset; owns the ``itinerary`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="itinerary",
            instructions=ITINERARY_INSTRUCTIONS,
            slot="itinerary",
            tools=ITINERARY_TOOLS,
            display_name="itinerary agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "generate_itinerary": lambda args, ctx: generate_itinerary(args, _plan_of(ctx)),
            "modify_itinerary": lambda args, ctx: modify_itinerary(args, _plan_of(ctx)),
        }

    def build_prompt(self, query: str, context: AgentContext) -> str:
        plan = context.current_plan
        lowered = query.lower()
        parts = [query]

        flight = primary_flight(plan.get("flights"))
        if flight and "flight" not in lowered:
            departure = flight.get("departure_time") or ""
            parts.append(
                f"Include the flight from {flight.get('origin')} to "
                f"{flight.get('destination')} departing on {departure.split('T', 1)[0]}"
                f" at {_time_of(departure) or 'TBD'}."
            )

        stays = hotel_stays(plan.get("hotels"))
        if stays and "hotel" not in lowered:
            stay = stays[0]
            parts.append(
                f"Include stay at {stay.get('name')} in {stay.get('location')} "
                f"from {_hotel_field(stay, 'check_in_date', 'checkInDate')} "
                f"to {_hotel_field(stay, 'check_out_date', 'checkOutDate')}."
            )

        activities = activity_list(plan.get("activities"))
        if activities and "activit" not in lowered:
            names = ", ".join(a.get("name", "") for a in activities)
            parts.append(f"Include the following activities in the itinerary: {names}.")

        return " ".join(parts)

    def direct_result(self, reply: AssistantMessage, context: AgentContext) -> AgentResult:
        plan = context.current_plan
        if not (plan.get("flights") or plan.get("hotels")):
            return super().direct_result(reply, context)
        itinerary = generate_default_itinerary(plan)
        return AgentResult(summary=reply.content or summarize_itinerary(itinerary), data=itinerary)

    async def fallback(
        self, query: str, context: AgentContext, error: Exception
    ) -> AgentResult:
        plan = context.current_plan
        if not (plan.get("flights") or plan.get("hotels")):
            return await super().fallback(query, context, error)
        itinerary = generate_default_itinerary(plan)
        return AgentResult(
            summary=summarize_itinerary(itinerary), data=itinerary, degraded=True
        )

    def synthesize(self, plan: dict[str, Any]) -> dict[str, Any] | None:
        if not (plan.get("flights") or plan.get("hotels")):
            return None
        return generate_default_itinerary(plan)

    def summarize(self, output: Any) -> str:
        return summarize_itinerary(output if isinstance(output, dict) else None)

