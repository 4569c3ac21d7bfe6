"""
Hotel Agent for the travel planner preset.

This module implements the agent responsible for accommodation search.
When the plan already holds flights, the query is enriched with the
destination and travel dates so the search lines up with the trip.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import ToolDefinition
from agent_dispatch.utils import add_days, format_price, parse_iso_date

DEFAULT_STAY_NIGHTS = 3

HOTEL_INSTRUCTIONS = """You are a specialized hotel booking agent.
Your goal is to help users find the ideal accommodations based on their preferences and travel plans.
Use the search_hotels tool to find available options, and provide concise, relevant recommendations.
Always consider user preferences for location, comfort, amenities, and budget.
Format prices in USD with $ symbol per night.
Answer only hotel-related questions. For other travel questions, inform users that you specialize in accommodations."""

HOTEL_TOOLS = [
    ToolDefinition(
        name="search_hotels",
        description="Search for available hotels based on criteria",
        parameters={
            "location": {
                "type": "string",
                "description": "City or specific area for hotel search",
            },
            "check_in_date": {
                "type": "string",
                "description": "Check-in date in YYYY-MM-DD format",
            },
            "check_out_date": {
                "type": "string",
                "description": "Check-out date in YYYY-MM-DD format",
            },
            "guests": {"type": "integer", "description": "Number of guests"},
            "rooms": {"type": "integer", "description": "Number of rooms"},
            "min_rating": {
                "type": "number",
                "description": "Minimum hotel rating (1-5)",
            },
            "max_price": {
                "type": "number",
                "description": "Maximum price per night in USD",
            },
            "amenities": {
                "type": "array",
                "description": "List of required amenities",
                "items": {"type": "string"},
            },
        },
        required=("location", "check_in_date", "check_out_date"),
    ),
    ToolDefinition(
        name="get_hotel_details",
        description="Get detailed information about a specific hotel",
        parameters={
            "hotel_id": {
                "type": "string",
                "description": "Unique identifier for the hotel",
            }
        },
        required=("hotel_id",),
    ),
]


def _nights(check_in: str | None, check_out: str | None) -> int:
    start, end = parse_iso_date(check_in), parse_iso_date(check_out)
    if start is None or end is None:
        return 1
    return max(1, (end - start).days)


def search_hotels(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample hotel inventory for a location and stay."""
    location = arguments["location"]
    check_in = arguments["check_in_date"]
    check_out = arguments["check_out_date"]

    hotels = [
        {
            "id": "HTL789",
            "name": "Azure Grand Hotel",
            "location": location,
            "address": "123 Cloud Avenue",
            "coordinates": {"lat": 37.7749, "lng": -122.4194},
            "check_in_date": check_in,
            "check_out_date": check_out,
            "price_per_night": 199.99,
            "rating": 4.7,
            "amenities": ["Pool", "Spa", "Free WiFi", "Restaurant", "Fitness Center"],
        },
        {
            "id": "HTL012",
            "name": "Cloud Comfort Suites",
            "location": location,
            "address": "456 Serverless Street",
            "coordinates": {"lat": 37.7833, "lng": -122.4167},
            "check_in_date": check_in,
            "check_out_date": check_out,
            "price_per_night": 149.50,
            "rating": 4.3,
            "amenities": ["Free WiFi", "Breakfast included", "Business Center"],
        },
    ]
    if arguments.get("min_rating"):
        hotels = [h for h in hotels if h["rating"] >= float(arguments["min_rating"])]
    if arguments.get("max_price"):
        hotels = [
            h for h in hotels if h["price_per_night"] <= float(arguments["max_price"])
        ]

    nights = _nights(check_in, check_out)
    return {
        "location": location,
        "check_in_date": check_in,
        "check_out_date": check_out,
        "nights": nights,
        "hotels": hotels,
        "total_cost": round(hotels[0]["price_per_night"] * nights, 2) if hotels else 0.0,
    }


def get_hotel_details(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample details record for a single hotel."""
    return {
        "id": arguments["hotel_id"],
        "name": "Azure Grand Hotel",
        "location": "San Francisco",
        "address": "123 Cloud Avenue, San Francisco, CA 94105",
        "coordinates": {"lat": 37.7749, "lng": -122.4194},
        "check_in_date": "2024-12-15",
        "check_out_date": "2024-12-18",
        "price_per_night": 199.99,
        "rating": 4.7,
        "room_types": [
            {"type": "Deluxe King", "price": 199.99},
            {"type": "Executive Suite", "price": 299.99},
        ],
        "policies": {
            "check_in_time": "15:00",
            "check_out_time": "11:00",
            "cancellation": "Free cancellation up to 24 hours before check-in",
        },
    }


class HotelAgent(BaseAgent):
    """Searches accommodation and owns the ``hotels`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="hotel",
            instructions=HOTEL_INSTRUCTIONS,
            slot="hotels",
            keywords=("hotel", "stay", "accommodation", "lodging"),
            tools=HOTEL_TOOLS,
            display_name="hotel agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "search_hotels": search_hotels,
            "get_hotel_details": get_hotel_details,
        }

    def build_prompt(self, query: str, context: AgentContext) -> str:
        flight_info = context.view.get("flight_info")
        if not isinstance(flight_info, dict):
            return query

        location = flight_info.get("destination")
        check_in = parse_iso_date(
            flight_info.get("departure_time") or flight_info.get("departure_date")
        )
        check_out = parse_iso_date(flight_info.get("return_date"))
        if check_in and check_out is None:
            check_out_str = add_days(check_in, DEFAULT_STAY_NIGHTS)
        else:
            check_out_str = check_out.isoformat() if check_out else None

        lowered = query.lower()
        enhanced = query
        if location and location.lower() not in lowered:
            enhanced = f"{enhanced} in {location}"
        if (
            check_in
            and check_out_str
            and "check-in" not in lowered
            and "check out" not in lowered
        ):
            enhanced = f"{enhanced} from {check_in.isoformat()} to {check_out_str}"
        return enhanced

    def cost_of(self, output: Any) -> float:
        if isinstance(output, dict) and "price_per_night" in output:
            nights = _nights(output.get("check_in_date"), output.get("check_out_date"))
            return round(float(output["price_per_night"]) * nights, 2)
        return super().cost_of(output)

    def summarize(self, output: Any) -> str:
        hotels = output.get("hotels", [output]) if isinstance(output, dict) else []
        if not hotels:
            return (
                "No hotels found matching your criteria. "
                "Please try different dates or location."
            )

        prices = [h["price_per_night"] for h in hotels if "price_per_night" in h]
        summary = f"Found {len(hotels)} accommodation options"
        if output.get("location"):
            summary += f" in {output['location']}"
        if prices:
            summary += (
                f" with prices ranging from {format_price(min(prices))}"
                f" to {format_price(max(prices))} per night"
            )
        return summary + "."
