"""
Flight Agent for the travel planner preset.

This module implements the agent responsible for searching flights and
returning flight details. Search results are written to the ``flights``
plan slot and later read by the hotel and itinerary agents.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import ToolDefinition
from agent_dispatch.utils import format_price

FLIGHT_INSTRUCTIONS = """You are a specialized flight booking agent.
Your goal is to help users find the best flights based on their preferences and constraints.
Use the search_flights tool to find available options, and provide concise, relevant recommendations.
Always consider user preferences for price, timing, and comfort.
Format prices in USD with $ symbol. Always mention layover information when relevant.
Answer only flight-related questions. For other travel questions, inform users that you specialize in flights."""

FLIGHT_TOOLS = [
    ToolDefinition(
        name="search_flights",
        description="Search for available flights based on criteria",
        parameters={
            "origin": {
                "type": "string",
                "description": "Origin airport code or city name",
            },
            "destination": {
                "type": "string",
                "description": "Destination airport code or city name",
            },
            "departure_date": {
                "type": "string",
                "description": "Departure date in YYYY-MM-DD format",
            },
            "return_date": {
                "type": "string",
                "description": "Return date in YYYY-MM-DD format for round trips",
            },
            "passengers": {"type": "integer", "description": "Number of passengers"},
            "cabin_class": {
                "type": "string",
                "description": "Cabin class preference",
                "enum": ["Economy", "Premium Economy", "Business", "First"],
            },
            "max_price": {"type": "number", "description": "Maximum price in USD"},
            "nonstop": {
                "type": "boolean",
                "description": "Whether to search for nonstop flights only",
            },
        },
        required=("origin", "destination", "departure_date"),
    ),
    ToolDefinition(
        name="get_flight_details",
        description="Get detailed information about a specific flight",
        parameters={
            "flight_id": {
                "type": "string",
                "description": "Unique identifier for the flight",
            }
        },
        required=("flight_id",),
    ),
]


def search_flights(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample flight inventory for a route and date."""
    origin = str(arguments["origin"]).upper()
    destination = str(arguments["destination"]).upper()
    departure_date = arguments["departure_date"]
    cabin_class = arguments.get("cabin_class") or "Economy"
    passengers = int(arguments.get("passengers") or 1)

    flights = [
        {
            "id": "FL123",
            "airline": "Azure Airways",
            "origin": origin,
            "destination": destination,
            "departure_time": f"{departure_date}T08:00:00",
            "arrival_time": f"{departure_date}T10:30:00",
            "duration": 150,
            "price": 299.99,
            "cabin_class": cabin_class,
            "nonstop": True,
        },
        {
            "id": "FL456",
            "airline": "Cloud Airlines",
            "origin": origin,
            "destination": destination,
            "departure_time": f"{departure_date}T12:15:00",
            "arrival_time": f"{departure_date}T14:50:00",
            "duration": 155,
            "price": 259.50,
            "cabin_class": cabin_class,
            "nonstop": False,
            "layovers": [{"airport": "HUB", "duration": 45}],
        },
    ]
    if arguments.get("nonstop"):
        flights = [flight for flight in flights if flight["nonstop"]]
    if arguments.get("max_price"):
        flights = [f for f in flights if f["price"] <= float(arguments["max_price"])]

    result = {
        "origin": origin,
        "destination": destination,
        "departure_date": departure_date,
        "return_date": arguments.get("return_date"),
        "passengers": passengers,
        "flights": flights,
        "total_cost": round(flights[0]["price"] * passengers, 2) if flights else 0.0,
    }
    if flights:
        result["departure_time"] = flights[0]["departure_time"]
        result["arrival_time"] = flights[0]["arrival_time"]
    return result


def get_flight_details(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample details record for a single flight."""
    return {
        "id": arguments["flight_id"],
        "airline": "Azure Airways",
        "origin": "SEA",
        "destination": "SFO",
        "departure_time": "2024-12-15T08:00:00",
        "arrival_time": "2024-12-15T10:30:00",
        "duration": 150,
        "price": 299.99,
        "cabin_class": "Economy",
        "nonstop": True,
        "aircraft": "Boeing 737-800",
        "amenities": ["WiFi", "Power outlets", "In-flight entertainment"],
        "baggage_allowance": {"carry_on": 1, "checked": 1},
    }


class FlightAgent(BaseAgent):
    """Searches flights and owns the ``flights`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="flight",
            instructions=FLIGHT_INSTRUCTIONS,
            slot="flights",
            keywords=("flight", "air", "travel to", "fly"),
            tools=FLIGHT_TOOLS,
            display_name="flight agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "search_flights": search_flights,
            "get_flight_details": get_flight_details,
        }

    def cost_of(self, output: Any) -> float:
        if isinstance(output, dict) and "price" in output:
            return float(output["price"])
        return super().cost_of(output)

    def summarize(self, output: Any) -> str:
        flights = output.get("flights", [output]) if isinstance(output, dict) else []
        if not flights:
            return (
                "No flights found matching your criteria. "
                "Please try different dates or airports."
            )

        prices = [flight["price"] for flight in flights if "price" in flight]
        summary = f"Found {len(flights)} flight options"
        if output.get("origin") and output.get("destination"):
            summary += f" from {output['origin']} to {output['destination']}"
        if prices:
            summary += (
                f" with prices ranging from {format_price(min(prices))}"
                f" to {format_price(max(prices))}"
            )
        return summary + "."
