"""
Local Experience Agent for the travel planner preset.

This module implements the agent that finds activities and attractions at
the trip destination and produces personalised recommendations.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, AgentResult, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import AssistantMessage, ToolDefinition

LOCAL_EXPERIENCE_INSTRUCTIONS = """You are a specialized local experience agent.
Your goal is to help users discover unique, authentic experiences in their travel destinations.
Use the search_activities tool to find relevant activities, and the get_local_recommendations tool for personalized suggestions.
Always consider user preferences for activity type, budget, and duration.
Prioritize authentic local experiences and activities that work well together logistically.
Answer only experience-related questions. For other travel questions, inform users that you specialize in local activities."""

LOCAL_EXPERIENCE_TOOLS = [
    ToolDefinition(
        name="search_activities",
        description="Search for local activities and attractions based on criteria",
        parameters={
            "location": {
                "type": "string",
                "description": "City or specific area for activity search",
            },
            "date": {
                "type": "string",
                "description": "Date for the activities in YYYY-MM-DD format",
            },
            "category": {
                "type": "string",
                "description": "Category of activities",
                "enum": ["Cultural", "Outdoor", "Food", "Entertainment", "Shopping", "All"],
            },
            "budget": {
                "type": "string",
                "description": "Budget range",
                "enum": ["Low", "Medium", "High", "Any"],
            },
            "family_friendly": {
                "type": "boolean",
                "description": "Whether the activities should suit families with children",
            },
        },
        required=("location",),
    ),
    ToolDefinition(
        name="get_activity_details",
        description="Get detailed information about a specific activity",
        parameters={
            "activity_id": {
                "type": "string",
                "description": "Unique identifier for the activity",
            }
        },
        required=("activity_id",),
    ),
    ToolDefinition(
        name="get_local_recommendations",
        description="Get personalized recommendations based on user preferences",
        parameters={
            "location": {
                "type": "string",
                "description": "City or specific area for recommendations",
            },
            "interests": {
                "type": "array",
                "description": "List of user interests",
                "items": {"type": "string"},
            },
            "previous_activities": {
                "type": "array",
                "description": "Activity IDs the user has already done",
                "items": {"type": "string"},
            },
        },
        required=("location",),
    ),
]

# Inclusive price bounds per budget band
BUDGET_RANGES = {
    "Low": (None, 40.0),
    "Medium": (40.0, 80.0),
    "High": (80.0, None),
}


def _activity_catalog(location: str) -> list[dict[str, Any]]:
    return [
        {
            "id": "ACT001",
            "name": "Historic City Walking Tour",
            "location": location,
            "category": "Cultural",
            "duration": 120,
            "price": 35.00,
            "currency": "USD",
            "rating": 4.8,
            "family_friendly": True,
        },
        {
            "id": "ACT002",
            "name": "Culinary Market Experience",
            "location": location,
            "category": "Food",
            "duration": 180,
            "price": 65.00,
            "currency": "USD",
            "rating": 4.9,
            "family_friendly": True,
        },
        {
            "id": "ACT003",
            "name": "Sunset Harbor Kayaking",
            "location": location,
            "category": "Outdoor",
            "duration": 120,
            "price": 49.99,
            "currency": "USD",
            "rating": 4.7,
            "family_friendly": False,
        },
    ]


def search_activities(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample activity search with category, budget and family filters."""
    location = arguments["location"]
    activities = _activity_catalog(location)

    category = arguments.get("category")
    if category and category != "All":
        activities = [a for a in activities if a["category"] == category]

    budget = arguments.get("budget")
    if budget in BUDGET_RANGES:
        low, high = BUDGET_RANGES[budget]
        activities = [
            a
            for a in activities
            if (low is None or a["price"] >= low) and (high is None or a["price"] <= high)
        ]

    if arguments.get("family_friendly") is not None:
        wanted = bool(arguments["family_friendly"])
        activities = [a for a in activities if a["family_friendly"] == wanted]

    return {
        "location": location,
        "activities": activities,
        "total_cost": round(sum(a["price"] for a in activities), 2),
    }


def get_activity_details(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample details record for a single activity."""
    return {
        "id": arguments["activity_id"],
        "name": "Historic City Walking Tour",
        "location": "San Francisco",
        "category": "Cultural",
        "duration": 120,
        "price": 35.00,
        "currency": "USD",
        "rating": 4.8,
        "opening_hours": "9:00-17:00 daily, closed on public holidays",
        "booking_required": True,
        "meeting_point": "Union Square Visitor Center",
        "cancellation_policy": "Free cancellation up to 24 hours before the tour",
    }


def get_local_recommendations(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Sample curated recommendations ranked by interest overlap."""
    location = arguments["location"]
    interests = [str(i).lower() for i in arguments.get("interests") or []]
    previous = set(arguments.get("previous_activities") or [])

    recommendations = [
        {
            "id": "ACT004",
            "name": "Secret Speakeasy Cocktail Tour",
            "location": location,
            "category": "Entertainment",
            "duration": 180,
            "price": 85.00,
            "rating": 4.9,
            "tags": ["nightlife", "drinks", "history", "local"],
        },
        {
            "id": "ACT005",
            "name": "Local Photography Spots",
            "location": location,
            "category": "Outdoor",
            "duration": 240,
            "price": 120.00,
            "rating": 5.0,
            "tags": ["photography", "sightseeing", "nature", "views"],
        },
        {
            "id": "ACT006",
            "name": "Artisan Workshop Experience",
            "location": location,
            "category": "Cultural",
            "duration": 150,
            "price": 65.00,
            "rating": 4.7,
            "tags": ["art", "crafts", "hands-on", "souvenir"],
        },
    ]

    if interests:
        for item in recommendations:
            item["relevance_score"] = sum(
                1 for tag in item["tags"] if any(i in tag.lower() for i in interests)
            )
        # Stable sort keeps catalog order between equal scores
        recommendations.sort(key=lambda item: item["relevance_score"], reverse=True)

    activities = [item for item in recommendations if item["id"] not in previous]
    return {
        "location": location,
        "activities": activities,
        "total_cost": round(sum(a["price"] for a in activities), 2),
    }


def resolve_location(view: dict[str, Any]) -> str | None:
    """Best location known to the plan view, most specific first."""
    if view.get("destination"):
        return view["destination"]
    if view.get("hotel_location"):
        return view["hotel_location"]

    plan = view.get("current_plan") or {}
    flights = plan.get("flights")
    if isinstance(flights, dict) and flights.get("destination"):
        return flights["destination"]
    hotels = plan.get("hotels")
    if isinstance(hotels, list) and hotels:
        hotels = hotels[0]
    if isinstance(hotels, dict):
        return hotels.get("location")
    return None


class LocalExperienceAgent(BaseAgent):
    """Finds activities and owns the ``activities`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="local_experience",
            instructions=LOCAL_EXPERIENCE_INSTRUCTIONS,
            slot="activities",
            keywords=("activity", "activities", "visit", "see", "experience", "things to do"),
            tools=LOCAL_EXPERIENCE_TOOLS,
            display_name="local experience agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "search_activities": search_activities,
            "get_activity_details": get_activity_details,
            "get_local_recommendations": get_local_recommendations,
        }

    def build_prompt(self, query: str, context: AgentContext) -> str:
        location = resolve_location(context.view)
        if location and location.lower() not in query.lower():
            return f"{query} in {location}"
        return query

    def direct_result(self, reply: AssistantMessage, context: AgentContext) -> AgentResult:
        # Without a tool call, fall back to popular activities at the known location
        location = resolve_location(context.view)
        if not location:
            return super().direct_result(reply, context)

        output = search_activities({"location": location, "category": "All", "budget": "Any"})
        return AgentResult(
            summary=reply.content or self.summarize(output),
            data=output,
            cost=self.cost_of(output),
        )

    def cost_of(self, output: Any) -> float:
        if isinstance(output, dict) and "price" in output:
            return float(output["price"])
        return super().cost_of(output)

    def get_local_recommendations(
        self, location: str, interests: list[str] | None = None
    ) -> list[dict[str, Any]]:
        """Recommendations for a location outside of a conversation turn."""
        result = get_local_recommendations({"location": location, "interests": interests or []})
        return result["activities"]

    def recommend(self, view: dict[str, Any]) -> list[dict[str, Any]]:
        location = resolve_location(view)
        if not location:
            return []
        return self.get_local_recommendations(location, view.get("interests"))

    def summarize(self, output: Any) -> str:
        activities = output.get("activities", [output]) if isinstance(output, dict) else []
        if not activities:
            return (
                "No activities found matching your criteria. "
                "Please try different preferences or location."
            )

        summary = f"Found {len(activities)} recommended activities"
        if output.get("location"):
            summary += f" in {output['location']}"
        if len(activities) <= 3:
            return summary + ": " + ", ".join(a.get("name", "") for a in activities) + "."
        categories = sorted({a.get("category", "Other") for a in activities})
        return summary + f" including {len(categories)} different types: {', '.join(categories)}."
