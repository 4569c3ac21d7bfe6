"""
Candidate and reel sample data for the recruiter dashboard preset.

Records are plain dictionaries so tool handlers can return them
unchanged; callers must copy before mutating.
"""

import copy
from typing import Any

CANDIDATES: list[dict[str, Any]] = [
    {
        "id": "C001",
        "name": "Alex Explorer",
        "traits": ["empathetic", "creative", "adaptable"],
        "location": "Berlin",
        "experience_level": "Senior",
        "current_role": "Senior Product Designer",
        "applied_role": "Design Team Lead",
        "summary": "Product designer with 8 years of experience focused on sustainability.",
        "eco_score": 87,
        "recent_reel": "eco-journey-2024.mp4",
    },
    {
        "id": "C002",
        "name": "Jamie Trailblazer",
        "traits": ["analytical", "detail-oriented", "organized"],
        "location": "London",
        "experience_level": "Mid",
        "current_role": "Data Analyst",
        "applied_role": "Senior Data Scientist",
        "summary": "Data analyst specializing in consumer behavior patterns.",
        "eco_score": 72,
        "recent_reel": "data-insights-2025.mp4",
    },
    {
        "id": "C003",
        "name": "Riley Innovator",
        "traits": ["creative", "resilient", "collaborative", "empathetic"],
        "location": "Stockholm",
        "experience_level": "Senior",
        "current_role": "UX Researcher",
        "applied_role": "Research Lead",
        "summary": "UX researcher with focus on accessibility solutions.",
        "eco_score": 91,
        "recent_reel": "accessibility-innovations.mp4",
    },
]

REELS: list[dict[str, Any]] = [
    {
        "id": "R001",
        "candidate_id": "C001",
        "candidate_name": "Alex Explorer",
        "title": "My Eco Journey",
        "duration": 180,
        "themes": ["sustainability", "design process", "innovation"],
        "demonstrated_traits": ["empathy", "creativity", "leadership"],
        "key_insights": [
            "Reduced product packaging by 30%",
            "Implemented circular design principles",
            "Led cross-functional sustainability initiative",
        ],
        "upload_date": "2024-06-15",
    },
    {
        "id": "R002",
        "candidate_id": "C002",
        "candidate_name": "Jamie Trailblazer",
        "title": "Data Insights Project",
        "duration": 360,
        "themes": ["data analysis", "consumer behavior", "visualization"],
        "demonstrated_traits": ["analytical", "detail-oriented", "problem-solving"],
        "key_insights": [
            "Developed new consumer segmentation model",
            "Increased targeting accuracy by 45%",
            "Created interactive dashboard for stakeholders",
        ],
        "upload_date": "2025-02-20",
    },
    {
        "id": "R003",
        "candidate_id": "C003",
        "candidate_name": "Riley Innovator",
        "title": "Accessibility Innovations",
        "duration": 240,
        "themes": ["accessibility", "inclusive design", "user research"],
        "demonstrated_traits": ["creative", "empathy", "technical"],
        "key_insights": [
            "Created new accessible navigation patterns",
            "Conducted research with diverse user groups",
            "Reduced cognitive load while maintaining functionality",
        ],
        "upload_date": "2025-01-10",
    },
    {
        "id": "R004",
        "candidate_id": "C001",
        "candidate_name": "Alex Explorer",
        "title": "Sustainable Materials Research",
        "duration": 420,
        "themes": ["sustainability", "material science", "innovation"],
        "demonstrated_traits": ["curiosity", "technical", "analytical"],
        "key_insights": [
            "Researched biodegradable packaging alternatives",
            "Conducted lifecycle assessments on 12 materials",
            "Developed decision matrix for material selection",
        ],
        "upload_date": "2024-09-05",
    },
]

# Interview observations keyed by candidate id
INTERVIEW_NOTES: dict[str, dict[str, Any]] = {
    "C001": {
        "strengths": [
            {
                "area": "Design Process",
                "description": "Thorough, user-centered design process with clear validation methods.",
            },
            {
                "area": "Sustainability Knowledge",
                "description": "Deep understanding of sustainable design principles.",
            },
            {
                "area": "Team Collaboration",
                "description": "Strong record of cross-functional collaboration and mentoring.",
            },
        ],
        "areas_for_improvement": [
            {
                "area": "Technical Implementation",
                "description": "Could strengthen knowledge of technical constraints.",
            },
            {
                "area": "Conflict Resolution",
                "description": "Could take a more direct approach to team conflicts.",
            },
        ],
    },
    "C002": {
        "strengths": [
            {
                "area": "Data Analysis",
                "description": "Extracts meaningful patterns from complex datasets.",
            },
            {
                "area": "Visualization",
                "description": "Creates clear, stakeholder-focused visualizations.",
            },
        ],
        "areas_for_improvement": [
            {
                "area": "Machine Learning Depth",
                "description": "Advanced machine learning knowledge needed for a senior role.",
            },
        ],
    },
    "C003": {
        "strengths": [
            {
                "area": "Research Methodology",
                "description": "Rigorous, inclusive research with diverse participant groups.",
            },
            {
                "area": "Research Communication",
                "description": "Translates findings into actionable insights.",
            },
        ],
        "areas_for_improvement": [
            {
                "area": "Strategic Business Impact",
                "description": "Could tie research outcomes more closely to business objectives.",
            },
        ],
    },
}


def find_candidate(candidate_id: str) -> dict[str, Any] | None:
    """Copy of the candidate record with the given id, or None."""
    for candidate in CANDIDATES:
        if candidate["id"] == candidate_id:
            return copy.deepcopy(candidate)
    return None


def find_reel(reel_id: str) -> dict[str, Any] | None:
    """Copy of the reel record with the given id, or None."""
    for reel in REELS:
        if reel["id"] == reel_id:
            return copy.deepcopy(reel)
    return None


def reels_for(candidate_id: str) -> list[dict[str, Any]]:
    return [copy.deepcopy(reel) for reel in REELS if reel["candidate_id"] == candidate_id]
