"""
Canonical problem taxonomy for verse search.

This list is the only place categories are defined. The keyword classifier,
the AI classifier prompt, the problem matcher tie-break and the seed script
all read from it. List order is the canonical taxonomy order.

New categories are added here (and seeded) by an administrator; a slug must
never be renamed once verses are linked to it.
"""

from typing import Any, Dict, List, Optional

PROBLEM_TAXONOMY: List[Dict[str, Any]] = [
    {
        "slug": "anxiety",
        "name": "Anxiety",
        "description": "worry, stress, nervousness, uncertainty about future",
        "keywords": ["anxious", "anxiety", "worried", "worry", "stress", "nervous", "tense"],
        "icon": "brain",
        "color": "#6366f1",
        "display_order": 1,
    },
    {
        "slug": "fear",
        "name": "Fear",
        "description": "scared, afraid, phobia, terror, dread",
        "keywords": ["afraid", "scared", "fear", "terrified", "dread"],
        "icon": "shield",
        "color": "#8b5cf6",
        "display_order": 2,
    },
    {
        "slug": "confusion",
        "name": "Confusion",
        "description": "lost, unclear, indecisive, uncertain, bewildered",
        "keywords": ["confused", "lost", "unclear", "uncertain", "bewildered"],
        "icon": "compass",
        "color": "#0ea5e9",
        "display_order": 3,
    },
    {
        "slug": "leadership",
        "name": "Leadership",
        "description": "management, guiding others, responsibility, authority",
        "keywords": ["lead", "manage", "boss", "team", "authority"],
        "icon": "crown",
        "color": "#f59e0b",
        "display_order": 4,
    },
    {
        "slug": "relationships",
        "name": "Relationships",
        "description": "family, friends, love, conflicts, connections",
        "keywords": ["family", "friend", "love", "relationship", "conflict"],
        "icon": "heart",
        "color": "#ec4899",
        "display_order": 5,
    },
    {
        "slug": "self-doubt",
        "name": "Self-Doubt",
        "description": "lack of confidence, imposter syndrome, insecurity",
        "keywords": ["doubt", "confidence", "insecure", "imposter", "worthy"],
        "icon": "user",
        "color": "#14b8a6",
        "display_order": 6,
    },
    {
        "slug": "anger",
        "name": "Anger",
        "description": "frustration, rage, irritation, resentment",
        "keywords": ["angry", "frustrated", "rage", "irritated", "mad"],
        "icon": "flame",
        "color": "#ef4444",
        "display_order": 7,
    },
    {
        "slug": "decision-making",
        "name": "Decision Making",
        "description": "choices, paralysis, weighing options",
        "keywords": ["decide", "choice", "decision", "choose", "option"],
        "icon": "git-branch",
        "color": "#22c55e",
        "display_order": 8,
    },
]

TAXONOMY_SLUGS = tuple(category["slug"] for category in PROBLEM_TAXONOMY)

# Used when nothing else matches so ranking always has a category to query
DEFAULT_PROBLEM_SLUG = "confusion"


def get_category(slug: str) -> Optional[Dict[str, Any]]:
    """Return the taxonomy entry for a slug, or None."""
    for category in PROBLEM_TAXONOMY:
        if category["slug"] == slug:
            return category
    return None


def is_known_slug(slug: str) -> bool:
    return slug in TAXONOMY_SLUGS
