"""
Fixed general-interest seed catalog.

Serves the legacy genre browse and is the cold-start / backfill source for
recommendations. Genres line up with the PreferenceVector dimensions.
"""
from typing import List, Optional, Dict

GENRES = ("crime_thriller", "horror", "fantasy", "philosophy")

SEED_BOOKS: List[Dict[str, str]] = [
    {"id": "b1", "title": "The Silent Patient", "author": "Alex Michaelides", "genre": "crime_thriller",
     "description": "A psychological thriller about a woman who stopped speaking after a violent act."},
    {"id": "b2", "title": "Gone Girl", "author": "Gillian Flynn", "genre": "crime_thriller",
     "description": "A twisty thriller about a missing wife and secrets."},
    {"id": "b3", "title": "It", "author": "Stephen King", "genre": "horror",
     "description": "A group of friends face a terrifying entity in their small town."},
    {"id": "b4", "title": "The Haunting of Hill House", "author": "Shirley Jackson", "genre": "horror",
     "description": "A classic eerie haunted-house story."},
    {"id": "b5", "title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "fantasy",
     "description": "Bilbo Baggins goes on an unexpected adventure."},
    {"id": "b6", "title": "The Name of the Wind", "author": "Patrick Rothfuss", "genre": "fantasy",
     "description": "An epic tale of a young magician and storyteller."},
    {"id": "b7", "title": "Meditations", "author": "Marcus Aurelius", "genre": "philosophy",
     "description": "Stoic reflections and practical wisdom."},
    {"id": "b8", "title": "The Republic", "author": "Plato", "genre": "philosophy",
     "description": "A foundational work of political philosophy and justice."},
]

DEFAULT_BROWSE_LIMIT = 6


def limit_from_score(score: float) -> int:
    """A preference score of 0-100 maps to roughly one book per 10 points, at least one."""
    return max(1, int(score / 10 + 0.5))


def browse(genre: Optional[str] = None, limit: Optional[int] = None, score: Optional[float] = None) -> List[Dict[str, str]]:
    """
    Legacy genre browse.

    An explicit positive limit wins. A score sets the limit only when no limit
    was passed at all. Everything else gets DEFAULT_BROWSE_LIMIT.
    """
    if limit is not None and limit > 0:
        effective = limit
    elif limit is None and score is not None:
        effective = limit_from_score(score)
    else:
        effective = DEFAULT_BROWSE_LIMIT

    filtered = [b for b in SEED_BOOKS if not genre or b["genre"] == genre]
    return filtered[:effective]


def browse_for_preferences(preferences: Dict[str, int]) -> List[Dict[str, str]]:
    """Seed books for every genre the user scored above zero, in GENRES order."""
    books: List[Dict[str, str]] = []
    for genre in GENRES:
        score = preferences.get(genre) or 0
        if score > 0:
            books.extend(browse(genre=genre, score=score))
    return books
