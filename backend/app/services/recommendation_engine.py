"""
Recommendation scorer.

Derives a user's taste from the shelves their books sit on, turns the top
categories into catalog queries and returns books the user does not own yet.
Pure with respect to the library: it only reads entries and never writes.
"""
from typing import List, Tuple, Optional, Dict, Iterable, Sequence
import logging
import random
from collections import defaultdict

from app.core.config import settings
from app.models import LibraryEntry, ShelfName
from app.schemas.recommendation import (
    RecommendationItem,
    RecommendationPreferences,
    RecommendationsResponse,
)
from app.services import seed_catalog
from app.services.catalog_gateway import CatalogGateway, CatalogBook, CatalogUnavailableError
from app.utils.timing import now_ms, log_elapsed

logger = logging.getLogger(__name__)

# How strongly each shelf signals taste. Custom shelves carry no signal.
SHELF_WEIGHTS: Dict[str, int] = {
    ShelfName.FAVORITES.value: 5,
    ShelfName.READ.value: 3,
    ShelfName.CURRENTLY_READING.value: 2,
    ShelfName.WANT_TO_READ.value: 1,
    ShelfName.DNF.value: -3,
}

FALLBACK_QUERY_TERMS = ["bestseller", "fiction", "popular"]
GENERAL_REASON = "general"

TOP_CATEGORY_COUNT = 3
TOP_AUTHOR_COUNT = 2
MIN_QUERY_TERMS = 2
PADDED_QUERY_TERMS = 3
TERMS_QUERIED = 2
MIN_RECOMMENDATIONS = 3
DESCRIPTION_LIMIT = 200


def shelf_weight(shelf: Optional[str]) -> int:
    return SHELF_WEIGHTS.get(shelf or "", 0)


def compute_preference_scores(entries: Iterable[LibraryEntry]) -> Tuple[Dict[str, int], Dict[str, int]]:
    """
    Accumulate shelf weights per category and per author.

    Categories are folded to lower case; authors are kept verbatim. Insertion
    order of the returned dicts follows first appearance so ties stay stable.
    """
    category_scores: Dict[str, int] = defaultdict(int)
    author_scores: Dict[str, int] = defaultdict(int)

    for entry in entries:
        weight = shelf_weight(entry.shelf)
        if entry.author:
            author_scores[entry.author] += weight
        for category in entry.categories or []:
            if category:
                category_scores[category.lower()] += weight

    return dict(category_scores), dict(author_scores)


def rank_preferences(scores: Dict[str, int], top_n: int) -> List[str]:
    """Highest-weight keys first, at most top_n, never anything with weight <= 0."""
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [key for key, weight in ranked[:top_n] if weight > 0]


def build_query_terms(top_categories: Sequence[str]) -> List[str]:
    terms = list(top_categories)
    if len(terms) < MIN_QUERY_TERMS:
        for fallback in FALLBACK_QUERY_TERMS:
            if len(terms) >= PADDED_QUERY_TERMS:
                break
            if fallback not in terms:
                terms.append(fallback)
    return terms


def truncate_description(description: Optional[str]) -> str:
    if not description:
        return "No description available."
    if len(description) > DESCRIPTION_LIMIT:
        return description[:DESCRIPTION_LIMIT] + "..."
    return description


def _seed_item(book: Dict[str, str]) -> RecommendationItem:
    return RecommendationItem(
        id=book["id"],
        title=book["title"],
        author=book["author"],
        description=book["description"],
        reason=GENERAL_REASON,
        genre=book["genre"],
    )


def _catalog_item(book: CatalogBook, term: str) -> RecommendationItem:
    return RecommendationItem(
        id=book.google_id or book.title,
        google_id=book.google_id or None,
        title=book.title,
        author=book.author,
        description=truncate_description(book.description),
        reason=f"Based on your interest in {term}",
        cover_image=book.cover_image,
        page_count=book.page_count,
        categories=book.categories,
        published_date=book.published_date,
        isbn=book.isbn,
    )


def get_general_recommendations(max_results: int) -> RecommendationsResponse:
    """Cold-start answer: the seed catalog, tagged general."""
    items = [_seed_item(book) for book in seed_catalog.SEED_BOOKS[:max(0, max_results)]]
    return RecommendationsResponse(recommendations=items, reason=GENERAL_REASON)


def _search_term(gateway: CatalogGateway, term: str) -> List[CatalogBook]:
    try:
        return gateway.search(term, max_results=settings.CATALOG_PAGE_SIZE, order_by="relevance")
    except CatalogUnavailableError as e:
        logger.warning("Catalog lookup for '%s' failed, treating as no results: %s", term, e)
        return []


def get_personalized_recommendations(
    entries: Sequence[LibraryEntry],
    gateway: CatalogGateway,
    max_results: int = 10,
    rng: Optional[random.Random] = None,
) -> RecommendationsResponse:
    """
    Recommend books the user does not own yet.

    Candidates come from catalog searches for the user's strongest categories
    (or the fallback vocabulary), get shuffled with ``rng`` and are topped up
    from the seed catalog when fewer than three survive. Gateway failures for
    a term count as zero candidates for that term.
    """
    if not entries:
        return get_general_recommendations(max_results)

    rng = rng or random.Random()
    start_ms = now_ms()

    category_scores, author_scores = compute_preference_scores(entries)
    top_categories = rank_preferences(category_scores, TOP_CATEGORY_COUNT)
    top_authors = rank_preferences(author_scores, TOP_AUTHOR_COUNT)
    query_terms = build_query_terms(top_categories)

    owned_titles = {e.title.lower() for e in entries if e.title}
    owned_authors = {e.author.lower() for e in entries if e.author}

    candidates: List[RecommendationItem] = []
    seen_titles = set()

    for term in query_terms[:TERMS_QUERIED]:
        for book in _search_term(gateway, term):
            title_key = book.title.lower()
            if title_key in owned_titles or book.author.lower() in owned_authors:
                continue
            if title_key in seen_titles:
                continue
            seen_titles.add(title_key)
            candidates.append(_catalog_item(book, term))

    candidates = candidates[:max_results * 2]
    rng.shuffle(candidates)
    recommendations = candidates[:max_results]

    if len(recommendations) < MIN_RECOMMENDATIONS:
        for book in seed_catalog.SEED_BOOKS:
            if len(recommendations) >= MIN_RECOMMENDATIONS or len(recommendations) >= max_results:
                break
            title_key = book["title"].lower()
            if title_key in owned_titles or title_key in seen_titles:
                continue
            seen_titles.add(title_key)
            recommendations.append(_seed_item(book))

    log_elapsed(start_ms, f"recommendations terms={query_terms[:TERMS_QUERIED]} n={len(recommendations)}")

    return RecommendationsResponse(
        recommendations=recommendations,
        preferences=RecommendationPreferences(
            top_categories=top_categories,
            top_authors=top_authors,
            total_books=len(entries),
        ),
    )


def get_recommendation_rng() -> random.Random:
    """FastAPI dependency; a configured seed makes the shuffle reproducible."""
    return random.Random(settings.RECOMMENDATION_SEED)
