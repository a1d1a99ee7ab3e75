"""Rating aggregation and the ratings endpoints."""
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from app.models import Rating, ProfileVisibility
from app.services.rating_service import round_rating, book_rating_stats, books_with_ratings

T0 = datetime(2026, 3, 1, 10, 0, 0)


def _rating(book_id, rating, minutes=0, comment="", title=None, user_name="Reader"):
    return Rating(
        id=uuid4(),
        user_id=uuid4(),
        user_name=user_name,
        book_id=book_id,
        book_title=title or f"Title {book_id}",
        book_author="Author",
        book_cover=None,
        rating=rating,
        comment=comment,
        created_at=T0 + timedelta(minutes=minutes),
        updated_at=T0 + timedelta(minutes=minutes),
    )


@pytest.mark.parametrize(
    "value, expected",
    [(4.0, 4.0), (4.25, 4.3), (4.35, 4.4), (3.666, 3.7), (4.04, 4.0)],
)
def test_round_rating_rounds_half_up(value, expected):
    assert round_rating(value) == expected


def test_book_rating_stats_average_and_total():
    stats = book_rating_stats("g1", [_rating("g1", 5, 0), _rating("g1", 3, 1), _rating("g1", 4, 2)])

    assert stats.average_rating == 4.0
    assert stats.total_ratings == 3
    assert [r.rating for r in stats.ratings] == [5, 3, 4]


def test_book_rating_stats_lists_in_creation_order():
    rows = [_rating("g1", 2, minutes=5), _rating("g1", 5, minutes=1)]

    stats = book_rating_stats("g1", rows)

    assert [r.rating for r in stats.ratings] == [5, 2]


def test_book_rating_stats_without_ratings():
    stats = book_rating_stats("nothing", [])

    assert stats.book_id == "nothing"
    assert stats.average_rating == 0
    assert stats.total_ratings == 0
    assert stats.ratings == []


def test_books_with_ratings_sorted_by_average_then_count():
    rows = [
        _rating("a", 4, 0), _rating("a", 4, 1),
        _rating("b", 5, 2),
        _rating("c", 4, 3),
    ]

    summaries = books_with_ratings(rows, sort_by="rating")

    assert [s.book_id for s in summaries] == ["b", "a", "c"]
    assert summaries[1].total_ratings == 2


def test_books_with_ratings_sorted_by_recent():
    rows = [_rating("old", 5, 0), _rating("new", 1, 10), _rating("old", 5, 5)]

    summaries = books_with_ratings(rows, sort_by="recent")

    assert [s.book_id for s in summaries] == ["new", "old"]
    assert summaries[1].latest_rating == T0 + timedelta(minutes=5)


def test_books_with_ratings_limit_and_unlimited():
    rows = [_rating(str(i), 3, i) for i in range(5)]

    assert len(books_with_ratings(rows, limit=2)) == 2
    assert len(books_with_ratings(rows, limit=0)) == 5


def test_books_with_ratings_snapshot_first_seen_and_comment_filter():
    rows = [
        _rating("a", 4, 1, comment="Loved it", title="Later title"),
        _rating("a", 2, 0, comment="   ", title="First title"),
        _rating("a", 3, 2, comment=""),
    ]

    [summary] = books_with_ratings(rows)

    assert summary.book_title == "First title"
    assert summary.average_rating == 3.0
    assert [c.text for c in summary.comments] == ["Loved it"]


RATING_BODY = {
    "book_id": "gb-123",
    "book_title": "Dune",
    "book_author": "Frank Herbert",
    "book_cover": "https://covers.example.com/dune.jpg",
    "rating": 5,
    "comment": "Spice!",
}


def test_create_then_update_keeps_single_row(client, db, test_user, auth_headers):
    headers = auth_headers(test_user)

    created = client.post("/api/ratings", json=RATING_BODY, headers=headers)
    updated = client.post("/api/ratings", json={**RATING_BODY, "rating": 3, "comment": ""}, headers=headers)

    assert created.status_code == 201
    assert created.json()["message"] == "Rating created successfully"
    assert updated.status_code == 200
    assert updated.json()["message"] == "Rating updated successfully"
    assert updated.json()["rating"]["id"] == created.json()["rating"]["id"]

    rows = db.query(Rating).filter(Rating.user_id == test_user.id, Rating.book_id == "gb-123").all()
    assert len(rows) == 1
    assert rows[0].rating == 3
    assert rows[0].comment == ""


def test_upsert_refreshes_user_name_snapshot(client, db, test_user, auth_headers):
    headers = auth_headers(test_user)
    client.post("/api/ratings", json=RATING_BODY, headers=headers)

    test_user.name = "Renamed Reader"
    db.commit()
    client.post("/api/ratings", json=RATING_BODY, headers=headers)

    assert db.query(Rating).one().user_name == "Renamed Reader"


def test_nameless_rater_is_shown_as_anonymous(client, make_user, auth_headers):
    nameless = make_user(email="quiet@example.com", name=None)
    client.post("/api/ratings", json=RATING_BODY, headers=auth_headers(nameless))

    response = client.get("/api/ratings/book/gb-123")

    [rating] = response.json()["ratings"]
    assert rating["user_name"] == "Anonymous"
    assert "quiet@example.com" not in response.text


def test_private_profile_cannot_rate(client, make_user, auth_headers, db):
    private = make_user(email="hidden@example.com", visibility=ProfileVisibility.PRIVATE.value)

    response = client.post("/api/ratings", json=RATING_BODY, headers=auth_headers(private))

    assert response.status_code == 403
    assert db.query(Rating).count() == 0


def test_rating_requires_authentication(client):
    assert client.post("/api/ratings", json=RATING_BODY).status_code == 401


@pytest.mark.parametrize(
    "overrides, field",
    [({"rating": 6}, "rating"), ({"rating": 0}, "rating"), ({"comment": "x" * 1001}, "comment"), ({"book_id": ""}, "book_id")],
)
def test_rating_validation(client, test_user, auth_headers, overrides, field):
    response = client.post("/api/ratings", json={**RATING_BODY, **overrides}, headers=auth_headers(test_user))

    assert response.status_code == 400
    assert field in response.json()["errors"]


def test_book_ratings_endpoint(client, make_user, auth_headers):
    for value in (5, 3, 4):
        user = make_user()
        client.post("/api/ratings", json={**RATING_BODY, "rating": value}, headers=auth_headers(user))

    response = client.get("/api/ratings/book/gb-123")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["average_rating"] == 4.0
    assert data["total_ratings"] == 3


def test_book_ratings_for_unrated_book(client):
    data = client.get("/api/ratings/book/never-rated").json()

    assert data == {"success": True, "book_id": "never-rated", "average_rating": 0.0, "total_ratings": 0, "ratings": []}


def test_list_rated_books_endpoint(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    client.post("/api/ratings", json={**RATING_BODY, "book_id": "low", "rating": 2}, headers=headers)
    client.post("/api/ratings", json={**RATING_BODY, "book_id": "high", "rating": 5}, headers=headers)

    response = client.get("/api/ratings", params={"sort": "rating"})

    assert response.status_code == 200
    assert [r["book_id"] for r in response.json()["ratings"]] == ["high", "low"]
    assert response.json()["ratings"][0]["comments"][0]["text"] == "Spice!"


def test_user_ratings_omit_user_id(client, test_user, auth_headers):
    client.post("/api/ratings", json=RATING_BODY, headers=auth_headers(test_user))

    response = client.get(f"/api/ratings/user/{test_user.id}")

    assert response.status_code == 200
    [item] = response.json()["ratings"]
    assert item["book_id"] == "gb-123"
    assert "user_id" not in item


def test_delete_own_rating(client, db, test_user, auth_headers):
    headers = auth_headers(test_user)
    rating_id = client.post("/api/ratings", json=RATING_BODY, headers=headers).json()["rating"]["id"]

    response = client.delete(f"/api/ratings/{rating_id}", headers=headers)

    assert response.status_code == 200
    assert db.query(Rating).count() == 0


def test_delete_someone_elses_rating_is_403(client, db, test_user, make_user, auth_headers):
    rating_id = client.post("/api/ratings", json=RATING_BODY, headers=auth_headers(test_user)).json()["rating"]["id"]
    other = make_user(email="other@example.com")

    response = client.delete(f"/api/ratings/{rating_id}", headers=auth_headers(other))

    assert response.status_code == 403
    assert db.query(Rating).count() == 1


def test_delete_missing_rating_is_404(client, test_user, auth_headers):
    response = client.delete(f"/api/ratings/{uuid4()}", headers=auth_headers(test_user))

    assert response.status_code == 404
