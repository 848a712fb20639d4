"""Tests for discussion questions, ordering and spoiler markup."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookclub.models.book import DiscussionQuestion
from bookclub.services.spoilers import has_spoilers, parse_spoilers


def add_question(client: TestClient, book_id: int, text: str, headers: dict) -> dict:
    response = client.post(
        f"/api/v1/books/{book_id}/questions", json={"question": text}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


class TestParseSpoilers:
    """Test splitting question text into spoiler segments."""

    def test_plain_text(self):
        assert parse_spoilers("What did you think?") == [("What did you think?", False)]

    def test_spoiler_in_middle(self):
        assert parse_spoilers("Why did [Snape] do it?") == [
            ("Why did ", False),
            ("Snape", True),
            (" do it?", False),
        ]

    def test_leading_and_adjacent_spoilers(self):
        assert parse_spoilers("[Twist][Ending] thoughts?") == [
            ("Twist", True),
            ("Ending", True),
            (" thoughts?", False),
        ]

    def test_empty_brackets(self):
        assert parse_spoilers("Before [] after") == [
            ("Before ", False),
            ("", True),
            (" after", False),
        ]

    def test_unclosed_bracket_is_plain(self):
        assert parse_spoilers("Is this [a spoiler?") == [("Is this [a spoiler?", False)]

    def test_has_spoilers(self):
        assert has_spoilers("Who is [the killer]?")
        assert not has_spoilers("Who is the killer?")


class TestCreateQuestion:
    """Test adding questions."""

    def test_admin_adds_question(self, client: TestClient, books, admin_headers):
        data = add_question(client, books["current"].id, "  Who is [Estraven]? ", admin_headers)

        assert data["question"] == "Who is [Estraven]?"
        assert data["sort_order"] == 0
        assert data["segments"] == [
            {"text": "Who is ", "spoiler": False},
            {"text": "Estraven", "spoiler": True},
            {"text": "?", "spoiler": False},
        ]

    def test_sort_order_appends(self, client: TestClient, books, admin_headers):
        book_id = books["current"].id
        add_question(client, book_id, "First", admin_headers)
        add_question(client, book_id, "Second", admin_headers)
        third = add_question(client, book_id, "Third", admin_headers)

        assert third["sort_order"] == 2

    def test_member_cannot_add(self, client: TestClient, books, member_headers):
        response = client.post(
            f"/api/v1/books/{books['current'].id}/questions",
            json={"question": "Hello?"},
            headers=member_headers,
        )

        assert response.status_code == 403

    def test_blank_question(self, client: TestClient, books, admin_headers):
        response = client.post(
            f"/api/v1/books/{books['current'].id}/questions",
            json={"question": "   "},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_missing_book(self, client: TestClient, admin_headers):
        response = client.post(
            "/api/v1/books/99999/questions", json={"question": "Hello?"}, headers=admin_headers
        )

        assert response.status_code == 404

    def test_listed_in_order(self, client: TestClient, books, admin_headers, member_headers):
        book_id = books["current"].id
        for text in ["One", "Two", "Three"]:
            add_question(client, book_id, text, admin_headers)

        response = client.get(f"/api/v1/books/{book_id}/questions", headers=member_headers)

        assert [q["question"] for q in response.json()] == ["One", "Two", "Three"]

    def test_stored_text_keeps_brackets(
        self, client: TestClient, db: Session, books, admin_headers
    ):
        data = add_question(client, books["current"].id, "Did [she] survive?", admin_headers)

        stored = db.query(DiscussionQuestion).filter(DiscussionQuestion.id == data["id"]).one()
        assert stored.question == "Did [she] survive?"


class TestEditQuestion:
    """Test editing and deleting questions."""

    def test_author_edits(self, client: TestClient, books, admin_headers):
        question = add_question(client, books["current"].id, "Old", admin_headers)

        response = client.patch(
            f"/api/v1/questions/{question['id']}",
            json={"question": "New"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["question"] == "New"

    def test_other_member_cannot_edit(self, client: TestClient, books, admin_headers, member_headers):
        question = add_question(client, books["current"].id, "Old", admin_headers)

        response = client.patch(
            f"/api/v1/questions/{question['id']}",
            json={"question": "Hijacked"},
            headers=member_headers,
        )

        assert response.status_code == 403

    def test_delete(self, client: TestClient, db: Session, books, admin_headers):
        question = add_question(client, books["current"].id, "Bye", admin_headers)

        response = client.delete(f"/api/v1/questions/{question['id']}", headers=admin_headers)

        assert response.status_code == 204
        assert db.query(DiscussionQuestion).count() == 0

    def test_delete_missing(self, client: TestClient, admin_headers):
        response = client.delete("/api/v1/questions/99999", headers=admin_headers)

        assert response.status_code == 404


class TestReorder:
    """Test full-set reordering."""

    def _three_questions(self, client, book_id, headers):
        return [add_question(client, book_id, t, headers)["id"] for t in ["A", "B", "C"]]

    def test_reorder(self, client: TestClient, books, admin_headers):
        book_id = books["current"].id
        a, b, c = self._three_questions(client, book_id, admin_headers)

        response = client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": [c, a, b]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [q["id"] for q in data] == [c, a, b]
        assert [q["sort_order"] for q in data] == [0, 1, 2]

    def test_missing_book(self, client: TestClient, admin_headers):
        response = client.put(
            "/api/v1/books/99999/questions/reorder",
            json={"question_ids": [1, 2]},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_subset_rejected(self, client: TestClient, db: Session, books, admin_headers):
        book_id = books["current"].id
        a, b, c = self._three_questions(client, book_id, admin_headers)

        response = client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": [c, a]},
            headers=admin_headers,
        )

        assert response.status_code == 400
        orders = {
            q.id: q.sort_order
            for q in db.query(DiscussionQuestion).all()
        }
        assert orders == {a: 0, b: 1, c: 2}

    def test_duplicates_rejected(self, client: TestClient, books, admin_headers):
        book_id = books["current"].id
        a, b, c = self._three_questions(client, book_id, admin_headers)

        response = client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": [a, b, c, a]},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_foreign_id_rejected(self, client: TestClient, books, admin_headers):
        book_id = books["current"].id
        a, b, c = self._three_questions(client, book_id, admin_headers)
        foreign = add_question(client, books["completed"].id, "Elsewhere", admin_headers)["id"]

        response = client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": [a, b, foreign]},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_member_cannot_reorder(self, client: TestClient, books, admin_headers, member_headers):
        book_id = books["current"].id
        ids = self._three_questions(client, book_id, admin_headers)

        response = client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": ids},
            headers=member_headers,
        )

        assert response.status_code == 403

    def test_book_detail_uses_order(self, client: TestClient, books, admin_headers, member_headers):
        book_id = books["current"].id
        a, b, c = self._three_questions(client, book_id, admin_headers)
        client.put(
            f"/api/v1/books/{book_id}/questions/reorder",
            json={"question_ids": [b, c, a]},
            headers=admin_headers,
        )

        data = client.get(f"/api/v1/books/{book_id}", headers=member_headers).json()

        assert [q["question"] for q in data["questions"]] == ["B", "C", "A"]
