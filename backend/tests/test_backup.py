"""Tests for whole-database backup and restore."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookclub.core.exceptions import ValidationError
from bookclub.models.book import Book, DiscussionQuestion
from bookclub.models.note import BookNote
from bookclub.models.rating import Rating, Vote
from bookclub.models.site import Announcement, SiteSetting
from bookclub.models.user import InviteCode, User
from bookclub.services import backup_service


@pytest.fixture
def club_data(db: Session, admin, member, books, invite_code):
    """A little of everything, so every backup collection is non-empty."""
    invite_code.used_by_id = member.id
    invite_code.redeemed = True
    db.add_all([
        Rating(user_id=member.id, book_id=books["completed"].id, rating=4.5),
        Vote(user_id=member.id, book_id=books["suggestion"].id),
        DiscussionQuestion(
            book_id=books["current"].id, user_id=admin.id, question="Who is [Genly]?", sort_order=0
        ),
        BookNote(user_id=member.id, book_id=books["current"].id, content="Chapter 3 notes"),
        Announcement(
            location="The Library",
            date_time=datetime(2026, 11, 5, 19, 0),
            time_zone="Europe/London",
        ),
        SiteSetting(key="site_name", value="Tuesday Readers"),
    ])
    db.commit()


def table_counts(db: Session) -> dict[str, int]:
    return {
        model.__tablename__: db.query(model).count()
        for model in [
            User, Book, Rating, Vote, InviteCode, DiscussionQuestion, BookNote, Announcement, SiteSetting
        ]
    }


class TestExport:
    """Test backup download."""

    def test_download(self, client: TestClient, club_data, admin_headers):
        response = client.get("/api/v1/admin/backup", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith(
            'attachment; filename="bookclub-backup-'
        )
        document = response.json()
        assert document["version"] == 1
        assert "exportedAt" in document
        assert set(document["data"]) == {
            "users",
            "books",
            "ratings",
            "votes",
            "inviteCodes",
            "discussionQuestions",
            "announcements",
            "siteSettings",
            "bookNotes",
        }
        assert len(document["data"]["users"]) == 2
        assert document["data"]["siteSettings"] == [
            {
                "key": "site_name",
                "value": "Tuesday Readers",
                "updated_at": document["data"]["siteSettings"][0]["updated_at"],
            }
        ]

    def test_member_forbidden(self, client: TestClient, member_headers):
        response = client.get("/api/v1/admin/backup", headers=member_headers)

        assert response.status_code == 403

    def test_filename(self):
        assert backup_service.backup_filename(datetime(2026, 3, 7)) == "bookclub-backup-2026-03-07.json"


class TestRestore:
    """Test backup upload."""

    def test_round_trip(self, client: TestClient, db: Session, club_data, admin_headers):
        """Restoring a fresh export reproduces the same data and ids."""
        document = client.get("/api/v1/admin/backup", headers=admin_headers).json()
        before = table_counts(db)
        member_id = db.query(User).filter(User.email == "alice@example.com").one().id

        response = client.post("/api/v1/admin/backup", json=document, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["restored"]["users"] == 2
        assert table_counts(db) == before
        restored_member = db.query(User).filter(User.email == "alice@example.com").one()
        assert restored_member.id == member_id
        assert db.query(Rating).one().user_id == member_id

        # Admin's token still resolves after the restore
        assert client.get("/api/v1/auth/me", headers=admin_headers).status_code == 200

        # Every field of every record survives the trip
        exported_again = client.get("/api/v1/admin/backup", headers=admin_headers).json()
        assert exported_again["data"] == document["data"]

    def test_restore_replaces_existing_rows(
        self, client: TestClient, db: Session, club_data, admin_headers
    ):
        document = client.get("/api/v1/admin/backup", headers=admin_headers).json()
        admin_id = db.query(User).filter(User.is_admin.is_(True)).one().id
        db.add(Book(title="Added later", author="Someone", added_by_id=admin_id))
        db.commit()

        client.post("/api/v1/admin/backup", json=document, headers=admin_headers)

        assert db.query(Book).filter(Book.title == "Added later").first() is None
        assert db.query(Book).count() == 3

    def test_missing_version_rejected(self, client: TestClient, admin_headers):
        response = client.post(
            "/api/v1/admin/backup", json={"data": {}}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_malformed_record_rejected(
        self, client: TestClient, db: Session, club_data, admin_headers
    ):
        before = table_counts(db)

        response = client.post(
            "/api/v1/admin/backup",
            json={"version": 1, "data": {"users": [{"id": "not-a-number"}]}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert table_counts(db) == before

    def test_failed_restore_changes_nothing(
        self, client: TestClient, db: Session, club_data, admin_headers
    ):
        """A rating pointing at a missing book aborts the whole restore."""
        document = client.get("/api/v1/admin/backup", headers=admin_headers).json()
        document["data"]["ratings"][0]["book_id"] = 99999
        before = table_counts(db)

        response = client.post("/api/v1/admin/backup", json=document, headers=admin_headers)

        assert response.status_code == 500
        assert table_counts(db) == before

    def test_parse_backup_requires_data(self):
        with pytest.raises(ValidationError):
            backup_service.parse_backup({"version": 1})

    def test_invite_code_without_redeemed_flag(self):
        """Codes with a redeemer count as redeemed when the flag is absent."""
        record = {"code": "ABCD1234", "created_by_id": 1, "created_at": "2026-01-01T00:00:00"}
        backup = backup_service.parse_backup({
            "version": 1,
            "data": {
                "inviteCodes": [
                    {**record, "id": 1, "used_by_id": 2, "used_at": "2026-01-02T00:00:00"},
                    {**record, "id": 2, "code": "FFFF0000"},
                ]
            },
        })

        assert [c.redeemed for c in backup.data.invite_codes] == [True, False]
