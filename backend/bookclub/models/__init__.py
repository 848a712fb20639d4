from bookclub.models.book import Book, BookStatus, DiscussionQuestion
from bookclub.models.note import BookNote
from bookclub.models.rating import Rating, Vote
from bookclub.models.site import Announcement, SiteSetting
from bookclub.models.user import InviteCode, User

__all__ = [
    "User",
    "InviteCode",
    "Book",
    "BookStatus",
    "DiscussionQuestion",
    "Rating",
    "Vote",
    "BookNote",
    "Announcement",
    "SiteSetting",
]
