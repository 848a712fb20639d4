from bookclub.schemas.auth import RegisterRequest, Token, UserResponse, UserSummary
from bookclub.schemas.backup import BackupData, BackupDocument
from bookclub.schemas.book import BookCreate, BookDetail, BookResponse, BookUpdate, CatalogSearchResult
from bookclub.schemas.dashboard import DashboardResponse
from bookclub.schemas.question import QuestionCreate, QuestionReorder, QuestionResponse, QuestionUpdate
from bookclub.schemas.rating import RatingCreate, RatingResponse, VoteCreate, VoteResponse
from bookclub.schemas.site import AnnouncementCreate, AnnouncementResponse, SiteSettingResponse
from bookclub.schemas.user import InviteCodeResponse

__all__ = [
    "RegisterRequest",
    "Token",
    "UserResponse",
    "UserSummary",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookDetail",
    "CatalogSearchResult",
    "RatingCreate",
    "RatingResponse",
    "VoteCreate",
    "VoteResponse",
    "QuestionCreate",
    "QuestionUpdate",
    "QuestionReorder",
    "QuestionResponse",
    "AnnouncementCreate",
    "AnnouncementResponse",
    "SiteSettingResponse",
    "InviteCodeResponse",
    "DashboardResponse",
    "BackupData",
    "BackupDocument",
]
