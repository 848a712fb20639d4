from fastapi import APIRouter

from bookclub.api import (
    account,
    admin,
    announcements,
    auth,
    books,
    dashboard,
    invite_codes,
    questions,
    ratings,
    site_settings,
    votes,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(account.router, prefix="/account", tags=["account"])
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(questions.router, prefix="/questions", tags=["questions"])
router.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
router.include_router(votes.router, prefix="/votes", tags=["votes"])
router.include_router(invite_codes.router, prefix="/invite-codes", tags=["invite codes"])
router.include_router(announcements.router, prefix="/announcement", tags=["announcement"])
router.include_router(site_settings.router, prefix="/settings", tags=["settings"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
