"""Router aggregator.

All page and auth routers are included here, at the site root.
"""

from fastapi import APIRouter

from scratch_auth_demo.api import auth, pages

router = APIRouter()

router.include_router(pages.router, tags=["pages"])
router.include_router(auth.router, tags=["auth"])
