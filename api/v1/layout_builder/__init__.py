from fastapi import APIRouter
from . import layout

router = APIRouter()

router.include_router(layout.router, prefix="/layout-builder", tags=["Layout Builder"])
