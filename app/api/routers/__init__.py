"""
app/api/routers package marker.
"""

from app.api.routers.royalty_summary_router import router as royalty_summary_router

__all__ = [
    "royalty_summary_router",
]
