"""
app/api/routers package marker.
"""

from app.api.routers.inspection_upload import router as inspection_upload_router

__all__ = [
    "inspection_upload_router",
]
