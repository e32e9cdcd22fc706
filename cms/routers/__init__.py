"""
FastAPI routers grouped by concern (registry, articles, static files).

Each file inside this package exposes an APIRouter that is included in the
application built by cms.app.create_app. The static router holds a catch-all
path and must be included last.
"""
