"""
API routes initialization.

This module aggregates all API routers and provides a single router
to include in the main application.
"""

from fastapi import APIRouter

from around.api.routes import auth, posts

# Create main API router
api_router = APIRouter()

# Signup / login (no token required)
api_router.include_router(auth.router)

# Post upload, radius search, cluster
api_router.include_router(posts.router)
