"""
API route modules.

Import all route modules here for easy access.
"""

from around.api.routes import auth, posts

__all__ = ["auth", "posts"]
