"""Pure domain helpers: content types and request path validation.

Free of FastAPI/HTTP concerns so they can be unit-tested on their own.
"""
__all__ = ["content_types", "paths"]
