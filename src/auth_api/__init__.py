"""Authentication API service.

FastAPI service exposing sign-in, sign-up, email verification and password
management endpoints backed by SQLModel persistence and JWT access tokens.
"""

__version__ = "0.1.0"
