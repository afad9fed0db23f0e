"""
Core module for application configuration and domain logic.

Note: auth and the domain modules are not imported at package level to avoid
circular imports with app.models (which reads settings from app.core.config).
Import them directly: from app.core.auth import ... or from app.core.submission import ...
"""
from .config import settings

__all__ = ["settings"]
