"""Registrar Portal API Application."""


def setup_models():
    """Import every model so SQLAlchemy can resolve relationships declared by name."""
    from app.core import models  # noqa: F401


setup_models()
