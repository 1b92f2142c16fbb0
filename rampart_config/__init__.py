"""
Rampart Configuration Package.

Provides Pydantic Settings loaded from environment variables.
"""

from rampart_config.settings import Settings

__all__ = ["Settings"]
