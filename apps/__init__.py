"""
Rampart Applications Package.

Contains:
- core_api: FastAPI application exposing the enforcement pipeline
"""

__version__ = "0.1.0"
