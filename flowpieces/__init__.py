"""
flowpieces: Kommo and Zagomail integration pieces for workflow automation.

Packages:
- framework:    Piece, Action and Trigger abstractions, store, webhook lifecycle
- integrations: Async vendor HTTP clients and pydantic schemas
- pieces:       The Kommo and Zagomail pieces
- app:          FastAPI host adapter
"""

__version__ = "0.1.0"
