"""
Runtime package for the Thansin Chat companion.

This package contains:
- API layer (FastAPI server + routes)
- Agents (turn dispatch)
- Stores (key-value persistence, session state, event logs)
- Models (Pydantic models for turns, avatar state and HTTP payloads)
"""
