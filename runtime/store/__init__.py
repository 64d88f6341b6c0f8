"""
Storage abstractions for the Thansin Chat runtime.

Includes:
- KeyValueStore: localStorage-style persistence (in-memory + file-backed)
- SessionStateManager: the turn history + avatar state of the session
- LogStore: append-only event logging for debugging / analysis
"""
