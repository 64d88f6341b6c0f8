"""
Pydantic / datamodels used by the Thansin Chat runtime.

Split into:
- session_models: Turn + Speaker + ErrorKind + AvatarState
- api_models: HTTP request/response schemas
"""
