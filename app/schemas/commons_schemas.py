# app/schemas/commons_schemas.py
"""
Common schemas shared by several APIs
"""

from pydantic import BaseModel

# Simple message response (delete, etc.)
class MessageResponse(BaseModel):
    message: str
