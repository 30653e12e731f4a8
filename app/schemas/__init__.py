"""
Schemas package
Only the commonly used schemas are exposed here to avoid circular imports
"""

from .commons_schemas import MessageResponse

# Import per-module schemas directly where needed
# from .letter_schemas import LetterCreateRequest, LetterResponse
# from .verify_schemas import VerifyDocumentRequest, VerifyDocumentResponse
