"""Candidate extraction for keyhound.

The token extractor is the only detector keyhound has: it targets the AWS
access key shape and nothing else.
"""

from keyhound.detectors.token_extractor import (
    IDENTIFIER_LENGTH,
    SECRET_LENGTH,
    ExtractedTokens,
    TokenExtractor,
    extract_tokens,
    strip_newlines,
)

__all__ = [
    "IDENTIFIER_LENGTH",
    "SECRET_LENGTH",
    "ExtractedTokens",
    "TokenExtractor",
    "extract_tokens",
    "strip_newlines",
]
