# src/coreason_playground/models/__init__.py

"""
Data models for the playground service.
"""

from .compile import CompileRequest, CompileResponse, CompileResultType
from .syntax import (
    SemanticKind,
    SyntaxAnalysisRequest,
    SyntaxAnalysisResponse,
    SyntaxToken,
    TokenType,
)

__all__ = [
    "CompileRequest",
    "CompileResponse",
    "CompileResultType",
    "SemanticKind",
    "SyntaxAnalysisRequest",
    "SyntaxAnalysisResponse",
    "SyntaxToken",
    "TokenType",
]
