"""
Syntax analysis: static lexing plus AST-driven symbol classification.
"""

from .ast_mining import SymbolInfo, extract_user_module, mine_symbols
from .lexer import LexicalAnalyzer
from .semantic import SemanticEnhancer, merge_tokens
from .service import SyntaxAnalysisService

__all__ = [
    "LexicalAnalyzer",
    "SemanticEnhancer",
    "SymbolInfo",
    "SyntaxAnalysisService",
    "extract_user_module",
    "merge_tokens",
    "mine_symbols",
]
