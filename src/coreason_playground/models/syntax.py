# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TokenType(str, Enum):
    """Token classifications understood by the editor."""

    # Static pass
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    BUILT_IN_TYPE = "BUILT_IN_TYPE"
    BUILT_IN_FUNCTION = "BUILT_IN_FUNCTION"
    STRING_LITERAL = "STRING_LITERAL"
    NUMBER_LITERAL = "NUMBER_LITERAL"
    COMMENT = "COMMENT"
    OPERATOR = "OPERATOR"

    # Context-aware classes shared by the static and semantic passes
    USER_FUNCTION = "function.user"
    FUNCTION_PARAMETER = "variable.parameter"
    USER_VARIABLE = "variable.user"

    # Semantic merge only
    IMPORTED_CLASS = "class.imported"
    IMPORTED_FUNCTION = "function.imported"
    SEMANTIC_IDENTIFIER = "identifier"
    SEMANTIC_KEYWORD = "keyword"
    SEMANTIC_BUILT_IN_TYPE = "type.builtin"


class SemanticKind(str, Enum):
    """Symbol kinds mined from the compiler's AST dump."""

    USER_FUNCTION = "USER_FUNCTION"
    USER_VARIABLE = "USER_VARIABLE"
    FUNCTION_PARAMETER = "FUNCTION_PARAMETER"
    IMPORTED_CLASS = "IMPORTED_CLASS"
    IMPORTED_FUNCTION = "IMPORTED_FUNCTION"


class SyntaxToken(BaseModel):
    """A positioned, classified span of source text.

    Positions are zero-based; ``end_column`` is exclusive. Columns count code points.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        frozen=True,
    )

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    token_type: TokenType
    value: str
    semantic_info: SemanticKind | None = None
    semantic_detail: str | None = None


class SyntaxAnalysisRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_code: str = Field(..., max_length=10_000)
    position: int = -1


class SyntaxAnalysisResponse(BaseModel):
    """Token stream for a snippet, or an error with no tokens."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    tokens: list[SyntaxToken] = Field(default_factory=list)
    error: str | None = None
    analysis_time_ms: int

    @classmethod
    def succeeded(cls, tokens: list[SyntaxToken], analysis_time_ms: int) -> "SyntaxAnalysisResponse":
        return cls(success=True, tokens=tokens, analysis_time_ms=analysis_time_ms)

    @classmethod
    def failed(cls, error: str, analysis_time_ms: int) -> "SyntaxAnalysisResponse":
        return cls(success=False, tokens=[], error=error, analysis_time_ms=analysis_time_ms)

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)
