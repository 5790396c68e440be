# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

"""Data models for compile-and-run requests and their outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from coreason_playground.source import sanitize_source


class CompileResultType(str, Enum):
    SUCCESS = "success"
    COMPILATION_ERROR = "compilation_error"
    RUNTIME_ERROR = "runtime_error"
    TIMEOUT = "timeout"


class CompileRequest(BaseModel):
    """A request to compile and run a snippet."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_code: str = Field(..., max_length=10_000)

    @field_validator("source_code")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Source code cannot be blank")
        return value

    def sanitized_source_code(self) -> str:
        return sanitize_source(self.source_code, strip=True)


class CompileResponse(BaseModel):
    """Outcome of a compile-and-run request.

    Exactly one of the four result kinds is represented. Use the named constructors
    rather than building instances directly.

    Attributes:
        success: True only for a program that compiled and exited with code 0.
        output: Program output for successful runs.
        error: Compiler output, runtime output or a synthesized message otherwise.
        execution_time_ms: Elapsed time, present for runs that reached execution.
        result_type: One of ``success``, ``compilation_error``, ``runtime_error``, ``timeout``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    success: bool
    output: str | None = None
    error: str | None = None
    execution_time_ms: int | None = None
    result_type: CompileResultType

    @classmethod
    def succeeded(cls, output: str, execution_time_ms: int) -> "CompileResponse":
        return cls(
            success=True,
            output=output,
            execution_time_ms=execution_time_ms,
            result_type=CompileResultType.SUCCESS,
        )

    @classmethod
    def compilation_error(cls, error: str) -> "CompileResponse":
        return cls(success=False, error=error, result_type=CompileResultType.COMPILATION_ERROR)

    @classmethod
    def runtime_error(cls, error: str, execution_time_ms: int) -> "CompileResponse":
        return cls(
            success=False,
            error=error,
            execution_time_ms=execution_time_ms,
            result_type=CompileResultType.RUNTIME_ERROR,
        )

    @classmethod
    def timed_out(cls, message: str) -> "CompileResponse":
        return cls(success=False, error=message, result_type=CompileResultType.TIMEOUT)

    def to_payload(self) -> dict[str, object]:
        """Serialize for the wire, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
