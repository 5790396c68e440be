# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from coreason_playground.models import (
    CompileRequest,
    CompileResponse,
    SyntaxAnalysisRequest,
    SyntaxAnalysisResponse,
)
from coreason_playground.service import PlaygroundService
from coreason_playground.utils.logger import logger

# Initialize Playground Logic
playground = PlaygroundService()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    await playground.start()
    try:
        yield
    finally:
        await playground.shutdown()


# Initialize MCP Server
mcp = FastMCP("coreason-playground", lifespan=lifespan)


def _validation_message(error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])} - {item['msg']}" for item in error.errors()
    )
    return f"Validation error: {details}"


@mcp.tool()  # type: ignore[misc]
async def compile_code(source_code: str) -> dict[str, Any]:
    """
    Compile a Trivil snippet and run the resulting program.
    Returns the program output, or the compiler/runtime error.
    """
    try:
        request = CompileRequest(source_code=source_code)
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return CompileResponse.compilation_error(_validation_message(e)).to_payload()

    try:
        response = await playground.compile_and_execute(request.sanitized_source_code())
    except Exception as e:
        logger.exception("Unexpected error during compilation")
        response = CompileResponse.compilation_error(f"Internal server error: {e!s}")
    return response.to_payload()


@mcp.tool()  # type: ignore[misc]
async def analyze_syntax(source_code: str, position: int = -1) -> dict[str, Any]:
    """
    Tokenize a Trivil snippet for syntax highlighting.
    Tokens carry semantic classes when the compiler's AST dump is available.
    """
    try:
        request = SyntaxAnalysisRequest(source_code=source_code, position=position)
    except ValidationError as e:
        return SyntaxAnalysisResponse.failed(_validation_message(e), 0).to_payload()

    try:
        response = await playground.analyze_syntax(request.source_code)
    except Exception as e:
        logger.exception("Unexpected error during syntax analysis")
        response = SyntaxAnalysisResponse.failed(f"Internal server error: {e!s}", 0)
    return response.to_payload()


@mcp.tool()  # type: ignore[misc]
async def health() -> str:
    """Report whether the playground service is running."""
    return f"Trivil Playground is healthy ({len(playground.registry)} active processes)"


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
