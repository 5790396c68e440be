# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, patch

import pytest

from coreason_playground.analysis import LexicalAnalyzer, SemanticEnhancer, SyntaxAnalysisService
from coreason_playground.analysis.ast_mining import SymbolInfo
from coreason_playground.analysis.semantic import merge_tokens, refine_token_type
from coreason_playground.config import PlaygroundConfig
from coreason_playground.models import SemanticKind, SyntaxToken, TokenType
from coreason_playground.process import ProcessRegistry, ProcessRunner

SOURCE = """\
фн сумма(икс: Цел64, игрек: Цел64): Цел64 {
    вернуть икс + игрек
}
вход {
    пусть итог = сумма(1, 2)
    вывод.ф("$;", итог)
}"""


def token(value: str, token_type: TokenType = TokenType.IDENTIFIER) -> SyntaxToken:
    return SyntaxToken(
        start_line=0, start_column=0, end_line=0, end_column=len(value), token_type=token_type, value=value
    )


def by_value(tokens: list[SyntaxToken], value: str) -> list[SyntaxToken]:
    return [t for t in tokens if t.value == value]


def sessions(work_dir: Path) -> list[Path]:
    if not work_dir.exists():
        return []
    return [p for p in work_dir.iterdir() if p.name.startswith("session_")]


def test_refine_token_type() -> None:
    assert refine_token_type(token("пока", TokenType.KEYWORD)) == "keyword"
    assert refine_token_type(token("Цел64", TokenType.BUILT_IN_TYPE)) == "type.builtin"
    assert refine_token_type(token("Булев")) == "type.builtin"
    assert refine_token_type(token("Вещ64", TokenType.BUILT_IN_TYPE)) == "BUILT_IN_TYPE"
    assert refine_token_type(token("+", TokenType.OPERATOR)) == "OPERATOR"


def test_merge_tokens() -> None:
    tokens = [token("вывод"), token("ф"), token("итог", TokenType.USER_VARIABLE), token("пусть", TokenType.KEYWORD)]
    symbols = {
        "вывод": SymbolInfo(SemanticKind.IMPORTED_CLASS, detail="стд::вывод"),
        "ф": SymbolInfo(SemanticKind.IMPORTED_FUNCTION, detail="method"),
        "итог": SymbolInfo(SemanticKind.USER_VARIABLE, detail="Цел64"),
    }

    merged = merge_tokens(tokens, symbols)

    assert [(t.token_type, t.semantic_info, t.semantic_detail) for t in merged] == [
        ("class.imported", "IMPORTED_CLASS", "стд::вывод"),
        ("function.imported", "IMPORTED_FUNCTION", "method"),
        ("variable.user", "USER_VARIABLE", "Цел64"),
        ("keyword", None, None),
    ]
    # Positions and text are preserved
    assert [(t.value, t.start_column, t.end_column) for t in merged] == [
        (t.value, t.start_column, t.end_column) for t in tokens
    ]
    # Input tokens are not mutated
    assert tokens[0].token_type == "IDENTIFIER"


def test_merge_with_no_symbols_refines_only() -> None:
    tokens = [token("сумма", TokenType.USER_FUNCTION), token("Строка", TokenType.BUILT_IN_TYPE)]
    merged = merge_tokens(tokens, {})
    assert merged[0] is tokens[0]
    assert merged[1].token_type == "type.builtin"


@pytest.mark.asyncio
async def test_collect_symbols_wraps_source(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    compiler_dir: Path,
    work_dir: Path,
    sample_ast: str,
) -> None:
    fake_compiler(ast_output=sample_ast, record_source=True)
    enhancer = SemanticEnhancer(playground_config, runner)

    symbols = await enhancer.collect_symbols(SOURCE)

    assert symbols is not None
    assert symbols["сумма"].kind == SemanticKind.USER_FUNCTION
    compiled = (compiler_dir / "last_source.tri").read_text(encoding="utf-8")
    assert compiled.startswith("модуль sample_")
    assert 'импорт "стд::вывод"' in compiled
    assert compiled.endswith(SOURCE)
    assert sessions(work_dir) == []


@pytest.mark.asyncio
async def test_enhance_applies_symbols(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    sample_ast: str,
) -> None:
    fake_compiler(ast_output=sample_ast)
    enhancer = SemanticEnhancer(playground_config, runner)
    static = LexicalAnalyzer().tokenize(SOURCE)

    enhanced = await enhancer.enhance(SOURCE, static)

    assert len(enhanced) == len(static)
    assert {t.token_type for t in by_value(enhanced, "сумма")} == {"function.user"}
    assert {t.token_type for t in by_value(enhanced, "икс")} == {"variable.parameter"}
    assert {t.semantic_detail for t in by_value(enhanced, "итог")} == {"Цел64"}
    assert {t.token_type for t in by_value(enhanced, "вывод")} == {"class.imported"}
    assert {t.token_type for t in by_value(enhanced, "ф")} == {"function.imported"}
    assert {t.token_type for t in by_value(enhanced, "вернуть")} == {"keyword"}
    assert {t.token_type for t in by_value(enhanced, "Цел64")} == {"type.builtin"}


@pytest.mark.asyncio
async def test_failed_dump_returns_static_tokens(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    sample_ast: str,
    work_dir: Path,
) -> None:
    fake_compiler(ast_output=sample_ast, ast_exit_code=1)
    enhancer = SemanticEnhancer(playground_config, runner)
    static = LexicalAnalyzer().tokenize(SOURCE)

    enhanced = await enhancer.enhance(SOURCE, static)

    assert enhanced == static
    assert all(t.semantic_info is None for t in enhanced)
    assert sessions(work_dir) == []


@pytest.mark.asyncio
async def test_missing_compiler_returns_none(
    make_config: Callable[..., PlaygroundConfig], runner: ProcessRunner, tmp_path: Path, work_dir: Path
) -> None:
    enhancer = SemanticEnhancer(make_config(compiler_path=str(tmp_path / "nowhere" / "trivil")), runner)

    assert await enhancer.collect_symbols(SOURCE) is None
    assert sessions(work_dir) == []


@pytest.mark.asyncio
async def test_dump_timeout_returns_none(
    make_config: Callable[..., PlaygroundConfig],
    runner: ProcessRunner,
    registry: ProcessRegistry,
    fake_compiler: Callable[..., Path],
    work_dir: Path,
) -> None:
    fake_compiler(ast_sleep=30)
    enhancer = SemanticEnhancer(make_config(compilation_timeout_ms=500), runner)

    assert await enhancer.collect_symbols(SOURCE) is None
    assert len(registry) == 0
    assert sessions(work_dir) == []


@pytest.mark.asyncio
async def test_workspace_creation_failure_returns_none(playground_config: PlaygroundConfig, runner: ProcessRunner) -> None:
    enhancer = SemanticEnhancer(playground_config, runner)
    with patch("coreason_playground.analysis.semantic.Workspace.create", side_effect=PermissionError("read-only")):
        assert await enhancer.collect_symbols(SOURCE) is None


@pytest.mark.asyncio
async def test_analysis_service_end_to_end(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    sample_ast: str,
) -> None:
    fake_compiler(ast_output=sample_ast)
    service = SyntaxAnalysisService(playground_config, runner)

    response = await service.analyze(SOURCE.replace("\n", "\r\n"))

    assert response.success is True
    assert response.error is None
    assert response.analysis_time_ms >= 0
    assert {t.token_type for t in by_value(response.tokens, "сумма")} == {"function.user"}
    assert max(t.start_line for t in response.tokens) == SOURCE.count("\n")


@pytest.mark.asyncio
async def test_analysis_service_static_failure(playground_config: PlaygroundConfig, runner: ProcessRunner) -> None:
    service = SyntaxAnalysisService(playground_config, runner)

    with patch.object(service.lexer, "tokenize", side_effect=RuntimeError("boom")):
        response = await service.analyze(SOURCE)

    assert response.success is False
    assert response.tokens == []
    assert response.error == "Syntax analysis failed: boom"


@pytest.mark.asyncio
async def test_unencodable_source_returns_static_tokens(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    sample_ast: str,
    work_dir: Path,
) -> None:
    fake_compiler(ast_output=sample_ast)
    enhancer = SemanticEnhancer(playground_config, runner)
    source = "вход {} \ud800"
    static = LexicalAnalyzer().tokenize(source)

    assert await enhancer.collect_symbols(source) is None
    assert await enhancer.enhance(source, static) == static
    assert sessions(work_dir) == []


@pytest.mark.asyncio
async def test_analysis_service_replaces_lone_surrogates(
    playground_config: PlaygroundConfig,
    runner: ProcessRunner,
    fake_compiler: Callable[..., Path],
    sample_ast: str,
) -> None:
    fake_compiler(ast_output=sample_ast)
    service = SyntaxAnalysisService(playground_config, runner)

    response = await service.analyze("пусть а = 1 \ud800")

    assert response.success is True
    assert [t.value for t in by_value(response.tokens, "пусть")] == ["пусть"]
    assert all("\ud800" not in t.value for t in response.tokens)


@pytest.mark.asyncio
@pytest.mark.parametrize("source", ["", "  \n"])
async def test_analysis_service_skips_dump_without_tokens(
    playground_config: PlaygroundConfig, runner: ProcessRunner, source: str
) -> None:
    service = SyntaxAnalysisService(playground_config, runner)

    with patch.object(service.enhancer, "enhance", new_callable=AsyncMock) as enhance:
        response = await service.analyze(source)

    enhance.assert_not_awaited()
    assert response.success is True
    assert response.tokens == []
