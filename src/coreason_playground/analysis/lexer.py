# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import re
from dataclasses import dataclass, field

from loguru import logger

from coreason_playground.language import (
    BUILT_IN_FUNCTIONS,
    BUILT_IN_TYPES,
    IDENTIFIER,
    KEYWORDS,
)
from coreason_playground.models import SyntaxToken, TokenType

COMMENT_PATTERN = re.compile(r"//.*$")
STRING_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"')
NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b")
IDENTIFIER_PATTERN = re.compile(IDENTIFIER)
OPERATOR_PATTERN = re.compile(r"[+\-*/=<>!&|^%:;,.()\[\]{}]")

FUNCTION_DECL_PATTERN = re.compile(rf"фн\s+({IDENTIFIER})\s*\(")
PAREN_GROUP_PATTERN = re.compile(r"\(([^)]+)\)")
PARAMETER_PATTERN = re.compile(rf"({IDENTIFIER})\s*:")
LET_PATTERN = re.compile(rf"пусть\s+({IDENTIFIER})\s*=")
ASSIGNMENT_PATTERN = re.compile(rf"({IDENTIFIER})\s*=\s*[^=]")


@dataclass
class DeclaredNames:
    """Names declared anywhere in a document, gathered by the first pass."""

    functions: set[str] = field(default_factory=set)
    parameters: set[str] = field(default_factory=set)
    variables: set[str] = field(default_factory=set)


def _function_names(line: str) -> set[str]:
    return {m.group(1) for m in FUNCTION_DECL_PATTERN.finditer(line)}


def _parameter_names(line: str) -> set[str]:
    names: set[str] = set()
    for group in PAREN_GROUP_PATTERN.finditer(line):
        names.update(m.group(1) for m in PARAMETER_PATTERN.finditer(group.group(1)))
    return names


def _variable_names(line: str) -> set[str]:
    names = {m.group(1) for m in LET_PATTERN.finditer(line)}
    for match in ASSIGNMENT_PATTERN.finditer(line):
        name = match.group(1)
        if name not in KEYWORDS and name not in BUILT_IN_TYPES:
            names.add(name)
    return names


def classify_identifier(word: str) -> TokenType:
    """Static classification against the fixed language tables."""
    if word in KEYWORDS:
        return TokenType.KEYWORD
    if word in BUILT_IN_TYPES:
        return TokenType.BUILT_IN_TYPE
    if word in BUILT_IN_FUNCTIONS:
        return TokenType.BUILT_IN_FUNCTION
    return TokenType.IDENTIFIER


class LexicalAnalyzer:
    """
    Two-pass, line-oriented tokenizer that never needs the compiler.

    The first pass collects function, parameter and variable names across the whole
    document. The second pass emits tokens line by line in category order: comment,
    strings, numbers, identifiers, operators. Within a category tokens follow source
    position. Consumers needing strict document order must sort by position.
    """

    def tokenize(self, source: str) -> list[SyntaxToken]:
        lines = source.split("\n")
        declared = self.collect_declarations(lines)
        logger.debug(
            f"Multi-line analysis: functions={sorted(declared.functions)}, "
            f"parameters={sorted(declared.parameters)}, variables={sorted(declared.variables)}"
        )

        tokens: list[SyntaxToken] = []
        for line_number, line in enumerate(lines):
            tokens.extend(self._tokenize_line(line, line_number, declared))
        return tokens

    @staticmethod
    def collect_declarations(lines: list[str]) -> DeclaredNames:
        declared = DeclaredNames()
        for line in lines:
            declared.functions |= _function_names(line)
            declared.parameters |= _parameter_names(line)
            declared.variables |= _variable_names(line)
        return declared

    def _tokenize_line(self, line: str, line_number: int, declared: DeclaredNames) -> list[SyntaxToken]:
        tokens: list[SyntaxToken] = []

        def emit(start: int, end: int, token_type: TokenType, value: str) -> None:
            tokens.append(
                SyntaxToken(
                    start_line=line_number,
                    start_column=start,
                    end_line=line_number,
                    end_column=end,
                    token_type=token_type,
                    value=value,
                )
            )

        comment = COMMENT_PATTERN.search(line)
        if comment:
            emit(comment.start(), len(line), TokenType.COMMENT, comment.group())
            line = line[: comment.start()]

        string_ranges: list[tuple[int, int]] = []
        for match in STRING_PATTERN.finditer(line):
            string_ranges.append((match.start(), match.end()))
            emit(match.start(), match.end(), TokenType.STRING_LITERAL, match.group())

        def in_string(position: int) -> bool:
            return any(start <= position < end for start, end in string_ranges)

        for match in NUMBER_PATTERN.finditer(line):
            if not in_string(match.start()):
                emit(match.start(), match.end(), TokenType.NUMBER_LITERAL, match.group())

        local_functions = _function_names(line)
        local_parameters = _parameter_names(line)
        for match in IDENTIFIER_PATTERN.finditer(line):
            if in_string(match.start()):
                continue
            word = match.group()
            emit(match.start(), match.end(), self._classify(word, local_functions, local_parameters, declared), word)

        for match in OPERATOR_PATTERN.finditer(line):
            if not in_string(match.start()):
                emit(match.start(), match.end(), TokenType.OPERATOR, match.group())

        return tokens

    @staticmethod
    def _classify(
        word: str,
        local_functions: set[str],
        local_parameters: set[str],
        declared: DeclaredNames,
    ) -> TokenType:
        if word in local_functions or word in declared.functions:
            return TokenType.USER_FUNCTION
        if word in local_parameters or word in declared.parameters:
            return TokenType.FUNCTION_PARAMETER
        if word in declared.variables:
            return TokenType.USER_VARIABLE
        return classify_identifier(word)
