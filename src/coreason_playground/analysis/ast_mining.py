# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

"""
Symbol extraction from the compiler's textual AST dump.

The dump is never parsed. Instead, a fixed, ordered list of named rules scans it with
regular expressions. Everything here is a pure function of the dump text.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from coreason_playground.language import BUILT_IN_TYPES, KEYWORDS
from coreason_playground.models import SemanticKind

EXECUTE_MARKER = "Execute:"
ENTRY_FUNCTION_MARKER = "(EntryFn"
MODULE_OPEN = '(Module "'
MODULE_NAME_PATTERN = re.compile(r'\(Module "([^"]+)"')

SYSTEM_MODULE_PREFIXES = ("стд::", "sys::", "runtime::")
SYSTEM_MODULE_NAMES = frozenset({"builtin", "core", "system"})

FALLBACK_WINDOW = 2000

# Names the runtime defines as functions that are never user code
RUNTIME_FUNCTION_PREFIXES = ("tri_", "sysapi_")
RUNTIME_FUNCTION_NAMES = frozenset({"строка", "кс", "цел64", "ф"})

MAX_PARAMETER_LENGTH = 10


@dataclass(frozen=True)
class SymbolInfo:
    kind: SemanticKind
    detail: str | None = None


SymbolTable = dict[str, SymbolInfo]


@dataclass(frozen=True)
class AstText:
    """A full dump and the sub-text belonging to the user's module."""

    full: str
    user: str


def _function_marker(name: str) -> str:
    return f'(Function "{name}" "functype"'


# --- Locating the user module -------------------------------------------------------


def _before_execute_marker(dump: str) -> str:
    """Last module block that starts before the final execute marker."""
    execute_index = dump.rfind(EXECUTE_MARKER)
    if execute_index <= 0:
        return ""
    module_start = dump.rfind(MODULE_OPEN, 0, execute_index)
    if module_start < 0:
        return ""
    return dump[module_start:execute_index].strip()


def _around_entry_function(dump: str) -> str:
    """Module block that contains the entry function marker."""
    entry_index = dump.find(ENTRY_FUNCTION_MARKER)
    if entry_index < 0:
        return ""
    module_start = dump.rfind(MODULE_OPEN, 0, entry_index)
    if module_start < 0:
        return ""
    module_end = dump.find(EXECUTE_MARKER, entry_index)
    if module_end < 0:
        module_end = len(dump)
    return dump[module_start:module_end].strip()


def is_system_module(name: str) -> bool:
    return name.startswith(SYSTEM_MODULE_PREFIXES) or name in SYSTEM_MODULE_NAMES


def _last_user_module(dump: str) -> str:
    """Last module block whose name is not a standard or system module."""
    last_index = -1
    for match in MODULE_NAME_PATTERN.finditer(dump):
        if not is_system_module(match.group(1)):
            last_index = match.start()
    if last_index < 0:
        return ""
    module_end = dump.find(EXECUTE_MARKER, last_index)
    if module_end < 0:
        module_end = len(dump)
    return dump[last_index:module_end].strip()


def _trailing_window(dump: str) -> str:
    return dump[-FALLBACK_WINDOW:]


USER_MODULE_LOCATORS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("before_execute_marker", _before_execute_marker),
    ("around_entry_function", _around_entry_function),
    ("last_user_module", _last_user_module),
    ("trailing_window", _trailing_window),
)


def extract_user_module(dump: str) -> str:
    """Return the part of ``dump`` that describes the user's own module.

    Locators are tried in priority order; the first non-empty result wins.
    """
    for name, locate in USER_MODULE_LOCATORS:
        section = locate(dump)
        if section:
            logger.debug(f"User module located by {name} ({len(section)} chars)")
            return section
    return ""


# --- Extraction rules -----------------------------------------------------------------

USER_FUNCTION_PATTERN = re.compile(r'\(Function "([^"]+)" "functype"(?!.*External)')
IMPORT_PATTERN = re.compile(r'\(Import "([^"]+)"')
VAR_DECL_PATTERN = re.compile(r'\(VarDecl "([^"]+)" "([^"]*?)"')
IDENT_EXPR_PATTERN = re.compile(r'\(IdentExpr "[^"]+" "([^"]+)"\)')
SELECTOR_PATTERN = re.compile(r'\(SelectorExpr "functype" "([^"]+)"\)')
USER_CALL_PATTERN = re.compile(r'\(CallExpr "нет результата" \(IdentExpr "functype" RO "([^"]+)"\)')
EXTERNAL_FUNCTION_PATTERN = re.compile(r'\(Function "([^"]+)" "functype"[^(]*External')
IDENT_USAGE_PATTERN = re.compile(r'\(IdentExpr\s+"[^"]*"\s+"([^"]+)"\)(?!\s*\))')


def user_functions(ast: AstText, symbols: SymbolTable) -> None:
    """Non-external function definitions in the user module."""
    for match in USER_FUNCTION_PATTERN.finditer(ast.user):
        name = match.group(1)
        if name.startswith(RUNTIME_FUNCTION_PREFIXES) or name in RUNTIME_FUNCTION_NAMES or len(name) <= 1:
            continue
        symbols[name] = SymbolInfo(SemanticKind.USER_FUNCTION)


def imports(ast: AstText, symbols: SymbolTable) -> None:
    """``стд::вывод`` makes ``вывод`` an imported class."""
    for match in IMPORT_PATTERN.finditer(ast.user):
        path = match.group(1)
        parts = path.split("::")
        if len(parts) > 1:
            symbols[parts[-1]] = SymbolInfo(SemanticKind.IMPORTED_CLASS, detail=path)


def typed_variables(ast: AstText, symbols: SymbolTable) -> None:
    for match in VAR_DECL_PATTERN.finditer(ast.user):
        name, var_type = match.group(1), match.group(2)
        if name not in KEYWORDS and len(name) > 1:
            symbols[name] = SymbolInfo(SemanticKind.USER_VARIABLE, detail=var_type)


def parameters(ast: AstText, symbols: SymbolTable) -> None:
    """Short identifier expressions not yet classified are taken to be parameters."""
    for match in IDENT_EXPR_PATTERN.finditer(ast.user):
        name = match.group(1)
        if (
            name in symbols
            or name in KEYWORDS
            or name in BUILT_IN_TYPES
            or name == "RO"
            or len(name) > MAX_PARAMETER_LENGTH
            or not name[0].isalpha()
        ):
            continue
        # A name defined as a function earlier in the module is not a parameter
        if _function_marker(name) in ast.user[: match.start()]:
            continue
        symbols[name] = SymbolInfo(SemanticKind.FUNCTION_PARAMETER)


def selectors(ast: AstText, symbols: SymbolTable) -> None:
    """Member access on imported modules, e.g. ``вывод.ф``."""
    for match in SELECTOR_PATTERN.finditer(ast.user):
        name = match.group(1)
        if name not in symbols and name not in KEYWORDS:
            symbols[name] = SymbolInfo(SemanticKind.IMPORTED_FUNCTION, detail="method")


def local_calls(ast: AstText, symbols: SymbolTable) -> None:
    """Calls whose callee is defined as a function in the user module."""
    for match in USER_CALL_PATTERN.finditer(ast.user):
        name = match.group(1)
        if name in symbols or name.startswith("std") or len(name) <= 1 or name in KEYWORDS:
            continue
        if _function_marker(name) in ast.user:
            symbols[name] = SymbolInfo(SemanticKind.USER_FUNCTION)


def external_functions(ast: AstText, symbols: SymbolTable) -> None:
    """External function definitions anywhere in the dump, including std modules."""
    for match in EXTERNAL_FUNCTION_PATTERN.finditer(ast.full):
        name = match.group(1)
        if name not in symbols:
            symbols[name] = SymbolInfo(SemanticKind.IMPORTED_FUNCTION)


def variable_usages(ast: AstText, symbols: SymbolTable) -> None:
    """Last resort: identifiers that also appear in a declaration or assignment."""
    for match in IDENT_USAGE_PATTERN.finditer(ast.user):
        name = match.group(1)
        if name in symbols or name in KEYWORDS or name in BUILT_IN_TYPES or len(name) <= 1:
            continue
        if f'(VarDecl "{name}"' in ast.user or f"= {name}" in ast.user or f"{name} =" in ast.user:
            symbols[name] = SymbolInfo(SemanticKind.USER_VARIABLE)


ExtractionRule = Callable[[AstText, SymbolTable], None]

EXTRACTION_RULES: tuple[tuple[str, ExtractionRule], ...] = (
    ("user_functions", user_functions),
    ("imports", imports),
    ("typed_variables", typed_variables),
    ("parameters", parameters),
    ("selectors", selectors),
    ("local_calls", local_calls),
    ("external_functions", external_functions),
    ("variable_usages", variable_usages),
)


def mine_symbols(dump: str) -> SymbolTable:
    """Build a name -> SymbolInfo map from an AST dump.

    Rules run in the order of EXTRACTION_RULES; later rules mostly skip names that an
    earlier rule already classified.
    """
    user_section = extract_user_module(dump)
    if not user_section:
        logger.warning("Could not identify user module from AST output")
        return {}

    ast = AstText(full=dump, user=user_section)
    symbols: SymbolTable = {}
    for name, rule in EXTRACTION_RULES:
        before = len(symbols)
        rule(ast, symbols)
        logger.debug(f"Rule {name} added {len(symbols) - before} symbols")

    logger.info(f"AST parsing completed. Found {len(symbols)} semantic entries")
    return symbols
