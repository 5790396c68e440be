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
import time

from coreason_playground.language import MODULE_KEYWORD, STD_FACILITIES

# Lone surrogates survive JSON decoding but cannot be written as UTF-8
_SURROGATE_PATTERN = re.compile("[\ud800-\udfff]")


def sanitize_source(text: str | None, strip: bool = False) -> str:
    """Remove NUL bytes, normalize line endings to LF and replace lone surrogates.

    Each surrogate becomes U+FFFD, so code-point columns are unchanged.

    Args:
        text: Raw snippet text. ``None`` is treated as empty.
        strip: Also trim surrounding whitespace. Not used for analysis, where
            token positions must match the editor buffer.
    """
    if text is None:
        return ""
    cleaned = text.replace("\0", "").replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _SURROGATE_PATTERN.sub("\ufffd", cleaned)
    return cleaned.strip() if strip else cleaned


def wrap_in_module(source: str, module_name: str | None = None) -> str:
    """Give a bare snippet the module header and std imports it needs to compile.

    Snippets that already declare a module are returned unchanged. Imports are inferred
    from plain substring checks against known facility names.
    """
    if source.strip().startswith(f"{MODULE_KEYWORD} "):
        return source

    name = module_name or f"sample_{int(time.time() * 1000) % 10000}"
    parts = [f"{MODULE_KEYWORD} {name}\n\n"]
    for facility, import_path in STD_FACILITIES:
        if facility in source:
            parts.append(f'импорт "{import_path}"\n\n')
    parts.append(source)
    return "".join(parts)
