# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

"""Fixed vocabulary of the Trivil language and of its compiler's conventions."""

KEYWORDS: frozenset[str] = frozenset(
    {
        "модуль", "импорт", "вход", "пусть", "если", "иначе", "пока", "для",
        "фн", "функция", "класс", "тип", "константа", "переменная", "возврат", "вернуть",
        "прервать", "продолжить", "выбор", "случай", "умолчание", "и", "или", "не",
        "истина", "ложь",
    }
)  # fmt: skip

BUILT_IN_TYPES: frozenset[str] = frozenset(
    {"Цел64", "Слово64", "Вещ64", "Лог", "Строка", "Символ", "Байт", "Пусто"}
)

BUILT_IN_FUNCTIONS: frozenset[str] = frozenset()

# Type names recognized when refining tokens that carry no semantic information
REFINED_TYPE_NAMES: frozenset[str] = frozenset({"Цел64", "Строка", "Булев", "Плав64"})

# Identifiers may contain hyphens after the first character
IDENTIFIER = r"[а-яёА-ЯЁa-zA-Z_][а-яёА-ЯЁa-zA-Z0-9_-]*"

SOURCE_SUFFIX = ".tri"
MODULE_KEYWORD = "модуль"

# Facility name used in a snippet -> import path added by the module wrapper
STD_FACILITIES: tuple[tuple[str, str], ...] = (
    ("вывод", "стд::вывод"),
    ("ввод", "стд::ввод"),
    ("файл", "стд::файл"),
)

NO_ERRORS_MARKER = "Без ошибок"
LEGACY_ARTIFACT_NAMES: tuple[str, ...] = ("privet", "privet.exe")
DEFAULT_ARTIFACT_NAME = "a.out"
