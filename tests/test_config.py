# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from coreason_playground.config import PlaygroundConfig


def test_defaults() -> None:
    config = PlaygroundConfig()
    assert config.compiler_path == "/app/compiler/v0.79/trivil"
    assert config.temp_directory == Path("/app/temp")
    assert config.compilation_timeout_ms == 300_000
    assert config.execution_timeout_ms == 10_000
    assert config.max_source_code_length == 10_000
    assert config.max_output_length == 50_000
    assert config.ast_verbosity == "2"
    assert config.kill_orphans_on_start is True


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COREASON_PLAYGROUND_EXECUTION_TIMEOUT_MS", "2500")
    monkeypatch.setenv("COREASON_PLAYGROUND_COMPILER_PATH", "/opt/trivil/bin/trivil")
    monkeypatch.setenv("COREASON_PLAYGROUND_TEMP_DIRECTORY", "/tmp/playground")

    config = PlaygroundConfig()

    assert config.execution_timeout_ms == 2500
    assert config.execution_timeout == 2.5
    assert config.compiler_path == "/opt/trivil/bin/trivil"
    assert config.temp_directory == Path("/tmp/playground")


@pytest.mark.parametrize(
    "field",
    ["compilation_timeout_ms", "execution_timeout_ms", "max_source_code_length", "max_output_length"],
)
def test_limits_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        PlaygroundConfig(**{field: 0})


def test_blank_compiler_path_rejected() -> None:
    with pytest.raises(ValidationError, match="compiler_path must not be blank"):
        PlaygroundConfig(compiler_path="   ")


def test_compiler_executable_resolution() -> None:
    assert PlaygroundConfig(compiler_path="trivil").compiler_executable == "trivil"

    relative = PlaygroundConfig(compiler_path="bin/trivil").compiler_executable
    assert os.path.isabs(relative)
    assert relative.endswith(os.path.join("bin", "trivil"))

    assert PlaygroundConfig(compiler_path="/usr/bin/trivil").compiler_executable == "/usr/bin/trivil"


def test_orphan_pattern() -> None:
    assert PlaygroundConfig().orphan_pattern == "trivil.*-ast"
    assert PlaygroundConfig(orphan_process_pattern="tric -ast").orphan_pattern == "tric -ast"


def test_timeouts_in_seconds() -> None:
    config = PlaygroundConfig(compilation_timeout_ms=1500, execution_timeout_ms=250)
    assert config.compilation_timeout == 1.5
    assert config.execution_timeout == 0.25
