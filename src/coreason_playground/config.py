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

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlaygroundConfig(BaseSettings):
    """
    Configuration for the compiler playground.
    """

    compiler_path: str = "/app/compiler/v0.79/trivil"
    temp_directory: Path = Path("/app/temp")

    compilation_timeout_ms: int = Field(default=300_000, gt=0)
    execution_timeout_ms: int = Field(default=10_000, gt=0)
    max_source_code_length: int = Field(default=10_000, gt=0)
    max_output_length: int = Field(default=50_000, gt=0)

    ast_verbosity: str = "2"

    sweep_interval: float = Field(default=120.0, gt=0)  # Seconds between registry sweeps
    kill_grace_period: float = Field(default=2.0, gt=0)
    output_grace_period: float = Field(default=5.0, gt=0)

    kill_orphans_on_start: bool = True
    orphan_process_pattern: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="COREASON_PLAYGROUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("compiler_path")
    @classmethod
    def _compiler_path_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("compiler_path must not be blank")
        return value

    @property
    def compiler_executable(self) -> str:
        """Compiler path usable from inside a workspace directory.

        Paths with a directory component are made absolute against the current working
        directory; bare command names are left for PATH lookup.
        """
        if os.sep in self.compiler_path or (os.altsep and os.altsep in self.compiler_path):
            return str(Path(self.compiler_path).expanduser().absolute())
        return self.compiler_path

    @property
    def orphan_pattern(self) -> str:
        """Regex matched against command lines of leftover AST-dump compiler processes."""
        if self.orphan_process_pattern:
            return self.orphan_process_pattern
        return f"{Path(self.compiler_path).name}.*-ast"

    @property
    def compilation_timeout(self) -> float:
        return self.compilation_timeout_ms / 1000

    @property
    def execution_timeout(self) -> float:
        return self.execution_timeout_ms / 1000
