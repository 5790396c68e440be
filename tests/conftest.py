# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_playground

import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

from coreason_playground.config import PlaygroundConfig
from coreason_playground.process import ProcessRegistry, ProcessRunner

# Stand-in for the external compiler. Behavior is read from behavior.json next to it.
FAKE_COMPILER = """
import json
import os
import shutil
import sys
import time

here = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(here, "behavior.json"), encoding="utf-8") as f:
    behavior = json.load(f)

source = sys.argv[-1]
base = os.path.splitext(os.path.basename(source))[0]

if behavior.get("record_source"):
    shutil.copy(source, os.path.join(here, "last_source.tri"))

if "-ast" in sys.argv:
    time.sleep(behavior.get("ast_sleep", 0))
    sys.stdout.buffer.write(behavior.get("ast_output", "").encode("utf-8"))
    sys.exit(behavior.get("ast_exit_code", 0))

time.sleep(behavior.get("sleep", 0))
artifact = behavior.get("artifact")
if artifact is not None:
    path = artifact.replace("{base}", base)
    with open(path, "w", encoding="utf-8") as out:
        out.write("#!" + sys.executable + "\\n" + behavior.get("program", "") + "\\n")
    os.chmod(path, 0o755)
sys.stdout.buffer.write(behavior.get("output", "").encode("utf-8"))
sys.exit(behavior.get("exit_code", 0))
"""

SAMPLE_AST = """\
(Module "стд::вывод"
  (Function "строка" "functype" External)
  (Function "ф" "functype" External)
  (Function "вывести-строку" "functype" External)
)
(Module "sample_42"
  (Import "стд::вывод")
  (Function "сумма" "functype"
    (Params (Param "икс" "Цел64") (Param "игрек" "Цел64"))
    (Return (BinaryExpr "+" (IdentExpr "Цел64" "икс") (IdentExpr "Цел64" "игрек")))
  )
  (EntryFn
    (VarDecl "итог" "Цел64" (CallExpr "Цел64" (IdentExpr "functype" RO "сумма")))
    (CallExpr "нет результата" (SelectorExpr "functype" "ф") (IdentExpr "Цел64" "итог"))
  )
)
Execute: sample_42
"""


@pytest.fixture
def compiler_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "compiler"
    directory.mkdir()
    script = directory / "trivil"
    script.write_text(f"#!{sys.executable}\n{FAKE_COMPILER}", encoding="utf-8")
    script.chmod(0o755)
    return directory


@pytest.fixture
def fake_compiler(compiler_dir: Path) -> Callable[..., Path]:
    """Configure the fake compiler's behavior and return its path."""

    def configure(**behavior: Any) -> Path:
        (compiler_dir / "behavior.json").write_text(json.dumps(behavior, ensure_ascii=False), encoding="utf-8")
        return compiler_dir / "trivil"

    return configure


@pytest.fixture
def make_config(tmp_path: Path, compiler_dir: Path) -> Callable[..., PlaygroundConfig]:
    def build(**overrides: Any) -> PlaygroundConfig:
        settings: dict[str, Any] = {
            "compiler_path": str(compiler_dir / "trivil"),
            "temp_directory": tmp_path / "work",
            "compilation_timeout_ms": 10_000,
            "execution_timeout_ms": 5_000,
            "kill_orphans_on_start": False,
        }
        settings.update(overrides)
        return PlaygroundConfig(**settings)

    return build


@pytest.fixture
def playground_config(make_config: Callable[..., PlaygroundConfig]) -> PlaygroundConfig:
    return make_config()


@pytest.fixture
def registry() -> ProcessRegistry:
    return ProcessRegistry(kill_grace_period=2.0)


@pytest.fixture
def runner(registry: ProcessRegistry) -> ProcessRunner:
    return ProcessRunner(registry, kill_grace_period=2.0, output_grace_period=5.0)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def sample_ast() -> str:
    return SAMPLE_AST
