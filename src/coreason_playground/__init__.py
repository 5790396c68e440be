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
coreason-playground
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .analysis import LexicalAnalyzer, SemanticEnhancer, SyntaxAnalysisService
from .compiler import CompilerService
from .config import PlaygroundConfig
from .models import CompileResponse, SyntaxAnalysisResponse, SyntaxToken
from .process import ProcessRegistry, ProcessRunner, ProcessSweeper
from .service import PlaygroundService
from .workspace import Workspace

__all__ = [
    "CompileResponse",
    "CompilerService",
    "LexicalAnalyzer",
    "PlaygroundConfig",
    "PlaygroundService",
    "ProcessRegistry",
    "ProcessRunner",
    "ProcessSweeper",
    "SemanticEnhancer",
    "SyntaxAnalysisResponse",
    "SyntaxAnalysisService",
    "SyntaxToken",
    "Workspace",
]
