"""
Rendering Context

Responsibilities:
- Holds the command-line arguments of a compilation job
- Runs pdflatex, rerunning it while cross-references are unresolved
- Resolves compiled artifacts (PDF, AUX, LOG, TOC) asynchronously
- Owns and cleans up the job's temporary output directory

Owns: LaTeX compilation, output directory lifecycle
Never: Produces or modifies TeX source content
"""

from texjob.contexts.rendering.arguments import CompilationArguments
from texjob.contexts.rendering.compiler import (
    FileExtension,
    LatexCompiler,
    ProcessOutput,
    requires_rerun,
    run_process,
)

__all__ = [
    "CompilationArguments",
    "FileExtension",
    "LatexCompiler",
    "ProcessOutput",
    "requires_rerun",
    "run_process",
]
