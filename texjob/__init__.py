"""
texjob - asynchronous pdflatex compilation jobs

Wraps the pdflatex command-line tool behind a single job object that owns a
temporary output directory, composes command-line arguments, reruns the engine
when cross-references are unresolved, and hands compiled artifacts back
asynchronously.

Architecture:
- Rendering Context: argument bookkeeping, process invocation, rerun policy
- Templating Context: Jinja2 source templates and argument presets
"""

__version__ = "0.1.0"
