"""
Templating Registries

Loads and caches Jinja2 TeX templates and turns them into source writers for
LatexCompiler.from_template().
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound
from jinja2.exceptions import TemplateRuntimeError, UndefinedError

from texjob.contexts.templating.exceptions import TemplateRenderError

load_dotenv()
TEMPLATES_PATH = Path(os.getenv("TEMPLATES_PATH", "templates"))

TEMPLATE_FILENAME = "template.tex.jinja"


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 templates for TeX sources.

    Templates are stored in {templates_path}/{name}/template.tex.jinja and use
    custom delimiters to avoid conflicts with LaTeX syntax:
    - Variable: <<< var >>>
    - Block: <%% block %%>
    - Comment: <# comment #>
    """

    def __init__(self, templates_path: Optional[Path] = None):
        """
        Initialize the template registry.

        Args:
            templates_path: Base path for template directories. Defaults to
                           TEMPLATES_PATH from environment
        """
        if templates_path is None:
            templates_path = TEMPLATES_PATH

        self.templates_path = Path(templates_path)
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            variable_start_string="<<<",
            variable_end_string=">>>",
            block_start_string="<%%",
            block_end_string="%%>",
            comment_start_string="<#",
            comment_end_string="#>",
            # Preserve whitespace (important for LaTeX)
            trim_blocks=False,
            lstrip_blocks=False,
            keep_trailing_newline=True,
        )

    def get_template(self, name: str) -> Template:
        """
        Get a template by name, loading and caching it if necessary.

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        if name in self._cache:
            return self._cache[name]

        template_path = f"{name}/{TEMPLATE_FILENAME}"
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template not found for '{name}' at {self.templates_path / template_path}"
            ) from e

        self._cache[name] = template
        return template

    def get_template_path(self, name: str) -> Path:
        return self.templates_path / name / TEMPLATE_FILENAME

    def is_cached(self, name: str) -> bool:
        return name in self._cache

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def render(self, name: str, **context: Any) -> str:
        """
        Render a template to TeX source.

        Raises:
            TemplateRenderError: If the template references missing data
        """
        template = self.get_template(name)
        try:
            return template.render(**context)
        except (UndefinedError, TemplateRuntimeError) as e:
            raise TemplateRenderError(
                f"Failed to render template '{name}'",
                template_name=name,
                template_path=self.get_template_path(name),
                original_error=e,
            ) from e

    def writer(self, name: str, **context: Any) -> Callable[[TextIO], None]:
        """
        Build a source writer for LatexCompiler.from_template().

        Example:
            registry = TemplateRegistry(Path("templates"))
            compiler = LatexCompiler.from_template(registry.writer("letter", recipient="Ada"))
        """

        def write(stream: TextIO) -> None:
            stream.write(self.render(name, **context))

        return write
