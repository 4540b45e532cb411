"""
Templating Context

Responsibilities:
- Renders Jinja2 TeX templates into source writers for compilation jobs
- Loads named argument presets and applies them to jobs

Owns: TeX source generation, argument presets
Never: Invokes the typesetting engine
"""

from texjob.contexts.templating.exceptions import PresetNotFoundError, TemplateRenderError
from texjob.contexts.templating.presets import apply_presets, load_argument_presets
from texjob.contexts.templating.registries import TemplateRegistry

__all__ = [
    "PresetNotFoundError",
    "TemplateRegistry",
    "TemplateRenderError",
    "apply_presets",
    "load_argument_presets",
]
