"""
Argument Preset Resolution

Applies named groups of engine arguments to a compilation job. Presets are
defined in YAML, grouped by category, and applied in order so later presets
override earlier ones.

Examples:
    # Non-stop mode with file:line error messages
    >>> apply_presets(compiler, ["interaction_nonstop", "errors_file_line"])

Config layout:
    interaction:
      nonstop:
        -interaction: nonstopmode
    errors:
      file_line:
        -file-line-error: null
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from texjob.contexts.templating.exceptions import PresetNotFoundError

load_dotenv()
ARGUMENT_PRESETS_PATH = Path(os.getenv("ARGUMENT_PRESETS_PATH", "configs/argument_presets.yaml"))


def load_argument_presets(config_path: Optional[Path] = None) -> Dict[str, Dict[str, Optional[str]]]:
    """
    Load argument presets config file and flatten to single-level dict.

    Collapses nested structure: interaction.nonstop -> interaction_nonstop

    Args:
        config_path: Optional path to config file (defaults to ARGUMENT_PRESETS_PATH env variable)

    Returns:
        Flattened dict mapping preset names to {argument: value} dicts
        Example: {"interaction_nonstop": {"-interaction": "nonstopmode"}}
    """
    if config_path is None:
        config_path = ARGUMENT_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, arguments in presets.items():
            # Bare flags are written as `null`; everything else goes on the command line as text
            flattened[f"{category}_{name}"] = {
                argument: None if value is None else str(value)
                for argument, value in (arguments or {}).items()
            }

    return flattened


def apply_presets(compiler, preset_names: List[str], config_path: Optional[Path] = None):
    """
    Add the arguments of each named preset to a compilation job.

    Args:
        compiler: LatexCompiler to configure
        preset_names: Preset names to apply, in order
        config_path: Optional path to presets YAML (defaults to ARGUMENT_PRESETS_PATH)

    Returns:
        The same compiler, for chaining

    Raises:
        PresetNotFoundError: If a preset name is not defined
    """
    presets = load_argument_presets(config_path)

    # Validate everything before touching the job
    for preset_name in preset_names:
        if preset_name not in presets:
            raise PresetNotFoundError(preset_name, list(presets.keys()))

    for preset_name in preset_names:
        for name, value in presets[preset_name].items():
            compiler.add_argument(name, value)

    return compiler
