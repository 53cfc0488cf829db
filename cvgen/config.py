"""
Runtime settings for cvgen.

Settings are read from the environment (a local .env file is honoured) and can
be overridden by a YAML file named by CVGEN_CONFIG. Keyword overrides passed to
load_settings() win over both, which is how the CLI applies its flags.

Environment variables:
    CVGEN_DATA_DIR         Person-data root (default: data)
    CVGEN_OUTPUT_DIR       Output root for generated documents (default: output)
    CVGEN_TEMPLATES_DIR    Template root (default: templates)
    CVGEN_WORKSPACE_ROOT   Parent directory for job workspaces (default: system temp)
    CVGEN_LOGS_PATH        Directory for session logs (default: logs)
    CVGEN_COMPILER         Compiler command, shell-split (default: typst)
    CVGEN_COMPILE_TIMEOUT  Seconds before a compile is aborted (default: 120)
    CVGEN_OUTPUT_FORMAT    Output file extension (default: pdf)
    CVGEN_WATCH_INTERVAL   Seconds between source polls in watch mode (default: 1.0)
    CVGEN_EVENTS_FILE      JSON Lines job event log (default: disabled)
    CVGEN_HOST, CVGEN_PORT API server bind address (default: 0.0.0.0:4002)
"""

import os
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

ENV_PREFIX = "CVGEN_"


@dataclass
class Settings:
    """
    Pipeline settings.

    Paths are kept as strings so the structure round-trips through OmegaConf;
    use the *_root properties to get resolved Path objects.
    """

    data_dir: str = "data"
    output_dir: str = "output"
    templates_dir: str = "templates"
    workspace_root: str = tempfile.gettempdir()
    logs_path: str = "logs"
    compiler: str = "typst"
    compile_timeout: float = 120.0
    output_format: str = "pdf"
    watch_interval: float = 1.0
    events_file: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 4002

    @property
    def data_root(self) -> Path:
        return Path(self.data_dir).resolve()

    @property
    def output_root(self) -> Path:
        return Path(self.output_dir).resolve()

    @property
    def templates_root(self) -> Path:
        return Path(self.templates_dir).resolve()

    @property
    def workspace_base(self) -> Path:
        return Path(self.workspace_root).resolve()

    @property
    def logs_root(self) -> Path:
        return Path(self.logs_path).resolve()

    @property
    def events_path(self) -> Optional[Path]:
        return Path(self.events_file).resolve() if self.events_file else None

    @property
    def compiler_command(self) -> List[str]:
        """Compiler invocation prefix, e.g. ["typst"] or ["python", "fake.py"]."""
        return shlex.split(self.compiler)


def _env_values() -> Dict[str, str]:
    """Collect CVGEN_* variables that correspond to Settings fields."""
    values = {}
    for name in Settings.__dataclass_fields__:
        env_value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            values[name] = env_value
    return values


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> Settings:
    """
    Build Settings from defaults, environment, optional YAML file and overrides.

    Later layers override earlier ones: defaults < environment < YAML < overrides.
    Overrides whose value is None are ignored so CLI options can be passed through
    unconditionally.

    Args:
        config_path: YAML settings file (defaults to CVGEN_CONFIG if set)
        **overrides: Field values that take precedence over everything else

    Returns:
        Validated Settings instance

    Raises:
        omegaconf.errors.ValidationError: If a value cannot be coerced to its field type
    """
    layers = [OmegaConf.structured(Settings), OmegaConf.create(_env_values())]

    if config_path is None and os.getenv("CVGEN_CONFIG"):
        config_path = Path(os.getenv("CVGEN_CONFIG"))
    if config_path is not None:
        layers.append(OmegaConf.load(config_path))

    explicit = {
        key: str(value) if isinstance(value, Path) else value
        for key, value in overrides.items()
        if value is not None
    }
    if explicit:
        layers.append(OmegaConf.create(explicit))

    return OmegaConf.to_object(OmegaConf.merge(*layers))
