"""
Configuration management for the hybsearch CLI.

Settings come from, in increasing priority: built-in defaults, the optional
``~/.hybsearch/config.json`` file, ``HYBSEARCH_*`` environment variables and
finally command-line flags.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from decouple import config
from rich.console import Console

console = Console(stderr=True)

DEFAULT_SERVER = "thing3.cs.stolaf.edu:80"

# Shorthand flags accepted by the CLI, in precedence order
SERVER_ALIASES = {
    "thing3": "thing3.cs.stolaf.edu:80",
    "thing3_dev": "thing3.cs.stolaf.edu:81",
    "localhost": "localhost:8080",
}


class ConfigManager:
    """Manages CLI configuration."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = config_dir or Path.home() / ".hybsearch"
        self.config_file = self.config_dir / "config.json"

        # Default configuration
        self.default_config = {
            "server": DEFAULT_SERVER,
            "pipeline": "mbnb",
            "http_timeout": 30,
        }

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration: defaults, then config file, then environment."""
        merged_config = self.default_config.copy()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    merged_config.update(json.load(f))
            except (json.JSONDecodeError, OSError) as e:
                console.print(f"Warning: Could not read config file: {e}", style="yellow")

        merged_config["server"] = config("HYBSEARCH_SERVER", default=merged_config["server"])
        merged_config["pipeline"] = config("HYBSEARCH_PIPELINE", default=merged_config["pipeline"])
        merged_config["http_timeout"] = config(
            "HYBSEARCH_HTTP_TIMEOUT", default=merged_config["http_timeout"], cast=float
        )
        return merged_config

    def resolve_server(
        self,
        server: Optional[str] = None,
        thing3: bool = False,
        thing3_dev: bool = False,
        localhost: bool = False,
    ) -> str:
        """Pick the server address; shorthand flags win over ``--server``."""
        if thing3:
            return SERVER_ALIASES["thing3"]
        if thing3_dev:
            return SERVER_ALIASES["thing3_dev"]
        if localhost:
            return SERVER_ALIASES["localhost"]
        return server or self.get_config()["server"]

    def get_default_pipeline(self) -> str:
        """Get the pipeline used when none is requested."""
        return self.get_config()["pipeline"]

    def get_http_timeout(self) -> float:
        """Get the timeout in seconds for control-plane requests."""
        return self.get_config()["http_timeout"]

    def is_debug(self) -> bool:
        """Check if debug mode is enabled."""
        return config("HYBSEARCH_DEBUG", default=False, cast=bool)
