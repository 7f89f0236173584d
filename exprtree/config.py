"""exprtree Configuration: project-level .exprtreerc.yml support.

Loads configuration from .exprtreerc.yml (or .exprtreerc.yaml,
.exprtreerc.json) found by walking up from the working directory.

Example .exprtreerc.yml:
    number_type: fraction     # float | int | decimal | fraction
    check_division: true      # fail on division by zero instead of inf/nan
    log_level: INFO
    output_format: json       # text | json
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


NUMBER_TYPES: Dict[str, Callable[[str], Any]] = {
    "float": float,
    "int": int,
    "decimal": Decimal,
    "fraction": Fraction,
}


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ExprConfig:
    """Compile/evaluate policy for expressions."""
    # Literal conversion: key of NUMBER_TYPES
    number_type: str = "float"
    # False lets division by zero produce inf/nan instead of raising
    check_division: bool = True
    # CLI only
    log_level: str = "WARNING"
    output_format: str = "text"  # "text", "json"

    def __post_init__(self) -> None:
        self._check_number_type()

    def _check_number_type(self) -> None:
        if self.number_type not in NUMBER_TYPES:
            raise ValueError(
                f"Unknown number_type {self.number_type!r}; "
                f"expected one of {', '.join(sorted(NUMBER_TYPES))}"
            )

    def number_factory(self) -> Callable[[str], Any]:
        # number_type may have been reassigned since construction
        self._check_number_type()
        return NUMBER_TYPES[self.number_type]


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".exprtreerc.yml",
    ".exprtreerc.yaml",
    ".exprtreerc.json",
    "exprtree.config.yml",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> ExprConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, or it cannot be read, returns defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return ExprConfig()

    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        logger.warning("Cannot read config %s: %s", path, e)
        return ExprConfig()

    try:
        if path.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.warning("Malformed config %s: %s", path, e)
        return ExprConfig()

    if not isinstance(data, dict):
        return ExprConfig()
    logger.debug("Loaded config from %s", path)
    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> ExprConfig:
    """Convert a parsed dict to ExprConfig."""
    config = ExprConfig()

    if "number_type" in data:
        number_type = str(data["number_type"]).lower()
        if number_type in NUMBER_TYPES:
            config.number_type = number_type
        else:
            logger.warning("Unknown number_type %r, using float", data["number_type"])
    if "check_division" in data:
        config.check_division = bool(data["check_division"])
    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level in LOG_LEVELS:
            config.log_level = level
        else:
            logger.warning("Unknown log_level %r, using %s", data["log_level"], config.log_level)
    if "output_format" in data:
        config.output_format = str(data["output_format"])

    return config
