"""
CLI Configuration
"""

import os
from typing import Optional


class CLIConfig:
    """Configuration for CLI commands"""

    # Default output file for `singgen generate`
    DEFAULT_OUTPUT = "config.json"
    # Output path meaning "write to stdout"
    STDOUT = "-"

    # Machine mode: plain output for scripts, no colors or tables
    _machine_mode: Optional[bool] = None

    @classmethod
    def set_machine_mode(cls, enabled: bool) -> None:
        cls._machine_mode = enabled

    @classmethod
    def is_machine_mode(cls) -> bool:
        """
        Machine mode is off unless enabled with --machine or the
        SINGGEN_MACHINE_MODE environment variable.
        """
        if cls._machine_mode is not None:
            return cls._machine_mode
        return os.getenv("SINGGEN_MACHINE_MODE", "").lower() in ("1", "true", "yes")

    @classmethod
    def reset(cls) -> None:
        cls._machine_mode = None
