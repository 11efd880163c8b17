"""
Application settings, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    """
    Runtime settings of the engine.

    Attributes:
        state_dir: Directory holding the persisted state files; None keeps
            state in memory only
        log_level: Root log level
        log_file: Optional log file path
    """
    state_dir: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            state_dir=os.getenv("FINQUEST_STATE_DIR") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
        )
