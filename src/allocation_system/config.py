"""
Allocation system configuration
"""

import logging
from dataclasses import dataclass
from typing import Optional


@dataclass
class AllocationConfig:
    """Where the audio pools live, where state is kept and how to log"""

    # Filesystem layout: <surveys_base_dir>/<survey>/<pool_dir_name>/<NN>/<NN>.mp3
    surveys_base_dir: str = "/var/www/audioSurvey/upload/surveys"
    pool_dir_name: str = "files"

    # Public URL prefix equivalent to surveys_base_dir
    public_url_base: str = "/audioSurvey/upload/surveys"

    # Persistence
    database_path: str = "audio_allocation.db"
    counter_filename: str = "counterSubfolderSession.json"

    audio_extension: str = ".mp3"
    default_session_id: str = "default"

    # Logging
    log_dir: Optional[str] = "logs"
    log_level: int = logging.INFO

    def validate(self) -> None:
        """Basic validation of configuration"""
        if not self.surveys_base_dir:
            raise ValueError("surveys_base_dir must be set")

        if not self.pool_dir_name or "/" in self.pool_dir_name:
            raise ValueError(f"pool_dir_name must be a single directory name, got '{self.pool_dir_name}'")

        if not self.public_url_base.startswith("/"):
            raise ValueError(f"public_url_base must be an absolute URL path, got '{self.public_url_base}'")

        if not self.counter_filename.endswith(".json"):
            raise ValueError(f"counter_filename must be a .json file, got '{self.counter_filename}'")

        if not self.audio_extension.startswith("."):
            raise ValueError(f"audio_extension must start with '.', got '{self.audio_extension}'")

        if not self.default_session_id:
            raise ValueError("default_session_id must not be empty")

        if self.log_level not in (logging.DEBUG, logging.INFO, logging.WARNING,
                                  logging.ERROR, logging.CRITICAL):
            raise ValueError(f"Unknown log level: {self.log_level}")
