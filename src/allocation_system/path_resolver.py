"""
Survey paths - Maps survey ids to pool directories and public URLs
"""

import os
import posixpath
from typing import Optional

from utils import normalize_path
from .config import AllocationConfig
from .errors import PathResolutionError


class SurveyPaths:
    """
    Filesystem and URL locations derived from the configuration.

    Pool root:     <surveys_base_dir>/<survey>/<pool_dir_name>
    Public prefix: <public_url_base>/<survey>/<pool_dir_name>
    """

    def __init__(self, config: AllocationConfig):
        self.config = config

    def pool_root(self, survey_id) -> str:
        return normalize_path(os.path.abspath(os.path.join(
            self.config.surveys_base_dir, str(survey_id), self.config.pool_dir_name
        )))

    def public_prefix(self, survey_id) -> str:
        base = self.config.public_url_base.rstrip("/")
        return f"{base}/{survey_id}/{self.config.pool_dir_name}"

    def counter_file(self, survey_id) -> str:
        return f"{self.pool_root(survey_id)}/{self.config.counter_filename}"

    def subfolder_path(self, survey_id, subfolder: str) -> str:
        return f"{self.pool_root(survey_id)}/{subfolder}"


class PathResolver:
    """Converts between absolute pool file paths and public relative URLs"""

    def __init__(self, paths: SurveyPaths, logger):
        self.paths = paths
        self.logger = logger

    def to_relative_url(self, absolute_path: str, survey_id: Optional[str]) -> str:
        """
        Replace the survey's pool-root prefix with its public URL prefix.

        Args:
            absolute_path: File path under the survey's pool root
            survey_id: Survey the file belongs to

        Returns:
            Relative URL such as `/audioSurvey/upload/surveys/42/files/01/01.mp3`

        Raises:
            PathResolutionError: If survey_id is missing or the path lies outside the pool
        """
        if not survey_id:
            raise PathResolutionError(absolute_path, "survey ID not available")

        prefix = self.paths.pool_root(survey_id) + "/"
        path = posixpath.normpath(normalize_path(absolute_path))
        if not path.startswith(prefix):
            raise PathResolutionError(
                absolute_path, f"path is not under the audio pool of survey {survey_id}"
            )

        relative_url = self.paths.public_prefix(survey_id) + "/" + path[len(prefix):]
        self.logger.debug(f"Converted {path} to relative URL {relative_url}")
        return relative_url

    def resolve_from_relative(self, relative_url: str, survey_id: Optional[str]) -> str:
        """Inverse of to_relative_url, same failure rules; `..` segments are collapsed first"""
        if not survey_id:
            raise PathResolutionError(relative_url, "survey ID not available")

        prefix = self.paths.public_prefix(survey_id) + "/"
        url = posixpath.normpath(relative_url)
        if not url.startswith(prefix):
            raise PathResolutionError(
                relative_url, f"URL is not under the public audio path of survey {survey_id}"
            )

        return self.paths.pool_root(survey_id) + "/" + url[len(prefix):]
