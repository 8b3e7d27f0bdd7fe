"""
Audio File Selector - Picks the audio file for one question of a session
"""

import re
from datetime import datetime
from typing import List, Optional

from utils import list_audio_files
from .code_parser import parse_code
from .errors import EmptyPoolError, MalformedSubfolderError, NoMatchingAudioError, PersistenceError, StorageError
from .path_resolver import PathResolver, SurveyPaths
from .session_context import SessionContext
from .storage import AllocationStorage
from .subfolder_counter import SubfolderRotationCounter


SUBFOLDER_PATTERN = re.compile(r"[0-9]{2}")


class AudioFileSelector:
    """
    Chooses audio for a question and records that it was shown.

    Within a session, files already shown are skipped while other files of
    the active subfolder remain. Once every file has been shown the
    session's selection set is cleared and the cycle starts over.

    The match is by basename: code `audq07k` selects `07.mp3`. If the only
    `07.mp3` was already shown this session it is selected again rather
    than failing, so a repeat is possible whenever a question's number has
    a single file.
    """

    def __init__(self, storage: AllocationStorage, counter: SubfolderRotationCounter,
                 paths: SurveyPaths, resolver: PathResolver, logger,
                 audio_extension: str = ".mp3"):
        """
        Args:
            storage: Receives the usage log records
            counter: Supplies the active subfolder per session
            paths: Locates subfolders of a survey pool
            resolver: Turns the selected file into a public URL
            logger: ClassLogger instance for logging
            audio_extension: Extension of selectable files
        """
        self.storage = storage
        self.counter = counter
        self.paths = paths
        self.resolver = resolver
        self.logger = logger
        self.audio_extension = audio_extension

    def select(self, session: SessionContext, survey_id, code: str) -> str:
        """
        Select, mark and log the audio file for a question.

        Args:
            session: Context of the respondent's session
            survey_id: Survey being taken
            code: Question code, e.g. `audq01k`

        Returns:
            Relative URL of the selected file

        Raises:
            InvalidCodeError, NoSubfoldersError, CounterCorruptError,
            IndexOutOfRangeError, MalformedSubfolderError, EmptyPoolError,
            NoMatchingAudioError, PathResolutionError: No file could be chosen
            PersistenceError: A file was chosen and marked as shown, but the
                usage log write failed
        """
        parsed = parse_code(code)
        subfolder = self.counter.get_current_subfolder(survey_id, session)

        if not SUBFOLDER_PATTERN.fullmatch(subfolder):
            raise MalformedSubfolderError(subfolder)

        all_files = list_audio_files(self.paths.subfolder_path(survey_id, subfolder), self.audio_extension)
        if not all_files:
            raise EmptyPoolError(subfolder, session.session_id)

        candidates = [path for path in all_files if path not in session.selected_paths]
        if not candidates:
            self.logger.info(
                f"All {len(all_files)} files of subfolder {subfolder} shown to session "
                f"{session.session_id}, starting over"
            )
            session.reset_selection()
            candidates = all_files

        wanted = f"{parsed.audio_number}{self.audio_extension}"
        selected = self._find_by_basename(candidates, wanted)
        if selected is None:
            self.logger.debug(f"No unshown {wanted} in subfolder {subfolder}, rechecking all files")
            selected = self._find_by_basename(all_files, wanted)
        if selected is None:
            raise NoMatchingAudioError(parsed.audio_number)

        session.mark_selected(selected)
        relative_url = self.resolver.to_relative_url(selected, survey_id)
        session.last_audio_url = relative_url

        try:
            self.storage.log_usage(session.session_id, selected, datetime.now())
        except StorageError as e:
            raise PersistenceError(selected, e) from e

        self.logger.info(
            f"Selected and marked audio file: {selected} for session: {session.session_id} with code: {code}"
        )
        return relative_url

    @staticmethod
    def _find_by_basename(files: List[str], basename: str) -> Optional[str]:
        for path in files:
            if path.rsplit("/", 1)[-1] == basename:
                return path
        return None
