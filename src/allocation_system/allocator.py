"""
Audio Allocator - Entry points called by the survey-rendering layer

Wires the allocation components together and turns every allocation
failure into "no audio for this question" plus a diagnostic, so a broken
pool never takes the survey page down with it.
"""

from dataclasses import dataclass
from typing import Optional

from hybridLogger import HybridLogger
from .code_parser import QuestionKind
from .config import AllocationConfig
from .errors import AllocationError, StorageError
from .file_selector import AudioFileSelector
from .inventory_sync import InventorySynchronizer, SyncReport
from .path_resolver import PathResolver, SurveyPaths
from .session_context import SessionContext
from .sqlite_storage import SqliteAllocationStorage
from .storage import AllocationStorage
from .subfolder_counter import SubfolderRotationCounter


@dataclass
class QuestionRenderRequest:
    """
    One question about to be rendered.

    `help_text` is the question's help area; allocation errors are appended
    to it as red banners for the survey author to see.
    """
    survey_id: str
    code: Optional[str]
    session: SessionContext
    question_type: str
    help_text: str = ""

    def append_help(self, message: str) -> None:
        banner = f"<div style='color: red;'>{message}</div>"
        self.help_text = f"{self.help_text}\n\n{banner}"


class AudioAllocator:
    """
    Facade over synchronizer, counter and selector.

    Hooks:
        on_survey_page      - every page load, refreshes the catalog
        render_question     - every question, returns the audio URL or None
        on_survey_complete  - end of a session, advances the counter if the
                              session never did
    """

    def __init__(self, config: AllocationConfig, storage: AllocationStorage,
                 hybrid_logger: HybridLogger):
        config.validate()
        self.config = config
        self.storage = storage
        self.paths = SurveyPaths(config)

        level = config.log_level
        self.logger = hybrid_logger.get_class_logger("AudioAllocator", level)
        self.resolver = PathResolver(self.paths, hybrid_logger.get_class_logger("PathResolver", level))
        self.counter = SubfolderRotationCounter(
            storage, self.paths, hybrid_logger.get_class_logger("SubfolderRotationCounter", level)
        )
        self.synchronizer = InventorySynchronizer(
            storage, hybrid_logger.get_class_logger("InventorySynchronizer", level),
            audio_extension=config.audio_extension
        )
        self.selector = AudioFileSelector(
            storage, self.counter, self.paths, self.resolver,
            hybrid_logger.get_class_logger("AudioFileSelector", level),
            audio_extension=config.audio_extension
        )

    def new_session(self, session_id: Optional[str]) -> SessionContext:
        return SessionContext.for_session(session_id, self.config.default_session_id)

    def on_survey_page(self, survey_id) -> Optional[SyncReport]:
        """Sync the survey's pool into the catalog; returns None if the catalog is unavailable"""
        try:
            return self.synchronizer.sync(self.paths.pool_root(survey_id))
        except StorageError as e:
            self.logger.error(f"Catalog unavailable while syncing survey {survey_id}", e)
            return None

    def render_question(self, request: QuestionRenderRequest) -> Optional[str]:
        """
        Allocate audio for a question.

        Returns:
            Relative audio URL to embed, or None when the question gets no audio
        """
        if not QuestionKind.supports(request.question_type):
            self.logger.debug(f"Question type {request.question_type} does not take audio")
            return None

        if request.code is None:
            self.logger.warning(f"No code found for question in survey {request.survey_id}")
            return None

        try:
            return self.selector.select(request.session, request.survey_id, request.code)
        except AllocationError as e:
            self.logger.error(f"No audio for code {request.code} in survey {request.survey_id}: {e}")
            request.append_help(str(e))
        except StorageError as e:
            self.logger.error(f"Storage failure for code {request.code} in survey {request.survey_id}", e)
            request.append_help(f"Audio storage unavailable: {e}")
        return None

    def on_survey_complete(self, survey_id, session: SessionContext) -> bool:
        """
        Make sure the finished session has advanced the survey's counter.

        Returns:
            True if the counter is in a consistent state afterwards
        """
        try:
            state = self.counter.advance(survey_id, session)
        except (AllocationError, StorageError) as e:
            self.logger.error(f"Failed to update subfolder counter for survey {survey_id}: {e}")
            return False

        self.logger.info(
            f"Survey {survey_id} complete for session {session.session_id}, "
            f"subfolder usage: {state.usage_counts}"
        )
        return True


def create_allocator(config: AllocationConfig, hybrid_logger: HybridLogger) -> AudioAllocator:
    """Allocator backed by SQLite and counter files, as deployed"""
    paths = SurveyPaths(config)
    storage = SqliteAllocationStorage(
        config.database_path, paths,
        hybrid_logger.get_class_logger("SqliteAllocationStorage", config.log_level)
    )
    return AudioAllocator(config, storage, hybrid_logger)
