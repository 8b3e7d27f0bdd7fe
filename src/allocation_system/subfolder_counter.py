"""
Subfolder Rotation Counter - Spreads survey sessions across pool subfolders
"""

from typing import List

from utils import list_subfolders
from .errors import IndexOutOfRangeError, NoSubfoldersError
from .path_resolver import SurveyPaths
from .session_context import SessionContext
from .storage import AllocationStorage, CounterState


class SubfolderRotationCounter:
    """
    Persistent per-survey rotation over the subfolders of the audio pool.

    Each session advances the counter exactly once per survey, so
    consecutive sessions draw their audio from consecutive subfolders:

        session 1 -> subfolder[0], session 2 -> subfolder[1], ...,
        session n+1 -> subfolder[0] again

    Subfolder indices map to names through a sorted listing of the pool
    root. The mapping holds only while the set of subfolders is unchanged;
    adding or removing a subfolder mid-survey shifts which folder an index
    names.
    """

    def __init__(self, storage: AllocationStorage, paths: SurveyPaths, logger):
        """
        Args:
            storage: Holds the counter record and the per-survey lock
            paths: Locates each survey's pool root
            logger: ClassLogger instance for logging
        """
        self.storage = storage
        self.paths = paths
        self.logger = logger

    # ============================================================================
    # PUBLIC METHODS
    # ============================================================================

    def advance(self, survey_id, session: SessionContext) -> CounterState:
        """
        Create the survey's counter if needed and advance it for this session.

        Calls after the first one for the same session and survey return the
        stored state unchanged.

        Raises:
            NoSubfoldersError: If the pool has no subfolders to rotate over
            CounterCorruptError: If the stored record cannot be read
            StorageError: If the updated record cannot be written
        """
        with self.storage.counter_lock(survey_id):
            state = self.storage.load_counter(survey_id)
            is_new = state is None

            if is_new:
                pool_root = self.paths.pool_root(survey_id)
                total = len(list_subfolders(pool_root))
                if total == 0:
                    raise NoSubfoldersError(pool_root)
                state = CounterState.initial(total)
                self.logger.info(f"Initializing subfolder counter for survey {survey_id} with {total} subfolders")

            if session.has_advanced(survey_id):
                if is_new:
                    self.storage.save_counter(survey_id, state)
                return state

            state.last_used_index = (state.last_used_index + 1) % state.total_subfolders
            state.usage_counts[state.last_used_index] += 1
            self.storage.save_counter(survey_id, state)
            session.mark_advanced(survey_id)

        self.logger.info(
            f"Subfolder index updated for session: {session.session_id}, "
            f"survey: {survey_id}, new index: {state.last_used_index}"
        )
        return state

    def get_current_subfolder(self, survey_id, session: SessionContext) -> str:
        """
        Name of the subfolder this session draws audio from.

        Advances the counter on the session's first call for the survey.

        Returns:
            Directory name (not path) of the active subfolder

        Raises:
            NoSubfoldersError: If the pool has no subfolders
            CounterCorruptError: If the stored record cannot be read
            IndexOutOfRangeError: If the stored index names no existing subfolder
        """
        state = self.advance(survey_id, session)

        subfolders = self._list_subfolders(survey_id)
        index = state.normalized_index
        if index >= len(subfolders):
            raise IndexOutOfRangeError(index, len(subfolders))

        subfolder = subfolders[index]
        self.logger.debug(f"Current subfolder for session {session.session_id}: {subfolder}")
        return subfolder

    def read_state(self, survey_id) -> CounterState:
        """
        Stored counter state without advancing it.

        Raises:
            NoSubfoldersError: If no counter exists yet and the pool is empty
            CounterCorruptError: If the stored record cannot be read
        """
        state = self.storage.load_counter(survey_id)
        if state is not None:
            return state
        return CounterState.initial(len(self._list_subfolders(survey_id)))

    # ============================================================================
    # PRIVATE METHODS
    # ============================================================================

    def _list_subfolders(self, survey_id) -> List[str]:
        pool_root = self.paths.pool_root(survey_id)
        subfolders = list_subfolders(pool_root)
        if not subfolders:
            raise NoSubfoldersError(pool_root)
        return subfolders
