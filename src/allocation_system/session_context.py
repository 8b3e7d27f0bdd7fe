"""
Session context - Per-respondent state owned by the request layer
"""

from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass
class SessionContext:
    """
    State of one respondent's run through a survey.

    The request-handling layer creates one per session and passes it into
    every allocator call; nothing here is shared between sessions.

    Attributes:
        session_id: Opaque session (survey response) id
        selected_paths: Audio files already presented in this session
        advanced_surveys: Surveys whose subfolder counter this session has advanced
        last_audio_url: URL most recently handed out to this session
    """
    session_id: str
    selected_paths: Set[str] = field(default_factory=set)
    advanced_surveys: Set[str] = field(default_factory=set)
    last_audio_url: Optional[str] = None

    @classmethod
    def for_session(cls, session_id: Optional[str], default_id: str = "default") -> "SessionContext":
        """Create a context, falling back to `default_id` when no session id is known"""
        return cls(session_id=session_id or default_id)

    def has_advanced(self, survey_id) -> bool:
        return str(survey_id) in self.advanced_surveys

    def mark_advanced(self, survey_id) -> None:
        self.advanced_surveys.add(str(survey_id))

    def mark_selected(self, path: str) -> None:
        self.selected_paths.add(path)

    def reset_selection(self) -> None:
        self.selected_paths.clear()
