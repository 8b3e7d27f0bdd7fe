"""
Question code parsing

A question code such as `audq07k` names the audio number (`07`) to play
and the kind of question (`k`) it is attached to.
"""

import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidCodeError


CODE_PATTERN = re.compile(r"audq([0-9]{2})([kxfsml])")


class QuestionKind(Enum):
    """Question kinds audio can be attached to, keyed by the host's type letter"""
    K = "K"
    X = "X"
    F = "F"
    S = "S"
    M = "M"
    L = "L"

    @classmethod
    def supports(cls, question_type: str) -> bool:
        """True if the host question type accepts embedded audio"""
        return any(kind.value == question_type for kind in cls)


@dataclass(frozen=True)
class ParsedCode:
    audio_number: str
    kind: QuestionKind


def parse_code(code: str) -> ParsedCode:
    """
    Parse a question code.

    Only the exact lowercase form `audq` + two digits + one of `kxfsml`
    is accepted.

    Args:
        code: Raw code string from the question

    Returns:
        ParsedCode with the two-digit audio number and the question kind

    Raises:
        InvalidCodeError: If the code has any other shape
    """
    if not isinstance(code, str):
        raise InvalidCodeError(code)

    match = CODE_PATTERN.fullmatch(code)
    if match is None:
        raise InvalidCodeError(code)

    return ParsedCode(
        audio_number=match.group(1),
        kind=QuestionKind(match.group(2).upper())
    )
