"""Typed request payloads for Socket.IO events.

Each ``from_payload`` validates the raw event data before anything reaches
the party engine, so a rejected request never mutates state. The
``start_game`` question list is checked by ``validate()`` once membership
and host rights are confirmed.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from buzzer.errors import InvalidInput, InvalidName, InvalidQuestions


def _data(raw) -> dict:
    return raw if isinstance(raw, dict) else {}


def _clean_name(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def coerce_offset(value) -> int:
    """Character offsets are non-negative ints; anything non-numeric is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, int(math.floor(value)))


@dataclass
class CreatePartyRequest:
    player_name: str

    @classmethod
    def from_payload(cls, raw):
        name = _clean_name(_data(raw).get('playerName'))
        if not name:
            raise InvalidName()
        return cls(player_name=name)


@dataclass
class JoinPartyRequest:
    party_code: str
    player_name: str

    @classmethod
    def from_payload(cls, raw):
        data = _data(raw)
        code = data.get('partyCode')
        if isinstance(code, int) and not isinstance(code, bool):
            code = str(code)
        code = code.strip() if isinstance(code, str) else ''
        name = _clean_name(data.get('playerName'))
        if not code or not name:
            raise InvalidInput()
        return cls(party_code=code, player_name=name)


@dataclass
class StartGameRequest:
    questions: List[Any]
    settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, raw):
        data = _data(raw)
        questions = data.get('questions')
        settings = data.get('settings')
        return cls(
            questions=list(questions) if isinstance(questions, list) else [],
            settings=dict(settings) if isinstance(settings, dict) else {},
        )

    def validate(self) -> None:
        # Checked once the caller is known to be the host
        if not self.questions:
            raise InvalidQuestions()


@dataclass
class BuzzRequest:
    buzz_point: int = 0

    @classmethod
    def from_payload(cls, raw):
        return cls(buzz_point=coerce_offset(_data(raw).get('buzzPoint')))


@dataclass
class SubmitAnswerRequest:
    # Trusted from the buzzing client
    is_correct: bool = False

    @classmethod
    def from_payload(cls, raw):
        return cls(is_correct=bool(_data(raw).get('isCorrect')))


@dataclass
class ReadingProgress:
    char_index: int = 0

    @classmethod
    def from_payload(cls, raw):
        return cls(char_index=coerce_offset(_data(raw).get('charIndex')))


@dataclass
class AnswerTyping:
    answer_text: str = ''

    @classmethod
    def from_payload(cls, raw):
        text = _data(raw).get('answerText')
        return cls(answer_text=text if isinstance(text, str) else '')
