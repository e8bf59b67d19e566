from __future__ import annotations  # Transcript formatting for prompts

from typing import Iterable, List, Mapping, Union

from pydantic import BaseModel, ValidationError

from .errors import InvalidInput


class TranscriptTurn(BaseModel):  # Single speaker turn in a mock interview
    role: str
    content: str


TurnLike = Union[TranscriptTurn, Mapping[str, str]]


def format_transcript(turns: Iterable[TurnLike]) -> str:  # One "- role: content" line per turn, order preserved
    lines: List[str] = []
    for index, turn in enumerate(turns):
        if not isinstance(turn, TranscriptTurn):
            try:
                turn = TranscriptTurn.model_validate(turn)
            except ValidationError as exc:
                raise InvalidInput(f"Transcript turn {index} is not a role/content pair") from exc
        lines.append(f"- {turn.role}: {turn.content}")
    if not lines:
        raise InvalidInput("Transcript must contain at least one turn")
    return "\n".join(lines)


__all__ = ["TranscriptTurn", "format_transcript"]
