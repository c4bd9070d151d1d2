"""
Set score handling for reported match results.

Set scores travel as an ordered sequence of {score_a, score_b} pairs, one per
set, from player A's perspective. They are stored on the Result as a JSON list.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Tuple

from clubrank.constants import SetScoreConstants
from clubrank.utils.exceptions import InvalidScoreFormatError


@dataclass(frozen=True)
class SetScore:
    """Games won by player A and player B in a single set."""
    score_a: int
    score_b: int

    def __post_init__(self):
        for label, value in (("score_a", self.score_a), ("score_b", self.score_b)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidScoreFormatError(f"{label} must be an integer, got {value!r}")
            if not SetScoreConstants.MIN_GAMES <= value <= SetScoreConstants.MAX_GAMES:
                raise InvalidScoreFormatError(
                    f"{label} must be between {SetScoreConstants.MIN_GAMES} and "
                    f"{SetScoreConstants.MAX_GAMES}, got {value}"
                )

    def to_dict(self) -> dict:
        return {"score_a": self.score_a, "score_b": self.score_b}


def _coerce_set(raw: Any, index: int) -> SetScore:
    if isinstance(raw, SetScore):
        return raw
    if isinstance(raw, Mapping):
        score_a = raw.get("score_a", raw.get("scoreA"))
        score_b = raw.get("score_b", raw.get("scoreB"))
        if score_a is None or score_b is None:
            raise InvalidScoreFormatError(f"set {index + 1} is missing score_a or score_b")
        return SetScore(score_a, score_b)
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return SetScore(raw[0], raw[1])
    raise InvalidScoreFormatError(f"set {index + 1} is not a score pair: {raw!r}")


def parse_set_scores(raw_sets: Iterable[Any]) -> Tuple[SetScore, ...]:
    """
    Validate reported set scores and return them as SetScore objects.

    Accepts SetScore objects, mappings with score_a/score_b (or scoreA/scoreB)
    and two-item pairs.

    Raises:
        InvalidScoreFormatError: If the sequence is empty, too long, or any set
            is malformed or out of range
    """
    if raw_sets is None or isinstance(raw_sets, (str, bytes, Mapping)):
        raise InvalidScoreFormatError("set scores must be a sequence of score pairs")
    try:
        items = list(raw_sets)
    except TypeError:
        raise InvalidScoreFormatError("set scores must be a sequence of score pairs")

    if len(items) < SetScoreConstants.MIN_SETS:
        raise InvalidScoreFormatError("at least one set is required")
    if len(items) > SetScoreConstants.MAX_SETS:
        raise InvalidScoreFormatError(
            f"at most {SetScoreConstants.MAX_SETS} sets are allowed, got {len(items)}"
        )
    return tuple(_coerce_set(item, index) for index, item in enumerate(items))


def serialize_set_scores(sets: Sequence[SetScore]) -> str:
    return json.dumps([s.to_dict() for s in sets])


def deserialize_set_scores(sets_json: str) -> Tuple[SetScore, ...]:
    try:
        raw = json.loads(sets_json)
    except (TypeError, json.JSONDecodeError):
        raise InvalidScoreFormatError("stored set scores are not valid JSON")
    return parse_set_scores(raw)


def format_score_summary(sets: Sequence[SetScore]) -> str:
    """Human-readable summary from player A's perspective, e.g. '6-4, 3-6, 7-5'"""
    return ", ".join(f"{s.score_a}-{s.score_b}" for s in sets)

