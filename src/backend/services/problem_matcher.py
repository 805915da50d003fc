"""
Problem Matcher: a three-question quiz that picks one problem category.

Network-free alternative to free-text search. Every answer option votes for
one or more taxonomy slugs; after the third answer the slug with the most
votes wins. Ties go to the slug that comes first in the canonical taxonomy
order.

State is an immutable MatcherState. Transition functions return a new state
and never mutate their input:

    CLOSED --open_matcher--> QUESTION(0)
    QUESTION(n) --answer--> QUESTION(n+1)      (n < 2)
    QUESTION(2) --answer--> RESOLVED
    QUESTION(n) --go_back--> QUESTION(n-1)     (answers kept)
    any --reset--> QUESTION(0)                 (answers cleared)
    any --close--> CLOSED
"""

import enum
import logging
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from database.seeds.problem_taxonomy import TAXONOMY_SLUGS

logger = logging.getLogger(__name__)


class ProblemMatcherError(Exception):
    """Raised for transitions that are not valid in the current state."""
    pass


class MatcherOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    maps: Tuple[str, ...]


class MatcherQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    options: Tuple[MatcherOption, ...]


def _question(question_id: str, text: str, options: Sequence[Tuple[str, Sequence[str]]]) -> MatcherQuestion:
    return MatcherQuestion(
        id=question_id,
        question=text,
        options=tuple(MatcherOption(label=label, maps=tuple(maps)) for label, maps in options),
    )


QUESTIONS: Tuple[MatcherQuestion, ...] = (
    _question("feeling", "What's the primary feeling you're experiencing?", [
        ("Worried about the future", ["anxiety", "fear"]),
        ("Confused about what to do", ["confusion", "decision-making"]),
        ("Frustrated or angry", ["anger"]),
        ("Doubting myself", ["self-doubt"]),
    ]),
    _question("context", "Where is this affecting you most?", [
        ("Work or career", ["leadership", "decision-making"]),
        ("Relationships", ["relationships", "anger"]),
        ("Personal growth", ["self-doubt", "confusion"]),
        ("Life decisions", ["fear", "anxiety"]),
    ]),
    _question("duration", "How long have you been dealing with this?", [
        ("Just happened recently", ["confusion", "anger"]),
        ("A few weeks", ["anxiety", "decision-making"]),
        ("Months or longer", ["self-doubt", "fear"]),
        ("It comes and goes", ["relationships", "leadership"]),
    ]),
)


class MatcherPhase(str, enum.Enum):
    CLOSED = "closed"
    QUESTION = "question"
    RESOLVED = "resolved"


class MatcherState(BaseModel):
    """Immutable quiz state."""
    model_config = ConfigDict(frozen=True)

    phase: MatcherPhase = MatcherPhase.CLOSED
    question_index: int = 0
    answers: Mapping[str, Tuple[str, ...]] = Field(default_factory=lambda: MappingProxyType({}))
    match: Optional[str] = None

    @field_validator("answers", mode="after")
    @classmethod
    def _freeze_answers(cls, value):
        return MappingProxyType({key: tuple(slugs) for key, slugs in value.items()})


def tally_votes(answers: Mapping[str, Sequence[str]]) -> Dict[str, int]:
    """Count votes per slug across all recorded answers, in first-seen order."""
    votes: Dict[str, int] = {}
    for slugs in answers.values():
        for slug in slugs:
            votes[slug] = votes.get(slug, 0) + 1
    return votes


def _taxonomy_rank(slug: str, first_seen: int) -> Tuple[int, int]:
    if slug in TAXONOMY_SLUGS:
        return (0, TAXONOMY_SLUGS.index(slug))
    return (1, first_seen)


def pick_winner(votes: Mapping[str, int]) -> Optional[str]:
    """
    Return the slug with the most votes, or None if there are no votes.

    Ties are broken by canonical taxonomy order; slugs outside the taxonomy
    rank after it in the order they were first seen.
    """
    if not votes:
        return None

    ranked = sorted(
        enumerate(votes.items()),
        key=lambda item: (-item[1][1], _taxonomy_rank(item[1][0], item[0])),
    )
    return ranked[0][1][0]


def open_matcher(state: MatcherState) -> MatcherState:
    if state.phase is not MatcherPhase.CLOSED:
        return state
    return MatcherState(phase=MatcherPhase.QUESTION)


def answer(state: MatcherState, option_index: int) -> MatcherState:
    """
    Record an answer for the current question and advance.

    Re-answering a question replaces its previous votes.
    """
    if state.phase is not MatcherPhase.QUESTION:
        raise ProblemMatcherError(f"Cannot answer while matcher is {state.phase.value}")

    question = QUESTIONS[state.question_index]
    if not 0 <= option_index < len(question.options):
        raise ProblemMatcherError(
            f"Option {option_index} out of range for question '{question.id}'"
        )

    answers = dict(state.answers)
    answers[question.id] = question.options[option_index].maps

    if state.question_index < len(QUESTIONS) - 1:
        return state.model_copy(update={
            "answers": MappingProxyType(answers),
            "question_index": state.question_index + 1,
        })

    return state.model_copy(update={
        "answers": MappingProxyType(answers),
        "phase": MatcherPhase.RESOLVED,
        "match": pick_winner(tally_votes(answers)),
    })


def go_back(state: MatcherState) -> MatcherState:
    if state.phase is not MatcherPhase.QUESTION or state.question_index == 0:
        return state
    return state.model_copy(update={"question_index": state.question_index - 1})


def reset(state: MatcherState) -> MatcherState:
    return MatcherState(phase=MatcherPhase.QUESTION)


def close(state: MatcherState) -> MatcherState:
    return MatcherState()


def resolve_answers(selections: Mapping[str, int]) -> MatcherState:
    """
    Run a full quiz from question id -> option index selections.

    Raises:
        ProblemMatcherError: A question is unanswered or an option is invalid
    """
    state = open_matcher(MatcherState())
    for question in QUESTIONS:
        if question.id not in selections:
            raise ProblemMatcherError(f"Missing answer for question '{question.id}'")
        state = answer(state, selections[question.id])
    return state


def questions_payload() -> List[Dict[str, object]]:
    """Serialisable form of the question tree."""
    return [
        {
            "id": question.id,
            "question": question.question,
            "options": [
                {"index": i, "label": option.label, "maps": list(option.maps)}
                for i, option in enumerate(question.options)
            ],
        }
        for question in QUESTIONS
    ]


class ProblemMatcher:
    """
    Holds the current quiz state and reports the winning slug.

    on_match_found is called exactly once each time a run reaches RESOLVED.
    """

    def __init__(self, on_match_found: Callable[[str], None]):
        self.on_match_found = on_match_found
        self.state = MatcherState()

    def open(self) -> MatcherState:
        self.state = open_matcher(self.state)
        return self.state

    def answer(self, option_index: int) -> MatcherState:
        self.state = answer(self.state, option_index)
        if self.state.phase is MatcherPhase.RESOLVED and self.state.match:
            logger.debug("Problem matcher resolved to %s", self.state.match)
            self.on_match_found(self.state.match)
        return self.state

    def back(self) -> MatcherState:
        self.state = go_back(self.state)
        return self.state

    def reset(self) -> MatcherState:
        self.state = reset(self.state)
        return self.state

    def close(self) -> MatcherState:
        self.state = close(self.state)
        return self.state
