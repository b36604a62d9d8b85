"""Open / closed / multi-option inference for one question's answers."""
from __future__ import annotations

from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from creche_survey.schemas.survey import OpenResponse, QuestionStats, Response
from creche_survey.services.survey_utils import normalize_closed_answer

MAX_CLOSED_LENGTH = 30
SHORT_ANSWER_LENGTH = 15
MULTI_SEPARATOR = ";"

# Header fragments that make a question open whatever its answers look like
OPEN_HEADER_MARKERS: List[str] = [
    "remarques",
    "suggestions",
    "complémentaires",
    "commentaire",
    "préciser",
    "pourquoi",
    "avez-vous des remarques",
]

FRENCH_CONNECTIVES: List[str] = [
    " et ", " ou ", " mais ", " car ", " pour ", " avec ", " dans ",
    " sur ", " par ", " donc ", " alors ", " ainsi ", " cette ",
]

PROSE_NOUNS: List[str] = [
    "équipe", "creche", "crèche", "enfant", "directeur", "directrice",
    "personnel", "éducatrice", "merci", "problème", "suggestion", "amélioration",
]

CLOSED_VOCABULARY: List[str] = [
    "oui", "non", "yes", "no",
    "très satisfait", "plutôt satisfait", "peu satisfait", "pas satisfait",
    "toujours", "souvent", "parfois", "jamais",
    "beaucoup", "moyennement", "peu", "pas du tout",
    "excellent", "bon", "moyen", "mauvais",
    "facile", "difficile",
    "suffisant", "insuffisant",
    "adapté", "inadapté",
    "x", "✓", "1", "0",
]


class ClosedRule(NamedTuple):
    """A short-circuit test: when ``matches`` holds, ``verdict`` is the answer."""

    name: str
    matches: Callable[[str], bool]
    verdict: bool


CLOSED_RULES: List[ClosedRule] = [
    ClosedRule("too_long", lambda t: len(t) > MAX_CLOSED_LENGTH, False),
    ClosedRule("connective", lambda t: any(c in t for c in FRENCH_CONNECTIVES), False),
    ClosedRule("prose_noun", lambda t: any(n in t for n in PROSE_NOUNS), False),
    ClosedRule("vocabulary", lambda t: any(t == v or v in t for v in CLOSED_VOCABULARY), True),
    ClosedRule("short", lambda t: len(t) < SHORT_ANSWER_LENGTH, True),
]


def is_closed_question(answer: str) -> bool:
    text = answer.lower().strip()
    for rule in CLOSED_RULES:
        if rule.matches(text):
            return rule.verdict
    return False


def is_definitely_open(question: str) -> bool:
    lower = question.lower()
    return any(marker in lower for marker in OPEN_HEADER_MARKERS)


def _split_options(answer: str) -> List[str]:
    seen: List[str] = []
    for part in answer.split(MULTI_SEPARATOR):
        option = part.strip()
        if option and option not in seen:
            seen.append(option)
    return seen


def _open_entry(answer: str, response: Response) -> OpenResponse:
    return OpenResponse(
        answer=answer, respondent_id=response.id, gender=response.gender, csp=response.csp
    )


def _tally(stats: QuestionStats, label: str) -> None:
    stats.answers[label] = stats.answers.get(label, 0) + 1


def classify_question(key: str, responses: Sequence[Response]) -> QuestionStats:
    """Build the statistics of question ``key`` over ``responses``.

    The question kind is settled from all answers first, then exactly one of
    ``answers`` (closed and multi-option) or ``responses_list`` (open) is filled.
    """
    stats = QuestionStats()

    first: Optional[Response] = next((r for r in responses if key in r.answers), None)
    if first is not None:
        entry = first.answers[key]
        stats.question = entry.original_header
        stats.column_index = entry.column_index

    answered: List[Tuple[str, Response]] = []
    for response in responses:
        entry = response.answers.get(key)
        if entry is None or not entry.value or entry.value == "N/A":
            continue
        answered.append((entry.value, response))
    stats.total_responses = len(answered)

    if is_definitely_open(stats.question):
        stats.is_open_question = True
    else:
        for answer, _ in answered:
            if MULTI_SEPARATOR in answer:
                stats.is_multi_options = True
            elif not is_closed_question(answer):
                stats.is_open_question = True
        if stats.is_multi_options:
            stats.is_open_question = False

    for answer, response in answered:
        if stats.is_open_question:
            stats.responses_list.append(_open_entry(answer, response))
        elif MULTI_SEPARATOR in answer:
            # Dedupe within this response only
            for option in _split_options(answer):
                _tally(stats, option)
        elif is_closed_question(answer):
            _tally(stats, normalize_closed_answer(answer))
        else:
            _tally(stats, answer.strip())

    return stats
