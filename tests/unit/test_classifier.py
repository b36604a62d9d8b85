import pytest

from creche_survey.schemas.survey import AnswerEntry, Response
from creche_survey.services.classifier import (
    classify_question,
    is_closed_question,
    is_definitely_open,
)


def _responses(values, header="Question ?", index=10):
    responses = []
    for position, value in enumerate(values, start=1):
        answers = {}
        if value is not None:
            answers["q"] = AnswerEntry(value=value, original_header=header, column_index=index)
        responses.append(Response(id=position, facility="A", answers=answers))
    return responses


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("Oui", True),
        ("NON", True),
        ("Plutôt satisfait", True),
        ("Moyennement", True),
        ("Lecture", True),
        ("Le personnel est très à l'écoute", False),
        ("Rien à signaler", False),
        ("Trop tôt le soir", False),
        ("Horaires et tarifs", False),
        ("Merci", False),
    ],
)
def test_is_closed_question(answer, expected):
    assert is_closed_question(answer) is expected


def test_length_thresholds():
    assert is_closed_question("a" * 14)
    assert not is_closed_question("a" * 15)
    assert is_closed_question("oui" + "a" * 27)
    assert not is_closed_question("oui" + "a" * 28)


def test_open_header_markers():
    assert is_definitely_open("Avez-vous des REMARQUES ?")
    assert is_definitely_open("Merci de préciser")
    assert not is_definitely_open("Les horaires vous conviennent-ils ?")


def test_closed_question_tallies_normalized_answers():
    stats = classify_question("q", _responses(["oui", "Oui", "x", "non", None]))
    assert stats.kind == "closed"
    assert stats.answers == {"Oui": 3, "Non": 1}
    assert stats.total_responses == 4
    assert stats.responses_list == []
    assert stats.question == "Question ?"
    assert stats.column_index == 10


def test_single_prose_answer_makes_question_open():
    stats = classify_question("q", _responses(["Oui", "Non", "Oui, mais avec des horaires plus larges"]))
    assert stats.kind == "open"
    assert stats.answers == {}
    assert [r.answer for r in stats.responses_list] == [
        "Oui",
        "Non",
        "Oui, mais avec des horaires plus larges",
    ]
    assert [r.respondent_id for r in stats.responses_list] == [1, 2, 3]


def test_separator_makes_question_multi_and_dedupes_per_response():
    stats = classify_question("q", _responses(["Jeux; Lecture; Jeux", "Lecture", "Sortie au parc"]))
    assert stats.kind == "multi"
    assert not stats.is_open_question
    assert stats.answers == {"Jeux": 1, "Lecture": 2, "Sortie au parc": 1}
    assert stats.responses_list == []


def test_forced_open_header_wins_over_multi():
    stats = classify_question("q", _responses(["a; b", "c"], header="Vos suggestions"))
    assert stats.kind == "open"
    assert stats.answers == {}
    assert len(stats.responses_list) == 2


def test_placeholder_answers_not_counted():
    stats = classify_question("q", _responses(["N/A", "", "Oui"]))
    assert stats.total_responses == 1
    assert stats.answers == {"Oui": 1}


def test_unanswered_question_is_empty():
    stats = classify_question("q", _responses([None, None]))
    assert stats.total_responses == 0
    assert stats.question == ""


def test_yes_no_answers_are_closed():
    stats = classify_question("q", _responses(["Oui"] * 10 + ["Non"] * 5))
    assert not stats.is_open_question
    assert not stats.is_multi_options
    assert stats.answers == {"Oui": 10, "Non": 5}


def test_one_separated_answer_makes_question_multi():
    stats = classify_question("q", _responses(["Rouge", "Bleu; Vert", "Jaune"]))
    assert stats.is_multi_options
    assert stats.answers == {"Rouge": 1, "Bleu": 1, "Vert": 1, "Jaune": 1}


def test_remarks_header_forces_open_on_short_answer():
    stats = classify_question("q", _responses(["Tout va bien"], header="Avez-vous des remarques ?"))
    assert stats.kind == "open"
    assert stats.responses_list[0].answer == "Tout va bien"
