import pytest

from creche_survey.schemas.datasets import (
    AGE_HEADER,
    CSP_HEADER,
    FACILITY_HEADER,
    GENDER_HEADER,
    SATISFACTION_HEADER,
)
from creche_survey.services.analysis_service import analyze_grid
import creche_survey.viz  # noqa: F401 ensures strategies registered

SURVEY_HEADERS = [
    "Horodateur",
    FACILITY_HEADER,
    "Ville de Strasbourg",
    "AGES",
    GENDER_HEADER,
    AGE_HEADER,
    CSP_HEADER,
    SATISFACTION_HEADER,
    "Numéro de dossier",
    "Âge de votre enfant : [Moins de 18 mois]",
    "Âge de votre enfant : [Plus de 18 mois]",
    "Les horaires vous conviennent-ils ?",
    "Si non, pourquoi ? [Horaires]",
    "Si non, pourquoi ? [Tarifs]",
    "Quels ateliers appréciez-vous ?",
    "Avez-vous des remarques ?",
]

SURVEY_ROWS = [
    [45000, "Crèche Alpha", "x", None, "Femme", "35 ans", "Cadre", "Très satisfait", "A1",
     "oui", None, "Oui", None, None, "Peinture; Musique", "Très bonne équipe"],
    [45001, "Crèche Alpha", "x", None, "Homme", "40 ans", "Employé", "Plutôt satisfait", "A2",
     None, "oui", "Non", "Trop tôt le soir", None, "Musique", None],
    [45002, "Crèche Alpha", "x", None, "Je suis une femme", None, None, "Pas satisfait", None,
     "oui", "oui", "non", None, "Trop cher", "Sans réponse", "Tout va bien"],
    [45003, "Crèche Beta", None, "x", "Homme", None, "Cadre", "Très satisfait", None,
     None, None, "oui", None, None, "Lecture", None],
    [None] * 16,
    [None, None, None, None, None, None, None, "Très satisfait", None,
     None, None, "Oui", None, None, None, None],
]


@pytest.fixture
def survey_headers() -> list:
    return list(SURVEY_HEADERS)


@pytest.fixture
def survey_rows() -> list:
    return [list(row) for row in SURVEY_ROWS]


@pytest.fixture
def analysis(survey_headers, survey_rows):
    return analyze_grid(survey_headers, survey_rows)
