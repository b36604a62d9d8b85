from creche_survey.schemas.datasets import FOLLOW_UP_PREFIX, SATISFACTION_HEADER
from creche_survey.services.column_mapper import identify_columns


def test_fixed_columns_identified(survey_headers):
    mapping = identify_columns(survey_headers)
    assert mapping.date_column == 0
    assert mapping.facility_column == 1
    assert [(m.index, m.label) for m in mapping.manager_columns] == [
        (2, "Ville de Strasbourg"),
        (3, "AGES"),
    ]
    assert mapping.gender_column == 4
    assert mapping.age_column == 5
    assert mapping.csp_column == 6
    assert mapping.satisfaction_column == 7


def test_checkbox_groups_built_from_bracket_headers(survey_headers):
    mapping = identify_columns(survey_headers)
    options = mapping.checkbox_groups["Âge de votre enfant"]
    assert [(o.index, o.option_label, o.free_text) for o in options] == [
        (9, "Moins de 18 mois", False),
        (10, "Plus de 18 mois", False),
    ]


def test_follow_up_headers_grouped_under_prefix(survey_headers):
    mapping = identify_columns(survey_headers)
    options = mapping.checkbox_groups[FOLLOW_UP_PREFIX]
    assert [o.index for o in options] == [12, 13]
    assert all(o.free_text for o in options)
    assert options[0].option_label == "Si non, pourquoi ? [Horaires]"


def test_group_options_sorted_by_index():
    headers = ["Q : [b]", "Autre", "Q : [a]"]
    mapping = identify_columns(headers)
    assert [o.index for o in mapping.checkbox_groups["Q"]] == [0, 2]


def test_unmatched_headers_left_out_of_mapping(survey_headers):
    mapping = identify_columns(survey_headers)
    claimed = mapping.fixed_columns()
    for options in mapping.checkbox_groups.values():
        claimed.update(o.index for o in options)
    assert 8 not in claimed
    assert 11 not in claimed


def test_satisfaction_fallback_first_candidate_wins():
    headers = [
        "Êtes-vous satisfait de la crèche ?",
        "Êtes-vous satisfait de l'accueil ?",
    ]
    mapping = identify_columns(headers)
    assert mapping.satisfaction_column == 0


def test_exact_satisfaction_header_overrides_fallback():
    headers = ["Êtes-vous satisfait de la crèche ?", SATISFACTION_HEADER]
    mapping = identify_columns(headers)
    assert mapping.satisfaction_column == 1


def test_missing_satisfaction_column_is_accepted():
    mapping = identify_columns(["Question libre", None, ""])
    assert mapping.satisfaction_column is None
    assert mapping.checkbox_groups == {}


def test_no_column_claimed_twice(survey_headers):
    mapping = identify_columns(survey_headers)
    seen = list(mapping.fixed_columns())
    for options in mapping.checkbox_groups.values():
        seen.extend(o.index for o in options)
    assert len(seen) == len(set(seen))
