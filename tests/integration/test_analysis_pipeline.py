from pathlib import Path

import pandas as pd
import pytest

from creche_survey.schemas.datasets import (
    FACILITY_HEADER,
    GENDER_HEADER,
    SATISFACTION_HEADER,
    UNIDENTIFIED_FACILITY,
)
from creche_survey.services import export_service
from creche_survey.services.analysis_service import (
    InputEmptyError,
    NoValidResponsesError,
    StructuralValidationError,
    analyze_bytes,
    analyze_file,
    analyze_grid,
)
from creche_survey.services.manager_lookup import FacilityManagerLookup

FIXTURES = Path(__file__).parent.parent / "fixtures"


def _dump(result):
    return {k: v.model_dump(mode="json") for k, v in result.facilities.items()}


def _write_xlsx(path, headers, rows):
    pd.DataFrame([headers, *rows]).to_excel(path, header=False, index=False)
    return path


def test_unidentified_rows_dropped(analysis):
    assert set(analysis.facilities) == {"Crèche Alpha", "Crèche Beta"}
    assert analysis.dropped_unidentified == 1
    assert [r.id for r in analysis.responses] == [1, 2, 3, 4]
    assert analysis.total_responses == 4


def test_only_unidentified_rows_are_kept_together(survey_headers):
    rows = [[None] * 7 + ["Très satisfait"] + [None] * 8, [None] * 7 + ["Pas satisfait"] + [None] * 8]
    result = analyze_grid(survey_headers, rows)
    assert list(result.facilities) == [UNIDENTIFIED_FACILITY]
    assert result.facilities[UNIDENTIFIED_FACILITY].total_responses == 2
    assert result.dropped_unidentified == 0


def test_scores_per_facility(analysis):
    summary = {name: stats.satisfaction for name, stats in analysis.facilities.items()}
    assert summary["Crèche Beta"] == {"Très satisfait": 1}
    assert analysis.facilities["Crèche Beta"].primary_manager == "AGES"


def test_lookup_overrides_manager_columns(survey_headers, survey_rows):
    lookup = FacilityManagerLookup({"Crèche Alpha": "ALEF"})
    result = analyze_grid(survey_headers, survey_rows, lookup=lookup)
    assert result.facilities["Crèche Alpha"].manager == {"ALEF": 3}
    assert result.facilities["Crèche Beta"].manager == {"AGES": 1}


@pytest.mark.parametrize("headers, rows", [([], [["x"]]), (["A"], [])])
def test_empty_input_rejected(headers, rows):
    with pytest.raises(InputEmptyError):
        analyze_grid(headers, rows)


def test_rows_without_content_rejected(survey_headers):
    with pytest.raises(NoValidResponsesError) as excinfo:
        analyze_grid(survey_headers, [[None] * 16, ["", "  "]])
    assert excinfo.value.message == "Aucune réponse valide trouvée dans le fichier"


def test_analyze_csv_fixture():
    result = analyze_file(FIXTURES / "survey_sample.csv")
    assert set(result.facilities) == {"Crèche Les Lutins", "Crèche Arc-en-ciel"}
    lutins = result.facilities["Crèche Les Lutins"]
    assert lutins.manager == {"Ville de Strasbourg": 2}
    assert lutins.question_stats["les_horaires_vous_conviennent_ils"].answers == {"Oui": 1, "Non": 1}
    remarks = lutins.question_stats["avez_vous_des_remarques"]
    assert remarks.is_open_question
    assert [r.answer for r in remarks.responses_list] == ["Très bonne équipe, merci"]
    assert "num_ro_de_dossier" not in lutins.question_stats
    assert result.global_stats().metadata.survey_period == "02/09/2024 - 05/09/2024"


def test_analyze_xlsx_with_lookup_file(tmp_path, survey_headers, survey_rows):
    data_path = _write_xlsx(tmp_path / "reponses.xlsx", survey_headers, survey_rows)
    lookup_path = tmp_path / "mapping.csv"
    lookup_path.write_text("Etablissement;Gestionnaire\nCreche Beta;AGF\n", encoding="utf-8")
    result = analyze_file(data_path, lookup_path=lookup_path)
    assert result.warnings == []
    assert result.facilities["Crèche Beta"].manager == {"AGF": 1}
    assert result.facilities["Crèche Alpha"].manager == {"Ville de Strasbourg": 3}
    assert result.global_stats().satisfaction.score == 75


def test_unusable_lookup_file_becomes_warning(tmp_path, survey_headers, survey_rows):
    data_path = _write_xlsx(tmp_path / "reponses.xlsx", survey_headers, survey_rows)
    lookup_path = tmp_path / "mapping.csv"
    lookup_path.write_text("Code;Adresse\n1;rue\n", encoding="utf-8")
    result = analyze_file(data_path, lookup_path=lookup_path)
    assert len(result.warnings) == 1
    assert result.facilities["Crèche Beta"].manager == {"AGES": 1}


def test_previous_export_reloaded(analysis):
    text = export_service.export_to_json(analysis.to_export())
    reloaded = analyze_bytes(text.encode("utf-8"), "resultats.JSON")
    assert set(reloaded.facilities) == set(analysis.facilities)
    assert reloaded.total_responses == 4
    assert reloaded.global_stats().satisfaction.score == 75


def test_invalid_export_rejected():
    with pytest.raises(StructuralValidationError):
        analyze_bytes(b'{"etablissements": {}}', "resultats.json")


def test_single_row_dataset_scores_full_satisfaction():
    headers = [FACILITY_HEADER, "Ville de Strasbourg", GENDER_HEADER, SATISFACTION_HEADER]
    result = analyze_grid(headers, [["Crèche Alpha", "x", "Femme", "Très satisfait"]])
    stats = result.facilities["Crèche Alpha"]
    assert stats.manager == {"Ville de Strasbourg": 1}
    assert stats.gender == {"Femme": 1}
    assert result.global_stats().satisfaction.score == 100


def test_repeated_analysis_is_identical(survey_headers, survey_rows):
    first = analyze_grid(survey_headers, survey_rows)
    second = analyze_grid(survey_headers, survey_rows)
    assert _dump(first) == _dump(second)


def test_year_first_timestamps_give_survey_period():
    data = (
        "Horodateur;Selectionnez votre établissement :;Question\n"
        "2024/05/02 18:00:00;Crèche A;Oui\n"
        "2024/05/12 09:30:00;Crèche A;Non\n"
    ).encode("utf-8")
    result = analyze_bytes(data, "reponses.csv")
    assert result.responses[0].date.month == 5
    assert result.global_stats().metadata.survey_period == "02/05/2024 - 12/05/2024"
