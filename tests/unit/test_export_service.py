import json
from datetime import datetime

import pytest

from creche_survey.services import export_service
from creche_survey.services.failures import StructuralValidationError


def test_round_trip_preserves_statistics(analysis):
    text = export_service.export_to_json(analysis.to_export())
    facilities, responses = export_service.load_export_text(text)
    assert {k: v.model_dump() for k, v in facilities.items()} == {
        k: v.model_dump() for k, v in analysis.facilities.items()
    }
    assert [r.model_dump() for r in responses] == [r.model_dump() for r in analysis.responses]


def test_export_uses_camel_case_keys(analysis):
    payload = export_service.export_to_dict(analysis.to_export())
    assert payload["summary"]["totalResponses"] == 4
    assert payload["summary"]["totalEtablissements"] == 2
    alpha = payload["etablissements"]["Crèche Alpha"]
    assert alpha["totalResponses"] == 3
    assert "questionStats" in alpha
    assert "columnOrder" in payload["rawResponses"][0]


def test_summary_is_optional(analysis):
    payload = export_service.export_to_dict(analysis.to_export())
    payload.pop("summary")
    facilities, _ = export_service.load_export(payload)
    assert set(facilities) == {"Crèche Alpha", "Crèche Beta"}


@pytest.mark.parametrize(
    "payload, missing",
    [
        ({}, ["etablissements", "rawResponses"]),
        ({"etablissements": {}, "rawResponses": None}, ["rawResponses"]),
        ([1, 2], ["etablissements", "rawResponses"]),
    ],
)
def test_missing_keys_rejected(payload, missing):
    with pytest.raises(StructuralValidationError) as excinfo:
        export_service.load_export(payload)
    assert excinfo.value.details == missing


def test_malformed_content_rejected():
    payload = {"etablissements": {"A": {"totalResponses": "beaucoup"}}, "rawResponses": []}
    with pytest.raises(StructuralValidationError):
        export_service.load_export(payload)


def test_unreadable_json_rejected():
    with pytest.raises(StructuralValidationError):
        export_service.load_export_text("{not json")


def test_export_filename():
    assert export_service.export_filename(datetime(2024, 6, 1)) == (
        "resultats_enquete_creches_2024-06-01.json"
    )


def test_write_export(tmp_path, analysis):
    path = export_service.write_export(analysis.to_export(), tmp_path / "export.json")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["summary"]["generator"] == "creche-survey"
