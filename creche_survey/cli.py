"""Command line front-end: ``creche-survey analyze responses.xlsx --export out.json``."""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from creche_survey.services import chart_service, export_service, reporting
from creche_survey.services.analysis_service import AnalysisFailure, analyze_file
from creche_survey.services.data_loader import UnsupportedFileType
from creche_survey.services.error_builder import build_error
from creche_survey.services.manager_lookup import lookup_template
from creche_survey.services.validators import DatasetTooLargeError
from creche_survey.schemas.errors import ErrorCode
from creche_survey.viz.registry import charts


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="creche-survey", description="Analyse des enquêtes de satisfaction des crèches"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyser un fichier de réponses ou un export JSON")
    analyze.add_argument("file", type=Path)
    analyze.add_argument("--lookup", type=Path, help="Fichier établissement / gestionnaire")
    analyze.add_argument("--export", type=Path, help="Écrire l'export JSON complet")
    analyze.add_argument("--view", choices=reporting.VIEWS, default="name")
    analyze.add_argument("--chart", help="Clé du graphique à générer")
    analyze.add_argument("--chart-config", default=None, help="Configuration JSON du graphique")
    analyze.add_argument("--chart-out", type=Path, help="Fichier de sortie du graphique")

    template = sub.add_parser("lookup-template", help="Écrire un modèle de fichier de mapping")
    template.add_argument("output", type=Path)
    return parser


def _fail(code: str, message: str, details: Optional[List[str]] = None, **extra) -> int:
    payload = build_error(code, message, details, **extra)
    print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
    return 1


def _analyze(args: argparse.Namespace) -> int:
    result = analyze_file(args.file, lookup_path=args.lookup)
    for warning in result.warnings:
        print(f"Avertissement : {warning}", file=sys.stderr)

    summary = reporting.dataset_summary(result.facilities, result.responses)
    print(
        f"{summary['total_responses']} réponses, {summary['total_facilities']} établissements, "
        f"satisfaction globale {summary['global_satisfaction']}%, "
        f"période {summary['survey_period']}"
    )
    frame = reporting.sort_view(reporting.facility_summary_frame(result.facilities), args.view)
    print(frame.to_string(index=False))

    if args.export:
        export_service.write_export(result.to_export(), args.export)

    if args.chart:
        try:
            config = json.loads(args.chart_config) if args.chart_config else None
        except json.JSONDecodeError as exc:
            return _fail(ErrorCode.PAYLOAD_ERROR, "Invalid JSON payload in chart config", [str(exc)])
        try:
            payload = chart_service.generate_chart(result, args.chart, config=config)
        except chart_service.UnknownChartKeyError as exc:
            return _fail(
                ErrorCode.INVALID_CHART_KEY, str(exc), supported_keys=charts.list_keys()
            )
        except ValueError as exc:
            return _fail(ErrorCode.CHART_ERROR, str(exc))
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        if args.chart_out:
            args.chart_out.write_text(text, encoding="utf-8")
        else:
            print(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "lookup-template":
        rows = lookup_template()
        pd.DataFrame(rows[1:], columns=rows[0]).to_csv(args.output, index=False)
        return 0
    try:
        return _analyze(args)
    except AnalysisFailure as exc:
        return _fail(exc.code, exc.message, exc.details)
    except UnsupportedFileType as exc:
        return _fail(ErrorCode.INVALID_FILE_TYPE, str(exc))
    except DatasetTooLargeError as exc:
        return _fail(ErrorCode.DATASET_TOO_LARGE, "Dataset too large", [str(exc)])
    except OSError as exc:
        return _fail(ErrorCode.FILE_UNREADABLE, "Fichier introuvable ou illisible", [str(exc)])


if __name__ == "__main__":
    sys.exit(main())
