import json
import sys

import pytest

import generate_room_docs
from generate_room_docs import NOTHING_TO_RENDER, build_room_exports
from survey_config import ExportSettings, ValidationLimits


def test_nothing_to_render_without_a_room():
    bundle = build_room_exports(None)

    assert bundle.is_empty
    assert bundle.message == NOTHING_TO_RENDER


def test_every_format_is_rendered(meeting_room):
    bundle = build_room_exports(meeting_room, ValidationLimits(), ExportSettings())

    assert sorted(bundle.files) == [
        "compte-rendu-Salle Conseil.md",
        "compte-rendu-Salle Conseil.pdf",
        "compte-rendu-Salle Conseil.rtf",
        "compte-rendu-Salle Conseil.txt",
        "schema-synoptique.svg",
    ]
    assert bundle.files["compte-rendu-Salle Conseil.pdf"].startswith(b"%PDF")
    assert bundle.files["compte-rendu-Salle Conseil.rtf"].startswith(b"{\\rtf1")
    assert "Synthèse" in bundle.files["compte-rendu-Salle Conseil.md"].decode('utf-8')
    assert bundle.report.status.value == "OK"
    assert bundle.ports.total == 2


def test_prefix_and_format_selection(meeting_room):
    bundle = build_room_exports(meeting_room, settings=ExportSettings(document_prefix="CR"), formats=['md'])

    assert list(bundle.files) == ["CR-Salle Conseil.md"]


def test_cli_writes_the_files(tmp_path, monkeypatch):
    survey = tmp_path / "survey.json"
    survey.write_text(json.dumps({
        'room': {'id': "1", 'name': "Salle A/B"},
        'sources': [{'source_type': "PC fixe"}],
        'displays': [{'display_type': "Moniteur", 'size_inches': 65}],
    }), encoding='utf-8')
    output = tmp_path / "exports"
    monkeypatch.delenv("DOCUMENT_PREFIX", raising=False)
    monkeypatch.setattr(sys, "argv", [
        "generate_room_docs.py", str(survey), "--output", str(output),
        "--formats", "md,svg", "--generate-cables",
    ])

    generate_room_docs.main()

    assert sorted(p.name for p in output.iterdir()) == ["compte-rendu-Salle A-B.md", "schema-synoptique.svg"]
    assert "PC fixe" in (output / "schema-synoptique.svg").read_text(encoding='utf-8')


def test_cli_exits_on_missing_survey(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["generate_room_docs.py", str(tmp_path / "missing.json")])

    with pytest.raises(SystemExit) as exc:
        generate_room_docs.main()

    assert exc.value.code == 1
