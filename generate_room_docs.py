#!/usr/bin/env python3
"""
Room Survey Documentation Generator
Compiles a room survey (JSON export) into the technical report in every
format (.txt, .md, .rtf, .pdf) plus the signal-flow diagram (.svg)

Usage:
    python generate_room_docs.py salle-conseil.json --output ./exports
"""

import argparse
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Sequence

from block_diagram import SIGNAL_FLOW_FILENAME, signal_flow_svg
from cable_generator import generate_basic_cables
from derived_values import PortRecommendation, recommend_ports
from document_model import compile_document, document_filename
from pdf_generator import render_report_pdf
from rtf_renderer import render_rtf
from survey_config import ExportSettings, ValidationLimits
from survey_loader import load_room
from survey_models import Room
from technical_validation import ValidationReport, validate_room
from text_renderers import render_boxed_text, render_outline


ALL_FORMATS = ('txt', 'md', 'rtf', 'pdf', 'svg')
NOTHING_TO_RENDER = "Nothing to render: no room survey loaded"


@dataclass
class ExportBundle:
    """Rendered files keyed by file name, plus the values computed on the way"""
    files: Dict[str, bytes] = field(default_factory=dict)
    message: str = ""
    ports: Optional[PortRecommendation] = None
    report: Optional[ValidationReport] = None

    @property
    def is_empty(self) -> bool:
        return not self.files


def build_room_exports(room: Optional[Room],
                       limits: Optional[ValidationLimits] = None,
                       settings: Optional[ExportSettings] = None,
                       formats: Sequence[str] = ALL_FORMATS) -> ExportBundle:
    """Compute ports and validation, compile the document and render each format"""
    if room is None:
        return ExportBundle(message=NOTHING_TO_RENDER)

    limits = limits or ValidationLimits()
    settings = settings or ExportSettings()

    ports = recommend_ports(room)
    report = validate_room(room, limits)
    document = compile_document(room, ports, report)
    outline = render_outline(document)

    def name(ext: str) -> str:
        return document_filename(settings.document_prefix, room.name, ext)

    files: Dict[str, bytes] = {}
    if 'txt' in formats:
        files[name('txt')] = render_boxed_text(document).encode('utf-8')
    if 'md' in formats:
        files[name('md')] = outline.encode('utf-8')
    if 'rtf' in formats:
        # RTF output is pure ASCII once escaped
        files[name('rtf')] = render_rtf(outline).encode('ascii')
    if 'pdf' in formats:
        pdf = render_report_pdf(outline, room, settings.page_size)
        if pdf:
            files[name('pdf')] = pdf
    if 'svg' in formats:
        files[SIGNAL_FLOW_FILENAME] = signal_flow_svg(room.cables, room.sources, room.displays).encode('utf-8')

    return ExportBundle(
        files=files,
        message=f"{len(files)} file(s) rendered for {room.name}",
        ports=ports,
        report=report,
    )


def safe_filename(filename: str) -> str:
    return filename.replace("/", "-").replace("\\", "-")


def main():
    parser = argparse.ArgumentParser(
        description="Generate the technical report of a surveyed meeting room",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python generate_room_docs.py salle-conseil.json
  python generate_room_docs.py salle-conseil.json --output ./exports --formats pdf,svg
  python generate_room_docs.py salle-conseil.json --max-hdmi 7 --generate-cables
        """
    )

    parser.add_argument(
        "survey_file",
        help="Path to the room survey JSON export"
    )

    parser.add_argument(
        "--output", "-o",
        default=".",
        help="Output directory for generated files (default: current directory)"
    )

    parser.add_argument(
        "--prefix", "-p",
        default=None,
        help="File name prefix (default: DOCUMENT_PREFIX or 'compte-rendu')"
    )

    parser.add_argument(
        "--max-hdmi",
        type=float,
        default=None,
        help="Longest acceptable direct HDMI run in meters (default: MAX_HDMI_M or 5)"
    )

    parser.add_argument(
        "--max-hdbaset",
        type=float,
        default=None,
        help="Longest acceptable HDBaseT run in meters (default: MAX_HDBASET_M or 70)"
    )

    parser.add_argument(
        "--generate-cables",
        action="store_true",
        help="Add a basic set of video/audio links before rendering"
    )

    parser.add_argument(
        "--formats",
        default=",".join(ALL_FORMATS),
        help="Comma-separated formats to render: txt, md, rtf, pdf, svg (default: all)"
    )

    args = parser.parse_args()

    survey_path = Path(args.survey_file)
    if not survey_path.exists():
        print(f"❌ Error: survey file not found: {survey_path}")
        sys.exit(1)

    formats = [f.strip().lower() for f in args.formats.split(",") if f.strip()]
    unknown = [f for f in formats if f not in ALL_FORMATS]
    if unknown:
        print(f"❌ Error: unknown format(s): {', '.join(unknown)}")
        sys.exit(1)

    try:
        env_limits = ValidationLimits.from_env()
        limits = ValidationLimits(
            max_hdmi_m=args.max_hdmi if args.max_hdmi is not None else env_limits.max_hdmi_m,
            max_hdbaset_m=args.max_hdbaset if args.max_hdbaset is not None else env_limits.max_hdbaset_m,
        )
        settings = ExportSettings.from_env()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    if args.prefix:
        settings = replace(settings, document_prefix=args.prefix)

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("\n" + "=" * 60)
    print("🔧 ROOM SURVEY DOCUMENTATION GENERATOR")
    print("=" * 60 + "\n")

    print(f"📄 Reading survey: {survey_path}")
    room = load_room(str(survey_path))
    if room is None:
        print(f"❌ {NOTHING_TO_RENDER}")
        sys.exit(1)

    print(f"   Room: {room.name} ({len(room.sources)} sources, {len(room.displays)} displays, "
          f"{len(room.cables)} links)")

    if args.generate_cables:
        generated = generate_basic_cables(room, settings.cable_margin_factor)
        if generated:
            room = replace(room, cables=room.cables + tuple(generated))
            print(f"🔗 Generated {len(generated)} basic link(s)")
        else:
            print("⚠️  No link generated: at least one source and one display are required")

    bundle = build_room_exports(room, limits, settings, formats)

    ports = bundle.ports
    print(f"\n🌐 RJ45 recommended: {ports.total} (rack {ports.rack}, table {ports.table}, other {ports.other})")

    report = bundle.report
    icon = {"OK": "✅", "AVERTISSEMENTS": "⚠️ ", "ERREURS": "❌"}[report.status.value]
    print(f"{icon} Technical validation: {report.status.value}")
    for detail in report.details:
        print(f"   • {detail}")

    if bundle.is_empty:
        print(f"❌ {bundle.message}")
        sys.exit(1)

    print()
    for filename, content in bundle.files.items():
        output_path = output_dir / safe_filename(filename)
        output_path.write_bytes(content)
        print(f"📑 Wrote {output_path} ({len(content)} bytes)")

    print(f"\n✅ SUCCESS! {bundle.message}")
    print(f"\n{'=' * 60}\n")


if __name__ == "__main__":
    main()
