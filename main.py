#!/usr/bin/env python3
"""
Roof Takeoff Agent - CLI Entry Point

A LangGraph workflow that reads vendor roof-measurement reports
(iRoof, EagleView, Hover, RoofSnap and unknown layouts), extracts the
measurements and produces a supplier material order for each roof.

Usage:
    # Single report
    python main.py ./reports/123-Main-St.pdf ./output

    # Batch folder
    python main.py ./reports/ ./output

    # With options
    python main.py ./reports/ ./output --preset complex --color "Weathered Wood" --chimneys 1 --brick-chimney

    # Show workflow visualization
    python main.py --show-graph
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from version import __version__, APP_NAME
from dotenv import load_dotenv

# Load environment variables (ROOF_TAKEOFF_SETTINGS may name the settings file)
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Roof Takeoff Agent - Material orders from roof measurement reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./reports/123-Main-St.pdf ./output
  %(prog)s ./reports/ ./output --preset complex
  %(prog)s ./reports/ ./output --settings ./config/roof_settings.yaml --color Charcoal
  %(prog)s --list-presets
  %(prog)s --show-graph
        """
    )

    parser.add_argument(
        "input_path",
        nargs="?",
        help="Report file (.pdf or .txt) or folder containing reports"
    )

    parser.add_argument(
        "output_path",
        nargs="?",
        help="Directory for output reports"
    )

    parser.add_argument(
        "--settings", "-s",
        default=None,
        help="Settings YAML (default: $ROOF_TAKEOFF_SETTINGS, ./config/roof_settings.yaml, ~/.roof_takeoff/settings.yaml)"
    )

    parser.add_argument(
        "--preset", "-p",
        default=None,
        help="Preset id or name; overrides the factors in the settings file"
    )

    parser.add_argument(
        "--shingle-type",
        default="GAF Timberline HDZ",
        help="Shingle product line (default: GAF Timberline HDZ)"
    )

    parser.add_argument(
        "--color", "-c",
        default="Charcoal",
        help="Shingle color, used in shingle/ridge cap/paint names (default: Charcoal)"
    )

    parser.add_argument(
        "--spray-foam",
        action="store_true",
        help="Attic has spray foam insulation (no ridge vent)"
    )

    parser.add_argument(
        "--chimneys",
        type=int,
        default=0,
        help="Number of chimneys (default: 0)"
    )

    parser.add_argument(
        "--chimney-width",
        type=float,
        default=3.0,
        help="Chimney width in feet (default: 3)"
    )

    parser.add_argument(
        "--brick-chimney",
        action="store_true",
        help="Chimneys are brick (adds counter flashing)"
    )

    parser.add_argument(
        "--cricket",
        action="store_true",
        help="Chimneys need a cricket"
    )

    parser.add_argument(
        "--brick-walls",
        action="store_true",
        help="Step-flashed walls are brick (adds counter flashing)"
    )

    parser.add_argument(
        "--low-pitch-threshold",
        type=int,
        default=4,
        help="Pitch rise below which areas need ice & water (default: 4, i.e. under 4/12)"
    )

    parser.add_argument(
        "--no-checkpoints",
        action="store_true",
        help="Disable state checkpointing"
    )

    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List available presets and exit"
    )

    parser.add_argument(
        "--show-graph",
        action="store_true",
        help="Show workflow graph visualization and exit"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose/debug logging"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def main():
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.show_graph:
        from agent import get_workflow_visualization
        print(get_workflow_visualization())
        return 0

    from roofing.config_factors import BUILT_IN_PRESETS, find_preset, load_config, resolve_factors
    from roofing.models import JobOptions

    # Load settings (a missing explicit file or unknown keys are fatal)
    try:
        config = load_config(args.settings)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid settings: {e}")
        return 1

    if args.list_presets:
        for preset in config.presets + BUILT_IN_PRESETS:
            kind = "built-in" if preset.is_built_in else "custom"
            print(f"  {preset.id:<20} {preset.name:<24} ({kind}) {preset.description}")
        return 0

    if not args.input_path or not args.output_path:
        parser.error("input_path and output_path are required (unless using --show-graph or --list-presets)")

    if args.chimneys < 0:
        parser.error(f"chimneys must be non-negative, got {args.chimneys}")
    if args.chimney_width <= 0:
        parser.error(f"chimney-width must be positive, got {args.chimney_width}")
    if not 1 <= args.low_pitch_threshold <= 12:
        parser.error(f"low-pitch-threshold must be between 1 and 12, got {args.low_pitch_threshold}")

    preset = None
    if args.preset:
        preset = find_preset(args.preset, config.presets)
        if preset is None:
            logger.error(f"Unknown preset: {args.preset}")
            return 1

    input_path = Path(args.input_path).resolve()
    output_path = Path(args.output_path).resolve()

    if not input_path.exists():
        logger.error(f"Input path does not exist: {input_path}")
        return 1

    output_path.mkdir(parents=True, exist_ok=True)

    factors = resolve_factors(config.settings, preset)
    job_options = JobOptions(
        shingle_type=args.shingle_type,
        shingle_color=args.color,
        has_spray_foam_insulation=args.spray_foam,
        chimney_count=args.chimneys,
        chimney_against_brick=args.brick_chimney,
        chimney_width_feet=args.chimney_width,
        chimney_needs_cricket=args.cricket,
        wall_flashing_against_brick=args.brick_walls,
    )

    # Print banner
    print("\n" + "=" * 60)
    print(f"  {APP_NAME} {__version__}")
    print("  LangGraph Workflow for Roof Measurement Reports")
    print("=" * 60)
    print(f"  Input:    {input_path}")
    print(f"  Output:   {output_path}")
    print(f"  Settings: {config.source or 'defaults'}")
    print(f"  Preset:   {preset.name if preset else 'none (settings)'}")
    print(f"  Shingles: {job_options.shingle_type} - {job_options.shingle_color}")
    print("=" * 60 + "\n")

    try:
        from agent import run_takeoff_workflow

        start_time = datetime.now()

        result = run_takeoff_workflow(
            input_path=str(input_path),
            output_path=str(output_path),
            factors=factors.to_dict(),
            job_options=job_options.to_dict(),
            preset_name=preset.name if preset else None,
            confidence_threshold=config.settings.parse_confidence_threshold,
            low_pitch_threshold=args.low_pitch_threshold,
            enable_checkpoints=not args.no_checkpoints
        )

        duration = (datetime.now() - start_time).total_seconds()

        print("\n" + "=" * 60)
        print("  PROCESSING COMPLETE")
        print("=" * 60)

        files_completed = result.get("files_completed", [])
        files_failed = result.get("files_failed", [])
        flagged = [f for f in files_completed if f.get("needs_verification")]

        print(f"  Files Processed: {len(files_completed) + len(files_failed)}")
        print(f"  Successful:      {len(files_completed)}")
        print(f"  Failed:          {len(files_failed)}")
        print(f"  Needs Review:    {len(flagged)}")
        print(f"  Total Squares:   {result.get('total_squares', 0.0):,.2f}")
        print(f"  Duration:        {duration:.1f} seconds")
        print("=" * 60)
        print(f"\n  Reports saved to: {result.get('output_path', output_path)}")

        if flagged:
            print("\n  Verify against the source report (low confidence):")
            for f in flagged:
                print(f"    - {f.get('filename')}: {f.get('confidence', 0):.0f}% ({f.get('detected_format')})")

        if files_failed:
            print("\n  Failed files:")
            for f in files_failed:
                print(f"    - {f.get('filename', 'Unknown')}: {f.get('errors', ['Unknown error'])[0]}")

        print()
        return 0

    except ImportError as e:
        logger.error(f"Missing dependency: {e}")
        logger.error("Run: pip install -e .")
        return 1
    except Exception as e:
        logger.exception(f"Workflow failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
