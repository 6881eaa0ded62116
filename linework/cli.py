"""
Command Line Interface Module

Converts the line work of selected DXF layers into a GeoJSON file.
"""

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import (
    MIN_PRECISION,
    DEFAULT_CLOSED_LAYERS,
    CollinearityStrategy,
)
from .config import LayerSpec, ReconstructionConfig, load_config
from .graph.tolerance import TOLERANCE_POLICIES
from .io.dxf_reader import load_segments
from .io.geojson_writer import (
    build_feature_collection,
    build_diagnostics_report,
    write_geojson,
    write_json,
)
from .pipeline import LayerResult, group_segments_by_layer, reconstruct_layers

logger = logging.getLogger(__name__)


def parse_layer_arg(value: str) -> LayerSpec:
    """
    Parse a --layer value.

    Examples:
        "MURS" -> LayerSpec("MURS")
        "MURS=BearingWall" -> LayerSpec("MURS", "BearingWall")

    Args:
        value: NAME or NAME=Type

    Returns:
        LayerSpec (expect_closed is resolved later)
    """
    name, _, feature_type = value.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid layer: '{value}'")
    return LayerSpec(name=name, feature_type=feature_type.strip() or None)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the converter."""
    parser = argparse.ArgumentParser(
        prog="linework",
        description="Rebuild polygons and polylines from DXF line segments and write GeoJSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  linework -i plan.dxf -o plan.geojson
  linework -i plan.dxf -o plan.geojson --layer MURS=BearingWall --layer PORTE=Door
  linework -i plan.dxf -o plan.geojson --config config/settings.yaml --cache plan.json -v
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input DXF file path"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output GeoJSON file path"
    )

    # Optional arguments
    parser.add_argument(
        "--config",
        help="Settings YAML file (reconstruction options and layers)"
    )

    parser.add_argument(
        "--layer",
        action="append",
        type=parse_layer_arg,
        dest="layers",
        metavar="NAME[=TYPE]",
        help="Layer to convert, optionally with a feature type label (repeatable)"
    )

    parser.add_argument(
        "--cache",
        help="JSON cache of the parsed drawing (created if missing)"
    )

    parser.add_argument(
        "--diagnostics",
        help="Write a JSON diagnostics report to this path"
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indent the GeoJSON output"
    )

    parser.add_argument(
        "--no-explode",
        action="store_true",
        help="Do not explode polylines into line segments"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    # Reconstruction options
    recon_group = parser.add_argument_group('reconstruction')

    recon_group.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help=f"Snapping tolerance in drawing units (default: {MIN_PRECISION})"
    )

    recon_group.add_argument(
        "--tolerance-policy",
        choices=sorted(TOLERANCE_POLICIES),
        default=None,
        help="Point comparison policy (default: euclidean)"
    )

    recon_group.add_argument(
        "--collinearity",
        choices=[s.value for s in CollinearityStrategy],
        default=None,
        help="Collinear segment handling (default: normalize)"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    input_path = Path(args.input)
    cached = args.cache is not None and Path(args.cache).is_file()
    if not input_path.exists() and not cached:
        return False, f"Input file not found: {args.input}"

    if input_path.suffix.lower() != ".dxf":
        return False, f"Input file must be a DXF: {args.input}"

    if args.config and not Path(args.config).exists():
        return False, f"Settings file not found: {args.config}"

    if args.tolerance is not None and args.tolerance <= 0:
        return False, f"Tolerance must be positive: {args.tolerance}"

    if args.indent is not None and args.indent < 0:
        return False, f"Indent must not be negative: {args.indent}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def build_config(args: argparse.Namespace) -> ReconstructionConfig:
    """
    Merge the settings file, command-line overrides and default layers.

    Layers given on the command line replace the configured layer set;
    a configured layer keeps its expect_closed flag and type unless the
    command line supplies a type.
    """
    if args.config:
        config = load_config(args.config)
    else:
        config = ReconstructionConfig.with_default_layers()

    overrides = {}
    if args.tolerance is not None:
        overrides["min_precision"] = args.tolerance
    if args.tolerance_policy is not None:
        overrides["tolerance_policy"] = args.tolerance_policy
    if args.collinearity is not None:
        overrides["collinearity"] = args.collinearity

    if args.layers:
        layers: Dict[str, LayerSpec] = {}
        for spec in args.layers:
            known = config.layers.get(spec.name)
            layers[spec.name] = LayerSpec(
                name=spec.name,
                feature_type=spec.feature_type or (known.feature_type if known else None),
                expect_closed=known.expect_closed if known else spec.name in DEFAULT_CLOSED_LAYERS,
            )
        overrides["layers"] = layers

    return replace(config, **overrides) if overrides else config


def run(args: argparse.Namespace) -> Dict[str, LayerResult]:
    """
    Run a conversion from parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Layer name -> LayerResult
    """
    start_time = time.time()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    config = build_config(args)
    layer_names = list(config.layers) or None

    logger.info(f"Processing: {args.input}")

    segments = load_segments(
        args.input,
        layers=layer_names,
        cache_path=args.cache,
        explode_polylines=not args.no_explode,
    )

    segments_by_layer = group_segments_by_layer(segments, layer_names)
    results = reconstruct_layers(segments_by_layer, config)

    collection = build_feature_collection(results)
    write_geojson(collection, args.output, indent=args.indent)

    if args.diagnostics:
        write_json(build_diagnostics_report(results), args.diagnostics, indent=2)
        logger.info(f"Diagnostics written: {args.diagnostics}")

    processing_time = time.time() - start_time

    # Summary
    logger.info(f"\nSummary:")
    for result in results.values():
        logger.info(f"  {result.diagnostics.summary()}")
    logger.info(f"  Processing time: {processing_time:.1f}s")

    warnings = [w for r in results.values() for w in r.diagnostics.warnings]
    if warnings and args.verbose:
        logger.info(f"\nWarnings ({len(warnings)}):")
        for w in warnings[:10]:
            logger.info(f"  - {w.kind.value}: {w.message}")
        if len(warnings) > 10:
            logger.info(f"  ... and {len(warnings) - 10} more")

    return results


def main():
    """Main entry point for CLI."""
    args = parse_args()

    try:
        run(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
