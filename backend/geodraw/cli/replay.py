"""CLI for replaying drawn features through the overlap check offline."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from geodraw.config import Settings, get_settings
from geodraw.geometry.overlap import OverlapResolver
from geodraw.geometry.types import OutcomeStatus, Shape
from geodraw.models.schemas.feature import DrawnFeature
from geodraw.services.drawing_service import count_shapes

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class ReplayPipeline:
    """
    Feed features, in order, through the same checks as the API.

    Each feature is validated, checked against the per-kind limits and then
    resolved against everything accepted before it.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.resolver = OverlapResolver(
            min_area=settings.min_trim_area_m2,
            circle_steps=settings.circle_steps,
        )

    def replay(self, features: list[Any]) -> dict[str, Any]:
        """
        Replay features in drawing order.

        Args:
            features: Raw GeoJSON feature dicts

        Returns:
            Dict with the accepted features and per-feature results
        """
        accepted: list[Shape] = []
        results: list[dict[str, Any]] = []
        limits = self.settings.shape_limits()

        for index, raw in enumerate(features):
            try:
                shape = DrawnFeature.model_validate(raw).to_shape()
            except ValidationError as e:
                results.append({"index": index, "status": "invalid", "detail": str(e)})
                continue

            kind = shape.kind.value
            counts = count_shapes([s.to_feature() for s in accepted])
            limit = limits.get(kind)
            if limit is not None and counts[kind] >= limit:
                results.append({"index": index, "id": shape.id, "status": "limit_reached"})
                continue

            outcome = self.resolver.resolve(shape, accepted)
            entry = {"index": index, "id": shape.id, "status": outcome.status.value}
            if outcome.status == OutcomeStatus.REJECTED:
                entry["reason"] = outcome.reason.value
            else:
                accepted.append(outcome.shape)
            if outcome.used_fallback:
                entry["used_fallback"] = True
            results.append(entry)

        return {
            "accepted": [shape.to_feature() for shape in accepted],
            "results": results,
        }


def load_features(path: Path) -> list[Any]:
    """Load features from a FeatureCollection or a bare feature array."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and data.get("type") == "FeatureCollection":
        return data.get("features", [])
    if isinstance(data, list):
        return data
    raise ValueError(f"{path} is neither a FeatureCollection nor a feature array")


def run_replay(
    input_path: str,
    output_path: Optional[str] = None,
) -> dict[str, Any]:
    """
    Replay a GeoJSON file and optionally write the accepted features.

    Args:
        input_path: FeatureCollection in drawing order
        output_path: Where to write the accepted FeatureCollection (optional)
    """
    pipeline = ReplayPipeline(get_settings())
    features = load_features(Path(input_path))
    logger.info(f"Replaying {len(features)} feature(s) from {input_path}")

    report = pipeline.replay(features)

    summary: dict[str, int] = {}
    for entry in report["results"]:
        summary[entry["status"]] = summary.get(entry["status"], 0) + 1
        if entry["status"] == "rejected":
            logger.info(f"  #{entry['index']} {entry['id']}: rejected ({entry['reason']})")
    logger.info(f"Summary: {summary}")

    if output_path:
        collection = {"type": "FeatureCollection", "features": report["accepted"]}
        Path(output_path).write_text(json.dumps(collection, indent=2), encoding="utf-8")
        logger.info(f"Wrote {len(report['accepted'])} feature(s) to {output_path}")

    return report


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Replay drawn GeoJSON features through the GeoDraw overlap check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m geodraw.cli.replay drawing.geojson
  python -m geodraw.cli.replay drawing.geojson --output cleaned.geojson
        """,
    )

    parser.add_argument(
        "input",
        help="GeoJSON FeatureCollection, features in drawing order",
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Write accepted features to this file",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not Path(args.input).exists():
        logger.error(f"File not found: {args.input}")
        sys.exit(1)

    try:
        run_replay(args.input, args.output)
    except (ValueError, OSError) as e:
        logger.error(f"Replay failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
