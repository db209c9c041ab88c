"""Command line entry point: build a dashboard for a CSV or Excel file."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional, Sequence

from autodash.config import get_settings
from autodash.services.dashboard_service import DashboardService
from autodash.utils.exceptions import AutodashException

settings = get_settings()

# Configure logging; stdout carries the JSON output
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)


def parse_filter_arguments(values: Optional[Sequence[str]]) -> Dict[str, List[str]]:
    """
    Parse repeated `column=v1,v2` arguments into a filter set.

    Raises:
        ValueError: If an argument has no `=` or no column name
    """
    filters: Dict[str, List[str]] = {}
    for value in values or []:
        column, separator, allowed = value.partition("=")
        column = column.strip()
        if not separator or not column:
            raise ValueError(f"Invalid filter '{value}', expected column=value1,value2")
        filters.setdefault(column, []).extend(
            item.strip() for item in allowed.split(",") if item.strip()
        )
    return filters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodash",
        description=f"{settings.app_name} {settings.app_version}: "
        "infer a schema and build a KPI and chart dashboard for a data file.",
    )
    parser.add_argument("file", help="CSV or Excel file")
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="COLUMN=V1,V2",
        help="Keep rows whose column value is one of the listed values",
    )
    parser.add_argument("--limit", type=int, help="Keep at most N filtered rows")
    parser.add_argument(
        "--measure", action="append", default=[], help="Measure for a custom chart"
    )
    parser.add_argument(
        "--dimension", action="append", default=[], help="Dimension for a custom chart"
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    return parser


async def run(args: argparse.Namespace, filters: Dict[str, List[str]]) -> Dict:
    service = DashboardService()
    dataset = service.process_file(args.file)
    dashboard = await service.build_dashboard(
        dataset,
        filters=filters,
        selected_measures=args.measure or None,
        selected_dimensions=args.dimension or None,
        limit=args.limit,
    )
    return {
        "schema": dataset.table_schema.model_dump(mode="json"),
        "stats": dataset.stats.model_dump(mode="json"),
        "dashboard": dashboard.model_dump(mode="json"),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        filters = parse_filter_arguments(args.filter)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = asyncio.run(run(args, filters))
    except AutodashException as e:
        logger.error(f"{e.error_code}: {e.detail}")
        return 1

    print(json.dumps(result, indent=args.indent, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
