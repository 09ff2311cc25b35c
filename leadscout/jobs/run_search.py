"""CLI job that runs one business search and prints the response JSON."""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from leadscout.core.config import ConfigError, get_settings
from leadscout.core.db import UsageStore
from leadscout.core.errors import SearchError
from leadscout.search.orchestrator import DEFAULT_MAX_RESULTS, DEFAULT_RADIUS_MILES, BusinessSearchService
from leadscout.vendors.google_places import PlacesClient

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find businesses with weak digital presence near a location")
    parser.add_argument("--location", required=True, help="Free-text location, e.g. 'Charlotte, NC'")
    parser.add_argument("--category", dest="business_type", required=True, help="Business category to search")
    parser.add_argument("--radius", type=float, default=DEFAULT_RADIUS_MILES, help="Search radius in miles")
    parser.add_argument(
        "--max-results",
        dest="max_results",
        type=int,
        default=DEFAULT_MAX_RESULTS,
        help="Maximum number of businesses to return",
    )
    parser.add_argument("--user-id", dest="user_id", required=True, help="User the search is billed to")
    return parser


def run_search_job(args: argparse.Namespace) -> int:
    settings = get_settings()
    client = PlacesClient(settings.search_api_key, timeout=settings.places_timeout_seconds)
    store = UsageStore.from_dsn(settings.database_url, maxconn=settings.db_pool_max)
    service = BusinessSearchService(client, store, settings)

    payload = {
        "location": args.location,
        "businessType": args.business_type,
        "radius": args.radius,
        "maxResults": args.max_results,
    }
    try:
        body = service.handle(payload, args.user_id)
    except SearchError as exc:
        logger.error("Search failed: %s", exc)
        print(json.dumps(exc.to_payload(), indent=2))
        return 1
    finally:
        store.close()

    print(json.dumps(body, indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)
    try:
        code = run_search_job(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    sys.exit(code)


if __name__ == "__main__":
    main()
