"""Resolve a single YouTube URL from the command line and print the result."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from stream_resolver.config import init_logging, settings
from stream_resolver.errors import MalformedInput
from stream_resolver.resolver import Resolver
from stream_resolver.schemas import Outcome

EXIT_OK = 0
EXIT_UNAVAILABLE = 1
EXIT_MALFORMED = 2


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve a YouTube URL into direct stream links.")
    parser.add_argument("url", help="YouTube video URL")
    parser.add_argument(
        "--max-candidates",
        type=int,
        default=settings.max_candidates,
        help=f"Instances to try per provider family (default: {settings.max_candidates})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.provider_timeout,
        help=f"Per-instance timeout in seconds (default: {settings.provider_timeout})",
    )
    parser.add_argument(
        "--no-remote-directory",
        action="store_true",
        help="Only use the curated instance lists.",
    )
    args = parser.parse_args(argv)

    init_logging()
    run_settings = replace(
        settings,
        max_candidates=args.max_candidates,
        provider_timeout=args.timeout,
        directory_remote_enabled=settings.directory_remote_enabled and not args.no_remote_directory,
        cache_enabled=False,
    )

    try:
        result = Resolver(run_settings).resolve(args.url)
    except MalformedInput as exc:
        logging.error("%s", exc)
        return EXIT_MALFORMED

    print(json.dumps(result.to_payload(), indent=2))
    if result.outcome is Outcome.UNAVAILABLE:
        return EXIT_UNAVAILABLE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
