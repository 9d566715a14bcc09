"""Command line entry point: serve the API or run single ingestion steps."""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from fx_bnr import FxBnr, FxBnrError
from fx_bnr.utils.dates import parse_date
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fx-bnr", description=__doc__)
    parser.add_argument("--db", dest="db_url", help="Database URL (defaults to FX_BNR_DATABASE_URL)")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API with the scheduled tick")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.add_argument(
        "--no-scheduler",
        dest="scheduler",
        action="store_false",
        default=None,
        help="Serve requests without starting the scheduled tick",
    )

    fetch = commands.add_parser("fetch", help="Store and print every rate for a date")
    fetch.add_argument("--date", dest="rate_date", required=True, help="Feed date (YYYY-MM-DD)")

    commands.add_parser("tick", help="Run one scheduled tick now")

    configure = commands.add_parser("configure", help="Replace the currencies of interest")
    configure.add_argument("currencies", nargs="*", help="Currency codes, e.g. USD EUR")

    commands.add_parser("history", help="Print the stored observation log")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn

        from fx_bnr.api.app import create_app

        app = create_app(FxBnr(args.db_url), start_scheduler=args.scheduler)
        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    with FxBnr(args.db_url) as fx:
        try:
            if args.command == "fetch":
                try:
                    requested = parse_date(args.rate_date)
                except ValueError:
                    LOGGER.error("Invalid date %r; expected YYYY-MM-DD", args.rate_date)
                    return 2
                print(json.dumps(fx.rate(requested), indent=2))
            elif args.command == "tick":
                outcome = fx.refresh()
                if not outcome.succeeded:
                    LOGGER.error("Tick failed: %s", outcome.error)
                    return 1
                print(f"Stored {outcome.rows_written} rows; export file id {outcome.file_id}")
            elif args.command == "configure":
                codes = fx.configure(args.currencies)
                print("Configured: " + (", ".join(sorted(codes)) or "<none>"))
            elif args.command == "history":
                print(json.dumps([row.as_dict() for row in fx.history()], indent=2))
        except FxBnrError as exc:
            LOGGER.error("%s: %s", type(exc).__name__, exc)
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
