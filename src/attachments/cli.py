"""CLI entry-point for the case attachment engine.

Usage examples
--------------
# Attach a batch of requests (JSON list or JSONL) to a case:
python -m src.attachments --case-id case-42 --input data/requests.jsonl

# Attach exactly one request through the single-item path:
python -m src.attachments --case-id case-42 --input alert.json --single

# Use another store file than the one in config/attachments.yaml:
python -m src.attachments --case-id case-42 --input req.json --store /tmp/att.jsonl
"""

from __future__ import annotations

import argparse
import logging
import sys

from src.attachments.loader import load_requests
from src.attachments.orchestrator import BatchOrchestrator
from src.attachments.store import JsonlAttachmentStore
from src.contracts.errors import AttachmentError, MalformedRequest
from src.shared.config_loader import DEFAULT_CONFIG_PATH, load_settings
from src.shared.logger import setup_logging

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="attachments",
        description="Attach comments and alerts to a case without duplicating alerts",
    )
    p.add_argument("--case-id", required=True, help="Case to attach to.")
    p.add_argument(
        "--input",
        required=True,
        help="Requests file (JSON object/list or JSONL). Format auto-detected by extension.",
    )
    p.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Settings file. Default: {DEFAULT_CONFIG_PATH}",
    )
    p.add_argument(
        "--store",
        default=None,
        help="Attachment store (JSONL). Overrides store.path from the config.",
    )
    p.add_argument(
        "--single",
        action="store_true",
        default=False,
        help="Use the single-item path; the input must hold exactly one request.",
    )
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: logging.level from the config",
    )
    p.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or "INFO", log_file=args.log_file)

    try:
        settings = load_settings(args.config)
        if args.log_level is None:
            setup_logging(settings.log_level, log_file=args.log_file)

        store = JsonlAttachmentStore(args.store or settings.store_path)
        orchestrator = BatchOrchestrator(
            case_id=args.case_id,
            index=store,
            persistence=store,
            user=settings.user,
            refresh=settings.refresh,
            reference_name=settings.reference_name,
            reference_type=settings.reference_type,
        )

        requests = load_requests(args.input)
        if args.single:
            if len(requests) != 1:
                raise MalformedRequest(
                    f"--single expects exactly one request, got {len(requests)}"
                )
            record = orchestrator.create(requests[0])
            created = [record] if record is not None else []
        else:
            created = orchestrator.bulk_create(requests).attachments
    except (AttachmentError, OSError) as exc:
        log.error("Attach failed for case %s: %s", args.case_id, exc)
        return 1

    if created:
        print(f"created {len(created)} attachment(s) on case {args.case_id}")
        for record in created:
            print(f"  {record.id}  {record.type.value}")
    else:
        print(f"nothing to attach on case {args.case_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
