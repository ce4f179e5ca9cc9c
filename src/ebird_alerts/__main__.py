from __future__ import annotations

import argparse
import json
import sys

from ebird_alerts.bootstrap import bootstrap
from ebird_alerts.modules.ingestion.service import run_ingestion
from ebird_alerts.modules.mailbox.sources import get_mail_source


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ebird_alerts", description="Ingest unread eBird alert digests once."
    )
    parser.add_argument("--max-workers", type=int, default=None)
    args = parser.parse_args(argv)

    bootstrap()
    with get_mail_source() as mail:
        summary = run_ingestion(mail, max_workers=args.max_workers)
    print(json.dumps(summary.as_dict(), indent=2, default=str))
    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
