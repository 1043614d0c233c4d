#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path

from smart_pos.core.logging import configure_logging
from smart_pos.demo import run_default_scenario
from smart_pos.invoice.sinks import LocalDocumentSink


def main() -> None:
    parser = argparse.ArgumentParser(description="Ring up the demo counter sale and save its invoice")
    parser.add_argument("--out-dir", default=None, help="Directory for the invoice PDF (default: settings.documents_dir)")
    args = parser.parse_args()

    configure_logging()
    sink = LocalDocumentSink(Path(args.out_dir)) if args.out_dir else None
    data = run_default_scenario(sink=sink)
    print(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
