from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Sequence

from ..config import load_known_merchants, load_vision
from ..logging import get_logger
from ..orchestrator import TranscriptionError, process_receipt, transcribe_image
from ..parser import parse_receipt_text

LOG = get_logger("cli-main")


def _add_merchant_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--known-merchants",
        help="JSON file with confirmed merchant names (default: known_merchants.json found upward from cwd)",
    )
    p.add_argument(
        "--merchant",
        action="append",
        dest="merchants",
        default=[],
        help="Confirmed merchant name (can be provided multiple times)",
    )


def _known_merchants(ns: argparse.Namespace) -> List[str]:
    if ns.known_merchants:
        names = load_known_merchants(os.getcwd(), filename=os.path.abspath(ns.known_merchants))
    else:
        names = load_known_merchants(os.getcwd())
    for extra in ns.merchants or []:
        if extra.strip() and extra.strip() not in names:
            names.append(extra.strip())
    return names


def _read_text(ns: argparse.Namespace) -> str:
    if ns.text is not None:
        return ns.text
    if ns.text_file == "-":
        return sys.stdin.read()
    with open(ns.text_file, "r", encoding="utf-8") as f:
        return f.read()


def _print_json(data: dict) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _parse(ns: argparse.Namespace) -> int:
    try:
        text = _read_text(ns)
    except OSError as exc:
        LOG.error(f"Could not read text: {exc}")
        return 2
    receipt = parse_receipt_text(text, known_merchants=_known_merchants(ns))
    _print_json(receipt.as_dict())
    return 0


def _transcribe(ns: argparse.Namespace) -> int:
    config = load_vision(os.getcwd())
    if not config.api_key:
        LOG.error("No vision API key. Set ALIBABA_CLOUD_API_KEY in the environment or .env.")
        return 2
    try:
        text = transcribe_image(ns.image, config=config)
    except TranscriptionError as exc:
        LOG.error(f"Transcription failed: {exc}")
        return 1
    print(text)
    return 0


def _scan(ns: argparse.Namespace) -> int:
    config = load_vision(os.getcwd())
    if not config.api_key:
        LOG.error("No vision API key. Set ALIBABA_CLOUD_API_KEY in the environment or .env.")
        return 2
    try:
        receipt = process_receipt(ns.image, config=config, known_merchants=_known_merchants(ns))
    except TranscriptionError as exc:
        LOG.error(f"Scan failed: {exc}")
        return 1
    _print_json(receipt.as_dict())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")

    parser = argparse.ArgumentParser(
        prog="helpy-receipts",
        description="Turn receipt OCR text into structured expense data.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse OCR text into a receipt record (JSON).")
    source = parse_cmd.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Raw OCR text")
    source.add_argument("--text-file", help="File containing raw OCR text ('-' for stdin)")
    _add_merchant_args(parse_cmd)
    parse_cmd.set_defaults(handler=_parse)

    trans_cmd = subparsers.add_parser("transcribe", help="Transcribe a receipt image via the vision OCR API.")
    trans_cmd.add_argument("--image", required=True)
    trans_cmd.set_defaults(handler=_transcribe)

    scan_cmd = subparsers.add_parser("scan", help="Transcribe a receipt image and parse it (JSON).")
    scan_cmd.add_argument("--image", required=True)
    _add_merchant_args(scan_cmd)
    scan_cmd.set_defaults(handler=_scan)

    args = parser.parse_args(provided)
    code = args.handler(args)
    LOG.debug(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
