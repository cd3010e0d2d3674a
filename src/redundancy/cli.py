from __future__ import annotations

import argparse
import json
from pathlib import Path

from redundancy.config import load_dotenv, load_effective_settings, load_pages
from redundancy.constants import DEFAULT_CONFIG_PATH, EXPORT_PAIR_LIMIT
from redundancy.delivery.report import build_export_payload, exit_code, render_report, result_to_dict
from redundancy.engine import compute_redundancy
from redundancy.logging_utils import setup_logging


def _load_inputs(args: argparse.Namespace):
    settings = load_effective_settings(args.config, args.config_overlay)
    if getattr(args, "threshold", None) is not None:
        if not (0 <= args.threshold <= 1):
            raise ValueError("--threshold must be between 0 and 1")
        settings.similarity_threshold = args.threshold
    if getattr(args, "top", None) is not None and args.top < 1:
        raise ValueError("--top must be >= 1")
    if getattr(args, "workers", None):
        settings.workers = max(1, args.workers)
    pages = load_pages(args.pages)
    return settings, pages


def _cmd_check(args: argparse.Namespace) -> int:
    try:
        settings, pages = _load_inputs(args)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}")
        return 2
    result = compute_redundancy(pages, settings, find_paragraphs=True)
    if args.json:
        print(json.dumps(result_to_dict(result), ensure_ascii=True, indent=2))
    else:
        for line in render_report(result, total_pages=len(pages), top=args.top):
            print(line)
    return exit_code(result)


def _cmd_export(args: argparse.Namespace) -> int:
    try:
        settings, pages = _load_inputs(args)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}")
        return 2
    result = compute_redundancy(pages, settings)
    payload = build_export_payload(pages, result, pair_limit=args.pair_limit)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")
    tmp.replace(out)
    print(f"redundancy: {len(result.pairs)} similar pairs found")
    print(f"pages: {len(pages)} pages ({len(result.page_redundancy)} eligible) -> {out}")
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv(".env")
    setup_logging()
    parser = argparse.ArgumentParser(prog="redundancy")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--config-overlay", default="")

    sub = parser.add_subparsers(dest="command", required=True)
    check = sub.add_parser("check", help="Report near-duplicate pages")
    check.add_argument("--pages", required=True, help="YAML or JSON file with page records")
    check.add_argument("--threshold", type=float, default=None, help="Minimum similarity to report (0-1)")
    check.add_argument("--top", type=int, default=None, help="Only show the top N pairs")
    check.add_argument("--workers", type=int, default=None)
    check.add_argument("--json", action="store_true", help="Output JSON instead of text")
    check.set_defaults(func=_cmd_check)

    export = sub.add_parser("export", help="Write per-page redundancy data for the site build")
    export.add_argument("--pages", required=True, help="YAML or JSON file with page records")
    export.add_argument("--out", required=True)
    export.add_argument("--pair-limit", type=int, default=EXPORT_PAIR_LIMIT)
    export.add_argument("--workers", type=int, default=None)
    export.set_defaults(func=_cmd_export)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
