"""Lightweight CLI for market link localization.

Usage:
    mkts parse payload.json                      # resolve a saved markets query response
    mkts locales --config resolved.json          # table of locales and URL strategies
    mkts preview /products/a --locale fr --config resolved.json
    mkts rewrite page.html --locale fr --locale de --config resolved.json --aggressive
    mkts sync --shop example.myshopify.com       # fetch + store (token in SHOPIFY_ACCESS_TOKEN)
    mkts log-level DEBUG                         # set log level in settings.toml
"""

import argparse
import json
import logging
import os
import re
import sys
from pathlib import Path
from time import perf_counter

from settings_service import DEFAULT_SETTINGS_PATH, _load_settings, reload_settings

SETTINGS_PATH = DEFAULT_SETTINGS_PATH
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ACCESS_TOKEN_ENV = "SHOPIFY_ACCESS_TOKEN"


def _load_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_resolved_config(path: str):
    from domain.models import ResolvedConfig
    from services.link_rewriter import validate_market_config

    data = _load_json(path)
    if not validate_market_config(data):
        raise ValueError(f"{path} is not a resolved market config")
    return ResolvedConfig.from_dict(data)


def _rewrite_options(args: argparse.Namespace):
    from domain.enums import ConversionMode
    from domain.models import RewriteOptions

    return RewriteOptions(
        strategy=ConversionMode.AGGRESSIVE if args.aggressive else ConversionMode.CONSERVATIVE,
        preserve_query_params=not args.drop_query,
        preserve_anchors=not args.drop_anchors,
    )


def cmd_parse(args: argparse.Namespace) -> int:
    """Resolve a saved markets query response into a config JSON."""
    from services.market_config_parser import parse_markets_config

    payload = _load_json(args.payload)
    data = payload.get("data", payload)
    config = parse_markets_config(data)
    if config is None:
        print("no usable market configuration in payload")
        return 1

    output = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"wrote {len(config.canonical_mapping)} locales to {args.output}")
    else:
        print(output)
    return 0


def cmd_locales(args: argparse.Namespace) -> int:
    from services.language_display import get_language_urls_for_display

    config = _load_resolved_config(args.config)
    df = get_language_urls_for_display(config)
    if df.empty:
        print("no locales")
        return 0
    print(df.to_string(index=False))
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    from services.link_rewriter import get_url_preview

    config = _load_resolved_config(args.config)
    preview = get_url_preview(args.url, args.locale, config, _rewrite_options(args))
    print(json.dumps(preview, indent=2, ensure_ascii=False))
    return 0


def cmd_rewrite(args: argparse.Namespace) -> int:
    """Rewrite the links of an HTML file for one or more locales."""
    from services.link_rewriter import batch_convert_links

    config = _load_resolved_config(args.config)
    html = Path(args.html).read_text(encoding="utf-8")
    results = batch_convert_links(html, args.locale, config, _rewrite_options(args))

    if args.output_dir:
        out_dir = Path(args.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        stem = Path(args.html).stem
        for locale, content in results.items():
            target = out_dir / f"{stem}.{locale}.html"
            target.write_text(content or "", encoding="utf-8")
            print(f"{locale}: {target}")
        return 0

    for locale, content in results.items():
        print(f"--- {locale} ---")
        print(content)
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Fetch the shop's markets config and store it if it changed."""
    if not args.verbose:
        logging.disable(logging.INFO)

    token = os.environ.get(ACCESS_TOKEN_ENV)
    if not token:
        print(f"missing access token: set {ACCESS_TOKEN_ENV}")
        return 1

    from services.market_sync_service import get_market_sync_service

    service = get_market_sync_service(args.shop, token)
    shop_id = args.shop_id or args.shop

    print(f"syncing {shop_id} …", end=" ", flush=True)
    t0 = perf_counter()
    config = service.sync_market_config(shop_id)
    elapsed = round((perf_counter() - t0) * 1000)
    if config is None:
        print(f"failed ({elapsed} ms)")
        return 1
    print(f"ok ({elapsed} ms) version {config.fingerprint}, {len(config.canonical_mapping)} locales")
    return 0


def cmd_log_level(args: argparse.Namespace) -> int:
    """Get or set the log level in settings.toml."""
    settings = _load_settings(SETTINGS_PATH)
    current = settings["env"]["log_level"]

    if args.level is None:
        print(current)
        return 0

    level = args.level.upper()
    if level not in VALID_LOG_LEVELS:
        print(f"invalid level: {args.level} (expected one of {', '.join(VALID_LOG_LEVELS)})")
        return 1

    if level == current:
        print(f"already {level}")
        return 0

    content = Path(SETTINGS_PATH).read_text()
    updated = re.sub(
        r'(log_level\s*=\s*)"[^"]*"',
        rf'\1"{level}"',
        content,
    )
    Path(SETTINGS_PATH).write_text(updated)
    reload_settings()
    print(f"{current} → {level}")
    return 0


def _add_rewrite_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", required=True, help="Resolved config JSON (output of `mkts parse`)")
    parser.add_argument("--aggressive", action="store_true", help="Also rewrite absolute internal URLs")
    parser.add_argument("--drop-query", action="store_true", help="Drop query strings from rewritten absolute URLs")
    parser.add_argument("--drop-anchors", action="store_true", help="Drop fragments from rewritten absolute URLs")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mkts", description="Market link localization tools")
    sub = parser.add_subparsers(dest="command")

    parse_parser = sub.add_parser("parse", help="Resolve a saved markets query response")
    parse_parser.add_argument("payload", help="JSON file with the markets query response")
    parse_parser.add_argument("-o", "--output", help="Write the resolved config here instead of stdout")

    locales_parser = sub.add_parser("locales", help="List locales and their URL strategies")
    locales_parser.add_argument("--config", required=True, help="Resolved config JSON")

    preview_parser = sub.add_parser("preview", help="Preview the localized form of one URL")
    preview_parser.add_argument("url", help="URL or path to localize")
    preview_parser.add_argument("--locale", required=True, help="Target locale")
    _add_rewrite_flags(preview_parser)

    rewrite_parser = sub.add_parser("rewrite", help="Rewrite the links of an HTML file")
    rewrite_parser.add_argument("html", help="HTML file to rewrite")
    rewrite_parser.add_argument("--locale", action="append", required=True, help="Target locale (repeatable)")
    rewrite_parser.add_argument("--output-dir", help="Write one file per locale here")
    _add_rewrite_flags(rewrite_parser)

    sync_parser = sub.add_parser("sync", help="Fetch and store a shop's markets config")
    sync_parser.add_argument("--shop", required=True, help="myshopify domain")
    sync_parser.add_argument("--shop-id", help="Key to store the config under (defaults to --shop)")
    sync_parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed sync logs")

    ll_parser = sub.add_parser("log-level", help="Get or set the log level in settings.toml")
    ll_parser.add_argument("level", nargs="?", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    return parser


COMMANDS = {
    "parse": cmd_parse,
    "locales": cmd_locales,
    "preview": cmd_preview,
    "rewrite": cmd_rewrite,
    "sync": cmd_sync,
    "log-level": cmd_log_level,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
