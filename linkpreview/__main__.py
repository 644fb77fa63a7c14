"""CLI entry point: python -m linkpreview URL [URL ...] [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from linkpreview.config import PreviewConfig
from linkpreview.errors import LinkPreviewError
from linkpreview.pipeline import LinkPreview


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkpreview",
        description="Render cached link preview blocks for one or more URLs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("urls", nargs="+", metavar="URL",
                        help="Page URL(s) to preview")
    parser.add_argument("--title", default=None, metavar="TEXT",
                        help="Use this title instead of fetching (single URL only)")
    parser.add_argument("--source", default=None, metavar="DIR",
                        help="Site source directory (default: .)")
    parser.add_argument("--cache-dir", default=None, metavar="DIR",
                        help="Cache directory; caching is skipped if missing (default: _cache)")
    parser.add_argument("--includes-dir", default=None, metavar="DIR",
                        help="Custom template directory inside --source (default: _includes)")
    parser.add_argument("--timeout", type=int, default=None, metavar="SECS",
                        help="Network timeout in seconds (default: 30)")
    parser.add_argument("--max-workers", type=int, default=4, metavar="N",
                        help="Concurrent fetches when several URLs are given (default: 4)")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the property records as JSON instead of HTML")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _print_banner(console: Console, config: PreviewConfig, urls: list[str]) -> None:
    console.print(
        Panel.fit(
            f"[bold cyan]linkpreview[/bold cyan]\n"
            f"URLs:       [green]{len(urls)}[/green]\n"
            f"Source:     [yellow]{config.source_dir}[/yellow]\n"
            f"Cache:      {config.cache_dir} "
            f"({'on' if config.cache_dir.is_dir() else 'off'})\n"
            f"Templates:  {config.templates_dir}\n"
            f"Timeout:    {config.timeout}s",
            border_style="cyan",
            title="[bold]Configuration[/bold]",
        ),
    )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.title is not None and len(args.urls) != 1:
        parser.error("--title needs exactly one URL")

    console = Console(stderr=True)
    logging.basicConfig(
        level=args.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        overrides = {
            "source_dir": args.source,
            "cache_dir": args.cache_dir,
            "includes_dir": args.includes_dir,
            "timeout": args.timeout,
        }
        config = PreviewConfig.from_env(
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.log_level in ("DEBUG", "INFO"):
        _print_banner(console, config, args.urls)

    previewer = LinkPreview(config)
    try:
        if args.title is not None:
            outputs = [previewer.preview_manual(args.title, args.urls[0])]
        elif args.json:
            records = [previewer.properties(url).to_dict() for url in args.urls]
            outputs = [json.dumps(records, indent=2, ensure_ascii=False)]
        else:
            outputs = previewer.preview_many(args.urls, max_workers=args.max_workers)
    except LinkPreviewError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    for output in outputs:
        sys.stdout.write(output or "")
    return 0


if __name__ == "__main__":
    sys.exit(main())
