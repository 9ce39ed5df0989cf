"""CLI entrypoints for devtoc commands."""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from pathlib import Path

from .article import ArticleError
from .batch import TocStatus, resolve_files, update_files
from .config import ConfigError, DevTocConfig, load_config
from .links import LinkChecker, LinkResult, LinkStatus
from .logging import configure_logging, get_logger
from .rename import RenameError, apply_rename, plan_rename
from .scaffold import DEFAULT_TITLE, create_article
from .toc import compose_only, slugify

_logger = get_logger("cli")

_STATUS_LINES = {
    TocStatus.UPDATED: "✓ {file}",
    TocStatus.UP_TO_DATE: "· {file} (up-to-date)",
    TocStatus.NO_MARKERS: "⚠ {file} (no TOC markers)",
    TocStatus.FAILED: "✗ {file}: {error}",
}


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--config",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Path to a .devtoc.yml file or its directory (defaults to the current directory).",
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write DEBUG logs to this file.",
    )


def _add_dry_run_option(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("-d", "--dry-run", action="store_true", help=help_text)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devtoc",
        description="Maintain tables of contents and housekeeping for dev.to markdown articles.",
    )
    _add_verbose_option(parser)
    _add_config_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    toc_parser = subparsers.add_parser(
        "toc",
        help="Update the table of contents of articles carrying TOC markers.",
    )
    _add_verbose_option(toc_parser, suppress_default=True)
    _add_config_option(toc_parser, suppress_default=True)
    _add_log_file_option(toc_parser, suppress_default=True)
    _add_dry_run_option(toc_parser, "Report which files would change without writing them.")
    toc_parser.add_argument(
        "files",
        nargs="*",
        help="Files or glob patterns (defaults to the configured files, *.md).",
    )
    toc_parser.add_argument(
        "--max-level",
        type=int,
        default=None,
        help="Deepest heading level listed in the TOC (1-6).",
    )
    toc_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files processed in parallel.",
    )
    toc_parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the generated TOC of each file instead of updating it.",
    )

    new_parser = subparsers.add_parser("new", help="Create a new draft article.")
    _add_verbose_option(new_parser, suppress_default=True)
    _add_config_option(new_parser, suppress_default=True)
    _add_log_file_option(new_parser, suppress_default=True)
    new_parser.add_argument("file", help="Article file name (.md is appended when missing).")
    new_parser.add_argument("--title", default=DEFAULT_TITLE, help="Initial article title.")

    rename_parser = subparsers.add_parser(
        "rename",
        help="Rename article files based on their front matter title.",
    )
    _add_verbose_option(rename_parser, suppress_default=True)
    _add_config_option(rename_parser, suppress_default=True)
    _add_log_file_option(rename_parser, suppress_default=True)
    _add_dry_run_option(rename_parser, "Show what would be renamed without doing it.")
    rename_parser.add_argument("files", nargs="+", help="Files or glob patterns.")

    links_parser = subparsers.add_parser(
        "checklinks",
        help="Check articles for broken links and in-page anchors.",
    )
    _add_verbose_option(links_parser, suppress_default=True)
    _add_config_option(links_parser, suppress_default=True)
    _add_log_file_option(links_parser, suppress_default=True)
    links_parser.add_argument(
        "files",
        nargs="*",
        help="Files or glob patterns (defaults to the configured files, *.md).",
    )

    slug_parser = subparsers.add_parser("slug", help="Print the dev.to anchor for a heading.")
    slug_parser.add_argument("text", nargs="+", help="Heading text.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for devtoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(getattr(args, "verbose", False)),
        log_file=Path(log_file) if log_file else None,
    )

    if args.command == "slug":
        print(slugify(" ".join(args.text)))
        return

    config_path = Path(args.config) if getattr(args, "config", None) else Path.cwd()
    try:
        config = load_config(config_path, environ=os.environ)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "toc":
        exit_code = _run_toc(args, config, parser)
    elif args.command == "new":
        exit_code = _run_new(args, config, parser)
    elif args.command == "rename":
        exit_code = _run_rename(args, config, parser)
    elif args.command == "checklinks":
        exit_code = _run_checklinks(args, config, parser)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    if exit_code:
        parser.exit(exit_code)


def _run_toc(args: argparse.Namespace, config: DevTocConfig, parser: argparse.ArgumentParser) -> int:
    options = config.toc
    if args.max_level is not None:
        try:
            options = dataclasses.replace(options, max_level=args.max_level)
        except ValueError as exc:
            parser.exit(2, f"devtoc toc: {exc}\n")
    workers = args.workers if args.workers is not None else config.workers
    if workers < 1:
        parser.exit(2, "devtoc toc: --workers must be at least 1\n")

    paths = _resolve_paths(args.files, config)
    if not paths:
        print("No markdown files found")
        return 0

    if args.print_only:
        for path in paths:
            try:
                content = path.read_text(encoding="utf-8")
            except OSError as exc:
                print(f"✗ {_relativize(path)}: {exc}")
                continue
            print(f"{_relativize(path)}:")
            print(compose_only(content, options) or "(no headings)")
            print("")
        return 0

    summary = update_files(paths, options, workers=workers, dry_run=bool(args.dry_run))
    for result in summary.results:
        print(_STATUS_LINES[result.status].format(file=_relativize(result.path), error=result.error))

    print("")
    totals = (
        f"Updated: {summary.count(TocStatus.UPDATED)}"
        f" | Up-to-date: {summary.count(TocStatus.UP_TO_DATE)}"
        f" | No markers: {summary.count(TocStatus.NO_MARKERS)}"
    )
    if summary.failed:
        totals += f" | Failed: {summary.count(TocStatus.FAILED)}"
    if args.dry_run:
        totals += " (dry-run)"
    print(totals)
    return 1 if summary.failed else 0


def _run_new(args: argparse.Namespace, config: DevTocConfig, parser: argparse.ArgumentParser) -> int:
    try:
        path = create_article(
            args.file,
            title=args.title,
            organization=config.organization,
            templates_dir=config.templates_dir,
        )
    except FileExistsError as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"New article creation failed: {exc}\nRun with --verbose for more details.\n")
    print(f"Created {_relativize(path)}.")
    if config.organization:
        print(f"  Organization: {config.organization}")
    return 0


def _run_rename(args: argparse.Namespace, config: DevTocConfig, parser: argparse.ArgumentParser) -> int:
    paths = resolve_files(args.files, Path.cwd())
    if not paths:
        parser.exit(1, "No matching files found.\n")

    failed = False
    for path in paths:
        try:
            plan = plan_rename(path)
        except RenameError as exc:
            print(f"✗ {exc}")
            failed = True
            continue
        source = plan.source.name
        target = plan.target.name
        if not plan.changed:
            print(f"· {_relativize(path)} (already named correctly)")
            continue
        if args.dry_run:
            print(f"Would rename: {source}")
            print(f"         to: {target}")
            continue
        try:
            apply_rename(plan)
        except OSError as exc:
            print(f"✗ {source}: {exc}")
            failed = True
            continue
        print(f"✓ Renamed: {source}")
        print(f"       to: {target}")
    return 1 if failed else 0


def _run_checklinks(args: argparse.Namespace, config: DevTocConfig, parser: argparse.ArgumentParser) -> int:
    paths = _resolve_paths(args.files, config)
    if not paths:
        print("No markdown files found")
        return 0

    checker = LinkChecker(config.checklinks)
    files_ok = files_broken = files_skipped = 0
    total_links = total_broken = 0
    errored = False

    for path in paths:
        label = _relativize(path)
        try:
            report = checker.check_file(path)
        except (OSError, UnicodeDecodeError, ArticleError) as exc:
            print(f"✗ {label}: {exc}")
            errored = True
            continue

        if report.skipped or (not report.links and not report.broken_anchors):
            print(f"· {label} (no links or not an article)")
            files_skipped += 1
            continue

        total_links += len(report.links)
        if report.problem_count == 0:
            files_ok += 1
            plural = "s" if len(report.links) > 1 else ""
            print(f"✓ {label} ({len(report.links)} link{plural} OK)")
            continue

        files_broken += 1
        total_broken += report.problem_count
        print(f"⚠ {label} ({report.problem_count} broken)")
        for link in report.broken_links:
            print(_format_link(link))
        for anchor in report.broken_anchors:
            print(f"    ✗ #{anchor} (no matching heading)")

    print("")
    print(f"Files: {files_ok} OK | {files_broken} with broken links | {files_skipped} skipped")
    print(f"Links: {total_links} checked | {total_broken} broken")
    if total_broken:
        _logger.warning("Found %d broken link(s) in %d file(s)", total_broken, files_broken)
    return 1 if total_broken or errored else 0


def _resolve_paths(files: list[str], config: DevTocConfig) -> list[Path]:
    # Command line patterns are relative to the cwd, configured ones to the config file.
    if files:
        return resolve_files(files, Path.cwd())
    return resolve_files(config.files, config.root)


def _format_link(result: LinkResult) -> str:
    if result.status is LinkStatus.BROKEN:
        return f"    ✗ {result.url} (HTTP {result.status_code})"
    return f"    ✗ {result.url} ({result.error})"


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
