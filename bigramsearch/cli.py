"""
Console entry point: interactive prompt and one-shot commands.
"""

import argparse
import logging
import re
import sys
from typing import Optional, TextIO

from . import __version__
from .config import ConfigManager
from .constants import setup_logging
from .core.errors import IndexBuildError
from .core.index_manager import IndexManager
from .utils import format_size

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}


class Prompt:
    """Line reader over one input stream, owned by whoever opened it."""

    def __init__(self, stdin: TextIO, stdout: TextIO):
        self.stdin = stdin
        self.stdout = stdout
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self.closed = True

    def ask(self, question: str) -> Optional[str]:
        """Return one line without its newline, None at end of input."""
        if self.closed:
            raise ValueError("prompt is closed")
        self.stdout.write(question)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")


def run_shell(manager: IndexManager, config_mgr: ConfigManager, prompt: Prompt, out: TextIO) -> int:
    index = manager.get_index()
    while True:
        query = prompt.ask("?: ")
        if query is None or query.strip() in EXIT_COMMANDS:
            break
        if not query:
            continue
        print(f'Searching "{query}" ...', file=out)
        outcome = manager.search_with_stats(query)
        print(
            f"{outcome.candidate_count} candidates found in index of {index.number_of_files} files.",
            file=out,
        )
        print(f"{len(outcome.results)} results found.", file=out)
        for path in outcome.results:
            print(path, file=out)
        config_mgr.add_history(query)
    return 0


def cmd_search(manager: IndexManager, args, out: TextIO) -> int:
    for query in args.query:
        for path in manager.search(query):
            print(path, file=out)
    return 0


def cmd_build(manager: IndexManager, args, out: TextIO) -> int:
    manager.rebuild()
    report = manager.last_build_report
    print(f"Indexed {report.files_indexed} files in {report.elapsed:.2f}s", file=out)
    print(f"Total index entries: {report.code_entries} -> {report.entries}", file=out)
    for path, reason in report.skipped:
        print(f"skipped: {path} ({reason})", file=out)
    return 0


def cmd_count(manager: IndexManager, args, out: TextIO) -> int:
    print(f"Number of files: {manager.count_files()}", file=out)
    return 0


def cmd_stats(manager: IndexManager, args, out: TextIO) -> int:
    stats = manager.stats()
    print(f"Root:          {stats['root']}", file=out)
    print(f"Index file:    {stats['index_file']} ({format_size(stats['index_size'])})", file=out)
    print(f"Files:         {stats['files']}", file=out)
    print(f"Bigram keys:   {stats['code_entries']}", file=out)
    print(f"Entries:       {stats['entries']}", file=out)
    print(f"Memory (RSS):  {format_size(stats['memory_rss'])}", file=out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bigramsearch",
        description="Substring search over a directory tree using a bigram index",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--root", help="directory to index")
    parser.add_argument("--include", help="regex a file path must match to be indexed")
    parser.add_argument("--exclude", help="regex that excludes a file or directory path")
    parser.add_argument("--index", dest="index_file", help="index file location")
    parser.add_argument("--config-dir", help="directory holding config.json, app.log and the index")
    parser.add_argument("--follow-symlinks", action="store_true", default=None, help="descend into symlinked directories")
    parser.add_argument("--save-config", action="store_true", help="persist the options given on the command line")
    parser.add_argument("--progress", action="store_true", help="show a progress bar while walking the tree")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("shell", help="interactive prompt (default)")
    p_search = sub.add_parser("search", help="run queries and print matching paths")
    p_search.add_argument("query", nargs="+")
    sub.add_parser("build", help="rebuild the index")
    sub.add_parser("count", help="count files that would be indexed")
    sub.add_parser("stats", help="show index statistics")
    return parser


COMMANDS = {
    "search": cmd_search,
    "build": cmd_build,
    "count": cmd_count,
    "stats": cmd_stats,
}


def main(argv=None, stdin: TextIO = None, stdout: TextIO = None) -> int:
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    out = stdout or sys.stdout

    config_mgr = ConfigManager(args.config_dir)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, config_mgr.config_dir)

    config_mgr.update(
        root_path=args.root,
        include_pattern=args.include,
        exclude_pattern=args.exclude,
        index_file=args.index_file,
        follow_symlinks=args.follow_symlinks,
    )
    try:
        config_mgr.get_include_filter()
        config_mgr.get_exclude_filter()
    except re.error as e:
        print(f"Invalid filter pattern: {e}", file=sys.stderr)
        return 2
    if args.save_config:
        config_mgr.commit_overrides()

    manager = IndexManager(config_mgr, progress=args.progress)
    try:
        if args.command in COMMANDS:
            return COMMANDS[args.command](manager, args, out)
        with Prompt(stdin, out) as prompt:
            return run_shell(manager, config_mgr, prompt, out)
    except IndexBuildError as e:
        logger.error(f"Index could not be loaded or rebuilt: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("", file=out)
        return 130
