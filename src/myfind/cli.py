from __future__ import annotations

import argparse
import contextlib
import sys
from collections.abc import Sequence

from .core import Debug, ignore_error, report_error, search
from .filters import FilterCriteria, parse_types, resolve_user
from .report import Reporter

# Flags whose value may itself start with a dash, e.g. -name "-*".
_VALUE_FLAGS = ("-type", "-user", "-name", "-path")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="myfind",
        description="Walk a directory tree and print every entry that passes all given tests.",
        allow_abbrev=False,
    )
    p.add_argument("path", nargs="?", default=".", help="Starting point (default: .)")

    p.add_argument("-print", action="store_true", help="Print the path of each match (default)")
    p.add_argument(
        "-print0",
        action="store_true",
        help="Separate output with NUL instead of newline",
    )
    p.add_argument("-ls", dest="ls", action="store_true", help="List matches in `ls -dils` format")

    p.add_argument(
        "-type",
        dest="type",
        metavar="CHARS",
        help="Entry types to match, any of b,c,d,p,f,l,s (e.g. fd)",
    )

    owner_group = p.add_mutually_exclusive_group()
    owner_group.add_argument("-user", dest="user", metavar="NAME|UID", help="Match entries owned by user")
    owner_group.add_argument(
        "-nouser",
        action="store_true",
        help="Match entries whose owner id has no user",
    )

    p.add_argument("-name", dest="name", metavar="PATTERN", help="Glob pattern to match base names")
    p.add_argument("-path", dest="path_pattern", metavar="PATTERN", help="Glob pattern to match whole paths")

    p.add_argument("-q", "--quiet", action="store_true", help="Suppress error messages")
    p.add_argument(
        "-D",
        dest="debug",
        metavar="CATS",
        help="Trace to stderr: comma-separated stat, search, tree or all",
    )
    return p


def build_criteria(p: argparse.ArgumentParser, ns: argparse.Namespace) -> FilterCriteria:
    try:
        types = parse_types(ns.type) if ns.type is not None else None
        uid = resolve_user(ns.user) if ns.user is not None else None
        return FilterCriteria(
            types=types,
            uid=uid,
            nouser=ns.nouser,
            name=ns.name,
            path=ns.path_pattern,
            extended=ns.ls,
        )
    except ValueError as e:
        p.error(str(e))


def attach_values(argv: Sequence[str]) -> list[str]:
    out: list[str] = []
    it = iter(argv)
    for arg in it:
        if arg in _VALUE_FLAGS:
            value = next(it, None)
            out.append(arg if value is None else f"{arg}={value}")
        else:
            out.append(arg)
    return out


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(attach_values(argv))

    criteria = build_criteria(p, ns)
    try:
        debug = Debug.parse(ns.debug)
    except ValueError as e:
        p.error(str(e))

    on_error = ignore_error if ns.quiet else report_error
    reporter = Reporter(sys.stdout, extended=criteria.extended, null=ns.print0)

    try:
        for entry in search(ns.path, criteria, on_error=on_error, debug=debug):
            reporter.report(entry)
        reporter.flush()
    except BrokenPipeError:
        with contextlib.suppress(Exception):
            sys.stdout.close()
        return 0
    except KeyboardInterrupt:
        return 130

    # Per-path errors were already reported; they do not fail the run.
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
