"""
Resolve Source Command

Picks the automation source from the command line or standard input.
"""

import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from browser_runner.domain.value_objects import ResolvedSource, SourceOrigin
from browser_runner.errors import InputError


USAGE = """No code to execute
Usage:
  browser-run script.py          # Execute file
  browser-run "code here"        # Execute inline
  cat script.py | browser-run    # Execute from stdin"""


def _existing_file(candidate: str) -> Optional[Path]:
    try:
        path = Path(candidate)
        if path.is_file():
            return path.resolve()
    except (OSError, ValueError):
        # Inline code can be too long or contain characters no path may hold.
        pass
    return None


def resolve_source(args: Sequence[str], stdin: Optional[TextIO] = None) -> ResolvedSource:
    """
    Resolve automation source, first match wins.

    1. The first argument names an existing file: read it.
    2. Arguments were given: join them with spaces as inline code.
    3. No arguments and stdin is not a terminal: read all of stdin.
    4. Otherwise fail with the usage text.

    Args:
        args: Positional command-line arguments
        stdin: Standard input stream, or None when there is none

    Returns:
        ResolvedSource with the text and its origin

    Raises:
        InputError: If no usable source could be resolved
    """
    if args:
        path = _existing_file(args[0])
        if path is not None:
            print(f"Executing file: {path}", file=sys.stderr)
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise InputError(f"Failed to read script file: {path}", detail=str(e)) from e
            source = ResolvedSource(origin=SourceOrigin.FILE, text=text, path=path)
        else:
            print("Executing inline code", file=sys.stderr)
            source = ResolvedSource(origin=SourceOrigin.INLINE, text=" ".join(args))
    elif stdin is not None and not stdin.isatty():
        print("Reading from stdin", file=sys.stderr)
        source = ResolvedSource(origin=SourceOrigin.STDIN, text=stdin.read())
    else:
        raise InputError(USAGE)

    if not source.text.strip():
        raise InputError(f"Empty {source.origin.value} source", detail=USAGE)
    return source
