"""
Code wrapper generator for ad hoc automation scripts.

Turns caller-supplied Playwright code into a self-contained module. A script
that already imports what it needs and starts its own event loop is left
alone; bare statements are placed inside an ``async def main()`` whose
failure handler prints the error with a suggestion and exits non-zero.
"""

import ast
import io
import os
import re
import tokenize
from typing import List, Sequence, Set, Tuple

from browser_runner.infrastructure.logging.logging_config import get_logger


logger = get_logger(__name__)

_IMPORT_RE = re.compile(r"^\s*(?:import\s+[\w.]+|from\s+[\w.]+\s+import\s+)", re.MULTILINE)
_ENTRY_RE = re.compile(r"\basyncio\.run\s*\(")
_LEADING_WS_RE = re.compile(r"[ \t]*")

BODY_INDENT = " " * 8

# f-strings (3.12+) and t-strings (3.14+) tokenize as start/middle/end.
_STRING_STARTS = {getattr(tokenize, name) for name in ("FSTRING_START", "TSTRING_START") if hasattr(tokenize, name)}
_STRING_ENDS = {getattr(tokenize, name) for name in ("FSTRING_END", "TSTRING_END") if hasattr(tokenize, name)}

_ENTRY_HEADER = '''import asyncio
import sys
import traceback
'''

_TOOLKIT_IMPORTS = '''
from playwright.async_api import async_playwright, expect

from browser_runner import helpers
'''

_ENTRY_TEMPLATE = '''
from browser_runner.domain.services import describe_failure


async def main():
    try:
{body}
    except Exception as error:
        print(f"Automation error: {{describe_failure(str(error))}}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)
{cleanup}

asyncio.run(main())
'''

_TOOLKIT_CLEANUP = '''    finally:
        await helpers.shutdown()
'''


def has_imports(code: str) -> bool:
    """
    Check whether the code performs its own module imports.

    Examples:
        >>> has_imports("from playwright.async_api import async_playwright")
        True
        >>> has_imports("await page.goto('http://localhost:3000')")
        False
    """
    return _IMPORT_RE.search(code) is not None


def has_entry_wrapper(code: str) -> bool:
    """
    Check whether the code starts its own event loop.

    Examples:
        >>> has_entry_wrapper("asyncio.run(main())")
        True
        >>> has_entry_wrapper("print(1)")
        False
    """
    return _ENTRY_RE.search(code) is not None


def _string_continuation_rows(code: str) -> Set[int]:
    """1-based rows that begin inside a multi-line string literal."""
    rows: Set[int] = set()
    open_rows: List[int] = []
    for token in tokenize.generate_tokens(io.StringIO(code).readline):
        if token.type in _STRING_STARTS:
            open_rows.append(token.start[0])
            continue
        if token.type in _STRING_ENDS:
            start_row = open_rows.pop()
        elif token.type == tokenize.STRING:
            start_row = token.start[0]
        else:
            continue
        rows.update(range(start_row + 1, token.end[0] + 1))
    return rows


def indent_statements(code: str, prefix: str = BODY_INDENT) -> str:
    """
    Re-indent statements under ``prefix`` without touching string contents.

    The common leading whitespace of code lines is replaced by ``prefix``;
    lines that continue a multi-line string literal are kept as written so
    the literal's value does not change. Source with no statements becomes
    ``pass``.
    """
    text = code.strip("\n")
    try:
        protected = _string_continuation_rows(text)
    except (tokenize.TokenError, SyntaxError) as e:
        # The unit will fail on the same error when it runs.
        logger.debug("Source could not be tokenized, indenting every line", error=str(e))
        protected = set()

    lines = text.split("\n")
    code_rows = [row for row, line in enumerate(lines, 1) if row not in protected and line.strip()]
    margin = os.path.commonprefix([_LEADING_WS_RE.match(lines[row - 1]).group() for row in code_rows])

    indented = []
    for row, line in enumerate(lines, 1):
        if row in protected:
            indented.append(line)
        elif line.strip():
            indented.append(prefix + line[len(margin):])
        else:
            indented.append("")

    if all(lines[row - 1].lstrip().startswith("#") for row in code_rows):
        indented.append(prefix + "pass")
    return "\n".join(indented)


def split_module_imports(code: str) -> Tuple[List[str], str]:
    """
    Separate top-level import statements from the rest of the code.

    Only imports that sit on lines of their own are taken; anything sharing a
    line with another statement, or nested under a block, stays in place.
    Source that does not parse is returned whole.

    Returns:
        (import statements in source order, remaining code)
    """
    try:
        tree = ast.parse(code)
    except SyntaxError:
        return [], code

    lines = code.split("\n")
    statement_rows = [range(node.lineno, node.end_lineno + 1) for node in tree.body]
    lifted_rows: Set[int] = set()
    imports: List[str] = []
    for node, rows in zip(tree.body, statement_rows):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        shares_line = any(
            other is not rows and set(other) & set(rows) for other in statement_rows
        )
        if shares_line:
            continue
        imports.append("\n".join(lines[row - 1] for row in rows))
        lifted_rows.update(rows)

    remaining = "\n".join(line for row, line in enumerate(lines, 1) if row not in lifted_rows)
    return imports, remaining


def generate_entry_wrapper(
    user_code: str,
    with_toolkit_imports: bool = True,
    module_imports: Sequence[str] = (),
) -> str:
    """
    Generate an async entry point around bare automation statements.

    The wrapper:
    1. Imports asyncio, sys and traceback, after any ``__future__`` imports
    2. Optionally imports the Playwright async API and the helper library
    3. Keeps the caller's module-level imports at module level
    4. Runs the statements inside ``async def main()``
    5. On any exception prints the message, a suggestion and the traceback,
       then exits with status 1
    6. With the toolkit imports, stops the shared Playwright driver on exit

    Args:
        user_code: Statements to run
        with_toolkit_imports: Whether to add the toolkit and helper imports
        module_imports: Caller import statements to place at module level

    Returns:
        Complete module source
    """
    future = [stmt for stmt in module_imports if stmt.lstrip().startswith("from __future__")]
    others = [stmt for stmt in module_imports if stmt not in future]

    header = "".join(stmt + "\n" for stmt in future) + _ENTRY_HEADER
    if with_toolkit_imports:
        header += _TOOLKIT_IMPORTS
    if others:
        header += "\n" + "".join(stmt + "\n" for stmt in others)

    return header + _ENTRY_TEMPLATE.format(
        body=indent_statements(user_code),
        cleanup=_TOOLKIT_CLEANUP if with_toolkit_imports else "",
    )


def wrap_if_needed(code: str) -> str:
    """
    Normalize automation source into a runnable module.

    Four cases:
    - imports and entry wrapper present: returned unchanged
    - neither present: full template with toolkit imports
    - imports but no entry wrapper: entry point only, caller imports kept
      at module level
    - entry wrapper but no imports: returned unchanged

    Args:
        code: Raw automation source

    Returns:
        Normalized source
    """
    imports = has_imports(code)
    entry = has_entry_wrapper(code)

    if entry:
        if not imports:
            logger.debug("Entry wrapper without imports, passing source through")
        return code

    if not imports:
        logger.debug("Wrapping bare statements with toolkit imports and entry point")
        return generate_entry_wrapper(code, with_toolkit_imports=True)

    module_imports, statements = split_module_imports(code)
    logger.debug("Wrapping script with entry point", lifted_imports=len(module_imports))
    return generate_entry_wrapper(statements, with_toolkit_imports=False, module_imports=module_imports)
