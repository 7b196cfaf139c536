"""Interactive shell and script runner for csvdb databases."""

from __future__ import annotations

import argparse
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path

from csvdb.config import CsvDbConfig
from csvdb.db import Db
from csvdb.display import format_table
from csvdb.errors import CsvDbError
from csvdb.executor import CommandExecutor, ErrorResult, QueryResult
from csvdb.parsing import CommandParser


def _split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside string literals."""
    statements = []
    current = []
    in_string = False
    escape_next = False

    for ch in content:
        if escape_next:
            current.append(ch)
            escape_next = False
            continue

        if ch == "\\" and in_string:
            current.append(ch)
            escape_next = True
            continue

        if ch == '"':
            in_string = not in_string
            current.append(ch)
            continue

        if ch == ";" and not in_string:
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            current.append(ch)

    # Handle any remaining content
    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

    return statements


def _strip_comments(content: str) -> str:
    """Drop lines starting with ``--``."""
    return "\n".join(line for line in content.split("\n") if not line.strip().startswith("--"))


def has_balanced_brackets(line: str) -> bool:
    """Check that parentheses and braces outside strings are balanced."""
    count = 0
    in_string = False
    escape = False
    for char in line:
        if escape:
            escape = False
            continue
        if char == "\\":
            escape = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char in "({":
            count += 1
        elif char in ")}":
            count -= 1
    return count <= 0 and not in_string


def print_result(result: QueryResult) -> None:
    """Print a command result: an error, a message, or a table of rows."""
    if isinstance(result, ErrorResult):
        print(f"Error: {result.message}")
        return

    if result.message:
        print(result.message)
        if not result.rows:
            return

    if not result.columns:
        return

    if not result.rows:
        print("(no results)")
        return

    print(format_table(result.columns, result.rows), end="")
    print(f"\n({len(result.rows)} row{'s' if len(result.rows) != 1 else ''})")


def open_database(name: str, base_dir: Path) -> tuple[Db, bool]:
    """Load a database, or create it if its directory does not exist.

    Returns:
        The database and whether it is new.
    """
    if (base_dir / name).is_dir():
        return Db.load(name, base_dir), False
    return Db.create(name, base_dir), True


def print_help() -> None:
    """Print the command reference."""
    print("""
Commands:
  show tables                                  List tables
  describe <table>                             List the columns of a table
  create table <t> [(<col>, ...)]              Create a table
  create or replace table <t> [(<col>, ...)]   Create or empty a table
  drop table <t>                               Drop a table and its file
  alter table <t> add column <c> [at <n>]      Add a column
  alter table <t> rename column <a> to <b>     Rename a column
  alter table <t> drop column <c>              Drop a column
  insert into <t> [at <n>] values (<v>, ...)   Insert a row; {<v>, ...} stores a join
  upsert into <t> values (...) where <cond>    Update the first match or insert
  select * | <c>, ... from <t> [where <cond>]  Query rows
  delete from <t> [where <cond>]               Delete matching rows
  delete row <n> from <t>                      Delete a row by index
  update <t> set <c> = <v> at <n>              Overwrite one cell
  save                                         Write changed tables to disk

Conditions: <col> = <value> [and <col> = <value> ...]
Shell commands: help, clear, exit (saves), quit (saves)
""")


def run_repl(db: Db) -> int:
    """Run the interactive shell on an open database."""
    print("csvdb shell")
    print(f"Database: {db.name} ({db.path})")
    print("Type 'help' for commands, 'exit' to quit.\n")

    parser = CommandParser()
    executor = CommandExecutor(db)

    # Command history
    history_file = Path.home() / ".csvdb_history"
    try:
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass

    try:
        while True:
            try:
                line = input("csvdb> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            if line.lower() in ("exit", "quit"):
                break
            elif line.lower() == "help":
                print_help()
                continue
            elif line.lower() == "clear":
                print("\033[2J\033[H", end="")
                continue

            # Multi-line commands continue until brackets are closed
            while not has_balanced_brackets(line):
                try:
                    continuation = input("...> ").strip()
                except EOFError:
                    break
                if not continuation:
                    break
                line += " " + continuation

            for statement in _split_statements(line):
                try:
                    print_result(executor.execute(parser.parse(statement)))
                except SyntaxError as e:
                    print(f"Syntax error: {e}")
                except OSError as e:
                    print(f"Error: {e}")
            print()

    finally:
        try:
            readline.set_history_length(1000)
            readline.write_history_file(history_file)
        except OSError:
            pass

    try:
        db.save()
    except OSError as e:
        print(f"Error saving database: {e}", file=sys.stderr)
        return 1
    return 0


def run_statements(db: Db, content: str, verbose: bool = False) -> int:
    """Execute ``;`` separated commands, stopping at the first failure.

    The database is saved if every command succeeds.

    Returns:
        0 on success, 1 on error
    """
    statements = _split_statements(_strip_comments(content))
    if not statements:
        print("No commands found", file=sys.stderr)
        return 1

    parser = CommandParser()
    executor = CommandExecutor(db)
    for statement in statements:
        if verbose:
            for i, line in enumerate(statement.split("\n")):
                prefix = ">>> " if i == 0 else "... "
                print(f"{prefix}{line}")
        try:
            result = executor.execute(parser.parse(statement))
        except SyntaxError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            return 1
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print_result(result)
        if isinstance(result, ErrorResult):
            return 1

    try:
        db.save()
    except OSError as e:
        print(f"Error saving database: {e}", file=sys.stderr)
        return 1
    return 0


def run_file(file_path: Path, db: Db, verbose: bool = False) -> int:
    """Execute commands from a file.

    Args:
        file_path: Path to the file containing commands
        db: Database to run the commands against
        verbose: If True, print each command before executing

    Returns:
        0 on success, 1 on error
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1
    return run_statements(db, content, verbose)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    config = CsvDbConfig.from_env()

    arg_parser = argparse.ArgumentParser(
        description="Shell for csvdb, a database of typed CSV tables"
    )
    arg_parser.add_argument(
        "name",
        type=str,
        help="Name of the database (a directory below --dir)",
    )
    arg_parser.add_argument(
        "-d", "--dir",
        type=Path,
        default=config.base_dir,
        help=f"Directory holding the databases (default: {config.base_dir})",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute commands and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute commands from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each command before executing (for -f/--file)",
    )

    args = arg_parser.parse_args(argv)

    if args.file and not args.file.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        db, is_new = open_database(args.name, args.dir.expanduser())
    except (CsvDbError, OSError) as e:
        print(f"Error loading database: {e}", file=sys.stderr)
        return 1
    if is_new and (args.verbose or not (args.file or args.command)):
        print(f"Created new database: {db.path}")

    if args.file:
        return run_file(args.file, db, args.verbose)
    if args.command:
        return run_statements(db, args.command, args.verbose)
    return run_repl(db)


if __name__ == "__main__":
    sys.exit(main())
