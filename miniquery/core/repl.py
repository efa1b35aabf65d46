"""
REPL - Interactive SQL Explorer shell for MiniQuery

Lines are buffered until a statement ends with ';'. Lines starting with a
dot are shell commands (see ``REPL.HELP``); ``.ask`` runs a plain-English
question through the translator before executing it.
"""

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional

from ..config import ENGINE_CONFIG, LOG_CONFIG
from .engine import QueryEngine
from .errors import QueryError
from .executor import QueryResult

MAX_COLUMN_WIDTH = 40


class REPL:
    """SQL Explorer shell over a QueryEngine"""

    BANNER = """
+--------------------------------------------------------------+
|   MiniQuery SQL Explorer                                     |
|   Query in-memory tables with SQL or plain English           |
+--------------------------------------------------------------+
Enter SELECT statements ending with ';' or .help for commands.
"""

    HELP = """
Commands:
  .tables             Tables and their row counts
  .schema <table>     Columns of a table
  .count <table>      Row count of a table
  .use [table]        Table to use for questions (no argument clears it)
  .ask <question>     Translate a question into SQL and run it
  .export <file>      Save the last result as CSV
  .clear              Clear the screen
  .help               This message
  .quit / .exit       Leave the shell

Queries:
  SELECT [DISTINCT] cols | * | COUNT/SUM/AVG/MIN/MAX(col) [AS alias]
  FROM table [alias]
  [[INNER | LEFT] JOIN other [alias] ON table.col = other.col]
  [WHERE predicate] [GROUP BY cols] [HAVING predicate]
  [ORDER BY col [ASC|DESC], ...] [LIMIT n] [OFFSET m]

  SELECT status, COUNT(*) AS orders, SUM(total) AS revenue
  FROM orders GROUP BY status HAVING COUNT(*) > 1;

  .ask show customers who spent more than 500
"""

    PROMPT = "miniquery> "
    CONTINUATION_PROMPT = "      ...> "

    def __init__(self, engine: Optional[QueryEngine] = None):
        self.engine = engine or QueryEngine.from_config()
        self.running = False
        self.buffer: List[str] = []
        self.table_hint: Optional[str] = None
        self.last_result: Optional[QueryResult] = None
        self.commands = {
            '.tables': self._show_tables,
            '.schema': self._show_schema,
            '.count': self._show_count,
            '.use': self._use_table,
            '.ask': self._ask,
            '.export': self._export,
            '.clear': self._clear,
            '.help': self._help,
            '.quit': self._quit,
            '.exit': self._quit,
            '.q': self._quit,
        }

    def run(self) -> None:
        """Read lines until .quit or end of input"""
        self.running = True
        print(self.BANNER)

        while self.running:
            prompt = self.CONTINUATION_PROMPT if self.buffer else self.PROMPT
            try:
                self.handle_line(input(prompt))
            except KeyboardInterrupt:
                print("\n(statement discarded; .quit to leave)")
                self.buffer = []
            except EOFError:
                print()
                self._quit(None)

    def handle_line(self, line: str) -> None:
        """Dispatch a dot command or add the line to the pending statement"""
        line = line.strip()
        if not line:
            return

        if line.startswith('.') and not self.buffer:
            name, _, argument = line.partition(' ')
            handler = self.commands.get(name.lower())
            if handler is None:
                print(f"Unknown command: {name}")
                print("Type .help for available commands.")
            else:
                handler(argument.strip() or None)
            return

        self.buffer.append(line)
        if line.endswith(';'):
            statement = ' '.join(self.buffer)
            self.buffer = []
            self._run_query(statement)

    # -- commands -----------------------------------------------------------

    def _help(self, _argument: Optional[str]) -> None:
        print(self.HELP)

    def _clear(self, _argument: Optional[str]) -> None:
        os.system('cls' if os.name == 'nt' else 'clear')

    def _quit(self, _argument: Optional[str]) -> None:
        print("Goodbye!")
        self.running = False

    def _show_tables(self, _argument: Optional[str]) -> None:
        names = self.engine.tables()
        if not names:
            print("No tables loaded.")
            return
        print()
        for name in names:
            print(f"  {name} ({self.engine.count(name)} rows)")
        print()

    def _show_schema(self, table: Optional[str]) -> None:
        if table is None:
            print("Usage: .schema <table>")
            return
        try:
            schema = self.engine.describe(table)
        except QueryError as e:
            print(f"Error: {e}")
            return

        print(f"\nTable: {schema['name']} ({self.engine.count(table)} rows)")
        print("=" * 60)
        for column in schema['columns']:
            if column.get('primary'):
                constraint = 'PRIMARY KEY'
            elif not column.get('nullable'):
                constraint = 'NOT NULL'
            else:
                constraint = ''
            if column.get('default') is not None:
                constraint = f"{constraint} DEFAULT {column['default']}".strip()
            print(f"  {column['column']:<20} {column['type']:<15} {constraint}".rstrip())
        print()

    def _show_count(self, table: Optional[str]) -> None:
        if table is None:
            print("Usage: .count <table>")
            return
        try:
            print(f"{table}: {self.engine.count(table)} rows")
        except QueryError as e:
            print(f"Error: {e}")

    def _use_table(self, table: Optional[str]) -> None:
        """Set the table .ask falls back to, or clear it"""
        if table is None:
            self.table_hint = None
            print("Questions will pick their table from the wording.")
        elif self.engine.store.table_exists(table):
            self.table_hint = self.engine.store.resolve(table)
            print(f"Questions will use table {self.table_hint}.")
        else:
            print(f"Error: Table '{table}' not found")

    def _ask(self, question: Optional[str]) -> None:
        if question is None:
            print("Usage: .ask <question>")
            return
        query = self.engine.translate(question, self.table_hint)
        print(f"-- {query}")
        self._run_query(query)

    def _export(self, path: Optional[str]) -> None:
        if path is None:
            print("Usage: .export <file.csv>")
            return
        if self.last_result is None:
            print("Nothing to export yet; run a query first.")
            return
        try:
            with open(path, 'w', newline='') as f:
                f.write(self.last_result.to_csv())
        except OSError as e:
            print(f"Error: {e}")
            return
        print(f"Exported {len(self.last_result.rows)} row(s) to {path}")

    def _run_query(self, query: str) -> None:
        try:
            self.last_result = self.engine.execute(query)
        except QueryError as e:
            print(f"Error: {e}")
            return
        print_results(self.last_result)


def _format_value(value) -> str:
    if value is None:
        return 'NULL'
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}".rstrip('0').rstrip('.')
    return str(value)


def print_results(result: QueryResult) -> None:
    """Print rows as an aligned text table followed by the row counts"""
    if not result.rows:
        print(f"(0 rows, {result.total_count} total)")
        return

    cells = [[_format_value(row.get(column)) for column in result.columns] for row in result.rows]
    widths: Dict[str, int] = {}
    for index, column in enumerate(result.columns):
        longest = max([len(column)] + [len(line[index]) for line in cells])
        widths[column] = min(longest, MAX_COLUMN_WIDTH)

    def render(values: List[str]) -> str:
        return " | ".join(
            value[:widths[column]].ljust(widths[column])
            for column, value in zip(result.columns, values)
        )

    print()
    print(render(result.columns))
    print("-+-".join("-" * widths[column] for column in result.columns))
    for line in cells:
        print(render(line))
    print(f"\n({len(result.rows)} row(s), {result.total_count} total)")


def _fail(error: Exception) -> None:
    print(f"Error: {error}", file=sys.stderr)
    sys.exit(1)


def main(argv=None):
    """Command-line entry point: run one query, a question, a file or the shell"""
    parser = argparse.ArgumentParser(
        prog='miniquery',
        description="MiniQuery - SQL Explorer over in-memory tables",
    )
    parser.add_argument('-d', '--data-dir', default=ENGINE_CONFIG['data_dir'],
                        help='directory of <table>.json files (default: bundled sample tables)')
    parser.add_argument('-e', '--execute', help='run a query and exit')
    parser.add_argument('-a', '--ask', help='translate a plain-English question, run it and exit')
    parser.add_argument('-t', '--table', help='table to use when a question names none')
    parser.add_argument('-f', '--file', help='run the ;-separated queries in a file and exit')
    parser.add_argument('-s', '--strict', action='store_true', default=None,
                        help='fail on WHERE/HAVING clauses that cannot be parsed')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log parsing and execution details')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_CONFIG['level'],
        format=LOG_CONFIG['format'],
    )

    try:
        engine = QueryEngine.from_config(args.data_dir, strict=args.strict)
    except (OSError, ValueError) as e:
        _fail(e)

    try:
        if args.ask:
            query, result = engine.ask(args.ask, args.table)
            print(f"-- {query}")
            print_results(result)
        elif args.execute:
            print_results(engine.execute(args.execute))
        elif args.file:
            with open(args.file) as f:
                script = f.read()
            for result in engine.execute_many(script):
                print_results(result)
        else:
            shell = REPL(engine)
            shell.table_hint = args.table
            shell.run()
    except (OSError, QueryError) as e:
        _fail(e)


if __name__ == '__main__':
    main()
