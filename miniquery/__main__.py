#!/usr/bin/env python3
"""
MiniQuery - SQL Explorer
Entry point script

Run the REPL:
    python -m miniquery

Run one query or question:
    python -m miniquery -e "SELECT * FROM products WHERE price > 100;"
    python -m miniquery -a "how many orders are there"

Or use as a library:
    from miniquery import execute_query
    execute_query({"t": [{"id": 1}]}, "SELECT * FROM t")
"""

from miniquery.core.repl import main

if __name__ == '__main__':
    main()
