#!/usr/bin/env python3
"""
Demo Web Application - SQL Explorer API

A small JSON API over MiniQuery for browsing tables, running SELECT
queries and asking questions in plain English.

Endpoints:
- GET  /api/tables            Tables with row counts
- GET  /api/tables/<name>     Table schema and row count
- POST /api/query             {"query": "..."} -> {"data", "count", "columns"}
- POST /api/translate         {"question": "...", "table": "..."} -> {"query"}
- POST /api/ask               Translate and run in one step
- GET  /api/export?query=...  Query results as a CSV download

Run:
    pip install -e .
    python demo_app/app.py

Then visit: http://localhost:5000/api/tables
"""

import os
import sys
import logging
from flask import Flask, Response, jsonify, request

# Add parent directory to path to import miniquery
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from miniquery import QueryEngine, QueryError, UnknownTable
from miniquery.config import APP_CONFIG, ENGINE_CONFIG, LOG_CONFIG

logging.basicConfig(level=LOG_CONFIG['level'], format=LOG_CONFIG['format'])
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = APP_CONFIG['secret_key']

# Sample tables unless MINIQUERY_DATA_DIR points at a directory of JSON tables
engine = QueryEngine.from_config()


def _error(exc: Exception, status: int = 400, **extra):
    payload = {'error': str(exc), 'type': type(exc).__name__}
    payload.update(extra)
    return jsonify(payload), status


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@app.route('/api/tables')
def list_tables():
    """Tables available for querying."""
    return jsonify({
        'tables': [{'name': name, 'row_count': engine.count(name)} for name in engine.tables()]
    })


@app.route('/api/tables/<name>')
def describe_table(name):
    """Schema of one table."""
    try:
        schema = engine.describe(name)
        schema['row_count'] = engine.count(name)
    except UnknownTable as e:
        return _error(e, 404)
    return jsonify(schema)


@app.route('/api/query', methods=['POST'])
def run_query():
    """Run a SELECT query."""
    query = (_payload().get('query') or '').strip()
    if not query:
        return jsonify({'error': 'Please enter a SQL query', 'type': 'EmptyQuery'}), 400

    try:
        result = engine.execute(query)
    except QueryError as e:
        logger.info("Rejected query %r: %s", query, e)
        return _error(e)

    return jsonify({**result.to_dict(), 'columns': result.columns})


@app.route('/api/translate', methods=['POST'])
def translate():
    """Turn a question into a query without running it."""
    payload = _payload()
    question = (payload.get('question') or '').strip()
    if not question:
        return jsonify({'error': 'Please enter a question', 'type': 'EmptyQuestion'}), 400

    return jsonify({'query': engine.translate(question, payload.get('table'))})


@app.route('/api/ask', methods=['POST'])
def ask():
    """Translate a question and run the resulting query."""
    payload = _payload()
    question = (payload.get('question') or '').strip()
    if not question:
        return jsonify({'error': 'Please enter a question', 'type': 'EmptyQuestion'}), 400

    query = engine.translate(question, payload.get('table'))
    try:
        result = engine.execute(query)
    except QueryError as e:
        return _error(e, query=query)

    return jsonify({'query': query, **result.to_dict(), 'columns': result.columns})


@app.route('/api/export')
def export_csv():
    """Download query results as CSV."""
    query = (request.args.get('query') or '').strip()
    if not query:
        return jsonify({'error': 'Please enter a SQL query', 'type': 'EmptyQuery'}), 400

    try:
        result = engine.execute(query)
    except QueryError as e:
        return _error(e)

    return Response(
        result.to_csv(),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=query_results.csv'},
    )


if __name__ == '__main__':
    print("\n" + "="*60)
    print("MiniQuery Demo - SQL Explorer API")
    print("="*60)
    print(f"\nData: {ENGINE_CONFIG['data_dir'] or 'bundled sample tables'}")
    print(f"Starting server at http://{APP_CONFIG['host']}:{APP_CONFIG['port']}")
    print("\nPress Ctrl+C to stop the server.\n")

    app.run(debug=APP_CONFIG['debug'], host=APP_CONFIG['host'], port=APP_CONFIG['port'])
