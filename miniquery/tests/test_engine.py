#!/usr/bin/env python3
"""
Test Suite for the MiniQuery engine

Tests all major features:
- SELECT projection, aliases and DISTINCT
- WHERE clause with LIKE, comparisons and boolean logic
- ORDER BY, LIMIT, OFFSET and the pre-limit count
- Aggregations (COUNT, SUM, AVG, MIN, MAX) with GROUP BY / HAVING
- JOIN operations
- Error handling and the permissive clause fallback

Run: python -m pytest miniquery/tests/test_engine.py -v
Or:  python miniquery/tests/test_engine.py
"""

import copy
import json
import os
import shutil
import sys
import tempfile
import unittest

# Add parent directories to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from miniquery import (
    QueryEngine, TableStore, execute_query, QueryError, MissingTable, UnknownTable,
    UnsupportedJoinCondition, UnsupportedQueryKind, UnparseablePredicate,
)
from miniquery.data.sample import SAMPLE_TABLES, sample_store


class TestSelect(unittest.TestCase):
    """Test column selection and projection"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def test_select_all(self):
        """Test SELECT * returns every row and column"""
        result = self.engine.execute("SELECT * FROM customers")
        self.assertEqual(len(result.rows), 10)
        self.assertEqual(result.total_count, 10)
        self.assertEqual(result.columns,
                         ['id', 'name', 'email', 'phone', 'address', 'orders', 'total_spent'])

    def test_select_columns(self):
        """Test selecting specific columns"""
        result = self.engine.execute("SELECT name, email FROM customers LIMIT 2")
        self.assertEqual(result.rows, [
            {'name': 'John Doe', 'email': 'john@example.com'},
            {'name': 'Jane Smith', 'email': 'jane@example.com'},
        ])
        self.assertEqual(result.total_count, 10)

    def test_column_alias(self):
        """Test AS and implicit aliases"""
        result = self.engine.execute("SELECT name AS customer, orders n FROM customers WHERE id = 1")
        self.assertEqual(result.rows, [{'customer': 'John Doe', 'n': 5}])

    def test_missing_column_is_null(self):
        """Test selecting a column the rows do not have"""
        result = self.engine.execute("SELECT name, nickname FROM customers LIMIT 1")
        self.assertEqual(result.rows, [{'name': 'John Doe', 'nickname': None}])

    def test_empty_select_list_means_all(self):
        """Test a select list with nothing usable behaves like *"""
        result = self.engine.execute("SELECT FROM products")
        self.assertEqual(len(result.rows), 10)
        self.assertIn('price', result.rows[0])

    def test_case_insensitive_names(self):
        """Test table and column names ignore case"""
        result = self.engine.execute("select NAME from CUSTOMERS where ID = 2")
        self.assertEqual(result.rows, [{'NAME': 'Jane Smith'}])

    def test_distinct(self):
        """Test SELECT DISTINCT"""
        result = self.engine.execute("SELECT DISTINCT category FROM products")
        self.assertEqual([row['category'] for row in result.rows],
                         ['Electronics', 'Kitchen', 'Apparel'])
        self.assertEqual(result.total_count, 3)

    def test_input_rows_not_mutated(self):
        """Test queries never modify the caller's tables"""
        tables = copy.deepcopy(SAMPLE_TABLES)
        engine = QueryEngine(tables)
        engine.execute("SELECT c.name, o.total FROM customers c JOIN orders o ON c.id = o.customer_id")
        result = engine.execute("SELECT * FROM customers ORDER BY name")
        result.rows[0]['name'] = 'changed'
        self.assertEqual(tables, SAMPLE_TABLES)

    def test_execute_query_payload(self):
        """Test the module-level execute_query function"""
        payload = execute_query({'t': [{'id': 1}, {'id': 2}]}, "SELECT * FROM t LIMIT 1")
        self.assertEqual(payload, {'data': [{'id': 1}], 'count': 2})


class TestWhereClause(unittest.TestCase):
    """Test WHERE clause with various operators"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def names(self, query):
        return [row['name'] for row in self.engine.execute(query).rows]

    def test_like_contains(self):
        """Test LIKE '%x%' substring match"""
        self.assertEqual(self.names("SELECT * FROM customers WHERE name LIKE '%john%'"),
                         ['John Doe', 'Bob Johnson'])

    def test_like_prefix(self):
        """Test LIKE 'x%' prefix match"""
        self.assertEqual(len(self.names("SELECT * FROM customers WHERE name LIKE 'j%'")), 5)

    def test_like_suffix(self):
        """Test LIKE '%x' suffix match"""
        self.assertEqual(self.names("SELECT * FROM customers WHERE name LIKE '%SON'"),
                         ['Bob Johnson', 'James Wilson'])

    def test_like_exact(self):
        """Test LIKE without wildcards is a case-insensitive equality"""
        self.assertEqual(self.names("SELECT * FROM customers WHERE name LIKE 'jane smith'"),
                         ['Jane Smith'])

    def test_not_like(self):
        """Test NOT LIKE"""
        self.assertEqual(len(self.names("SELECT * FROM customers WHERE name NOT LIKE 'j%'")), 5)

    def test_greater_than(self):
        """Test > operator"""
        result = self.engine.execute("SELECT * FROM customers WHERE orders > 5")
        self.assertEqual(sorted(row['orders'] for row in result.rows), [6, 7, 8, 9, 12])

    def test_less_than(self):
        """Test < operator"""
        result = self.engine.execute("SELECT * FROM customers WHERE orders < 3")
        self.assertEqual(sorted(row['id'] for row in result.rows), [5, 9])

    def test_greater_equals_decimal(self):
        """Test >= with a decimal literal"""
        result = self.engine.execute("SELECT * FROM customers WHERE total_spent >= 839.5")
        self.assertEqual(sorted(row['id'] for row in result.rows), [3, 4, 8])

    def test_equals_string_ignores_case(self):
        """Test = with a string literal"""
        self.assertEqual(self.names("SELECT * FROM customers WHERE name = 'JOHN DOE'"), ['John Doe'])

    def test_equals_number(self):
        """Test = with a number literal"""
        self.assertEqual(self.names("SELECT * FROM customers WHERE id = 3"), ['Bob Johnson'])

    def test_not_equals(self):
        """Test != and <> operators"""
        for op in ('!=', '<>'):
            result = self.engine.execute(f"SELECT * FROM orders WHERE status {op} 'completed'")
            self.assertEqual(result.total_count, 6)

    def test_and_or(self):
        """Test AND / OR"""
        result = self.engine.execute(
            "SELECT * FROM orders WHERE status = 'shipped' AND total > 200")
        self.assertEqual([row['id'] for row in result.rows], [2, 5, 9])

        result = self.engine.execute(
            "SELECT * FROM orders WHERE status = 'pending' OR status = 'processing'")
        self.assertEqual([row['id'] for row in result.rows], [3, 7, 10])

    def test_parentheses(self):
        """Test grouping with parentheses"""
        result = self.engine.execute(
            "SELECT * FROM orders WHERE (status = 'pending' OR status = 'processing') AND total > 100")
        self.assertEqual([row['id'] for row in result.rows], [10])

    def test_in(self):
        """Test IN operator"""
        result = self.engine.execute("SELECT * FROM orders WHERE status IN ('pending', 'processing')")
        self.assertEqual(result.total_count, 3)

    def test_between(self):
        """Test BETWEEN operator"""
        result = self.engine.execute("SELECT * FROM products WHERE price BETWEEN 50 AND 130")
        self.assertEqual(sorted(row['id'] for row in result.rows), [3, 4, 7, 8, 9])

    def test_date_strings_compare_as_text(self):
        """Test ISO dates against a string literal"""
        result = self.engine.execute("SELECT * FROM orders WHERE date >= '2023-05-20'")
        self.assertEqual([row['id'] for row in result.rows], [6, 7, 8, 9, 10])

    def test_numeric_strings_compare_as_numbers(self):
        """Test values stored as numeric text"""
        engine = QueryEngine({'t': [{'v': '10'}, {'v': '9'}, {'v': 'abc'}]})
        result = engine.execute("SELECT * FROM t WHERE v > 9.5")
        self.assertEqual(result.rows, [{'v': '10'}])

    def test_absent_and_null_fields_never_match(self):
        """Test rows without the field are filtered out"""
        engine = QueryEngine({'t': [{'id': 1, 'score': 5}, {'id': 2}, {'id': 3, 'score': None}]})
        self.assertEqual(engine.execute("SELECT id FROM t WHERE score > 1").rows, [{'id': 1}])
        self.assertEqual(engine.execute("SELECT id FROM t WHERE score != 5").rows, [])
        self.assertEqual(engine.execute("SELECT id FROM t WHERE score IS NULL").rows,
                         [{'id': 2}, {'id': 3}])
        self.assertEqual(engine.execute("SELECT id FROM t WHERE score IS NOT NULL").rows,
                         [{'id': 1}])

    def test_keywords_inside_strings(self):
        """Test clause keywords inside a string literal"""
        engine = QueryEngine({'t': [{'title': 'Order By Me'}, {'title': 'Other'}]})
        result = engine.execute("SELECT * FROM t WHERE title = 'order by me' LIMIT 5")
        self.assertEqual(result.rows, [{'title': 'Order By Me'}])

    def test_unparseable_where_is_ignored(self):
        """Test an unparseable WHERE clause matches every row"""
        result = self.engine.execute("SELECT * FROM customers WHERE orders >>> 5")
        self.assertEqual(result.total_count, 10)

        result = self.engine.execute("SELECT * FROM customers WHERE name ORDER BY id LIMIT 2")
        self.assertEqual([row['id'] for row in result.rows], [1, 2])
        self.assertEqual(result.total_count, 10)

    def test_strict_mode_rejects_unparseable_where(self):
        """Test strict mode raises instead of ignoring the clause"""
        engine = QueryEngine(sample_store(), strict=True)
        with self.assertRaises(UnparseablePredicate):
            engine.execute("SELECT * FROM customers WHERE orders >>> 5")


class TestOrderByLimitOffset(unittest.TestCase):
    """Test ORDER BY, LIMIT, and OFFSET"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def test_order_desc_limit(self):
        """Test ORDER BY DESC with LIMIT"""
        result = self.engine.execute("SELECT * FROM customers ORDER BY orders DESC LIMIT 3")
        self.assertEqual([row['id'] for row in result.rows], [3, 8, 4])
        self.assertEqual(result.total_count, 10)

    def test_order_asc_default(self):
        """Test ORDER BY defaults to ascending"""
        result = self.engine.execute("SELECT name FROM customers ORDER BY name")
        self.assertEqual(result.rows[0], {'name': 'Alice Williams'})
        self.assertEqual(result.rows[-1], {'name': 'Michael Clark'})

    def test_multiple_keys(self):
        """Test ORDER BY with several keys"""
        result = self.engine.execute("SELECT name FROM products ORDER BY category ASC, price DESC LIMIT 3")
        self.assertEqual([row['name'] for row in result.rows],
                         ['Winter Jacket', 'Running Shoes', 'Laptop'])

    def test_sort_is_stable(self):
        """Test rows with equal keys keep their input order"""
        result = self.engine.execute("SELECT id FROM products WHERE category = 'Electronics' ORDER BY category")
        self.assertEqual([row['id'] for row in result.rows], [1, 2, 5, 6, 9, 10])

    def test_order_by_select_alias(self):
        """Test ORDER BY naming a select alias"""
        result = self.engine.execute("SELECT name AS who FROM customers ORDER BY who DESC LIMIT 1")
        self.assertEqual(result.rows, [{'who': 'Michael Clark'}])

    def test_limit_zero(self):
        """Test LIMIT 0 returns no rows but keeps the count"""
        result = self.engine.execute("SELECT * FROM customers LIMIT 0")
        self.assertEqual(result.rows, [])
        self.assertEqual(result.total_count, 10)

    def test_non_numeric_limit_is_ignored(self):
        """Test LIMIT with a non-number means no limit"""
        result = self.engine.execute("SELECT * FROM customers LIMIT lots")
        self.assertEqual(len(result.rows), 10)

    def test_offset(self):
        """Test OFFSET"""
        result = self.engine.execute("SELECT id FROM customers ORDER BY id LIMIT 3 OFFSET 2")
        self.assertEqual([row['id'] for row in result.rows], [3, 4, 5])
        self.assertEqual(result.total_count, 10)

    def test_offset_before_limit(self):
        """Test OFFSET written before LIMIT"""
        result = self.engine.execute("SELECT id FROM customers ORDER BY id OFFSET 2 LIMIT 3")
        self.assertEqual([row['id'] for row in result.rows], [3, 4, 5])

        payload = self.engine.execute_query("SELECT * FROM orders OFFSET 1 LIMIT 1")
        self.assertEqual(len(payload['data']), 1)
        self.assertEqual(payload['count'], 10)

    def test_clause_after_limit(self):
        """Test a clause written after LIMIT is reported as ignored"""
        result = self.engine.execute("SELECT id FROM customers LIMIT 2 ORDER BY id DESC")
        self.assertEqual([row['id'] for row in result.rows], [1, 2])

        strict = QueryEngine(sample_store(), strict=True)
        with self.assertRaises(UnparseablePredicate):
            strict.execute("SELECT * FROM customers LIMIT 1 WHERE id = 3")

    def test_limit_and_count_invariants(self):
        """Test len(data) <= LIMIT and count is the unlimited size"""
        for limit in (1, 4, 20):
            limited = self.engine.execute_query(f"SELECT * FROM orders WHERE total > 100 LIMIT {limit}")
            unlimited = self.engine.execute_query("SELECT * FROM orders WHERE total > 100")
            self.assertLessEqual(len(limited['data']), limit)
            self.assertEqual(limited['count'], len(unlimited['data']))

    def test_like_scenario(self):
        """Test a filtered, sorted and limited lookup reports the full match count"""
        tables = {'customers': [
            {'id': 2, 'name': 'Johnny Walker'},
            {'id': 1, 'name': 'John Doe'},
        ]}
        payload = execute_query(
            tables, "SELECT * FROM customers WHERE name LIKE '%john%' ORDER BY id ASC LIMIT 1")
        self.assertEqual(payload, {'data': [{'id': 1, 'name': 'John Doe'}], 'count': 2})


class TestAggregations(unittest.TestCase):
    """Test aggregate functions"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def test_count_star(self):
        """Test COUNT(*) with alias"""
        result = self.engine.execute("SELECT COUNT(*) as count FROM customers")
        self.assertEqual(result.rows, [{'count': 10}])

    def test_scalar_function_does_not_group(self):
        """Test an unknown function is left out without collapsing rows"""
        result = self.engine.execute("SELECT id, UPPER(name) FROM customers ORDER BY id")
        self.assertEqual(result.total_count, 10)
        self.assertEqual(result.rows[0], {'id': 1})

    def test_order_by_aliased_group_column(self):
        """Test ORDER BY a group column that is selected under an alias"""
        result = self.engine.execute(
            "SELECT status AS s, COUNT(*) AS n FROM orders GROUP BY status ORDER BY status DESC")
        self.assertEqual([row['s'] for row in result.rows],
                         ['shipped', 'processing', 'pending', 'completed'])
        self.assertEqual(set(result.rows[0]), {'s', 'n'})
        self.assertEqual(result.total_count, 1)

    def test_default_names(self):
        """Test output names of unaliased aggregates"""
        result = self.engine.execute("SELECT COUNT(*), SUM(quantity) FROM order_items")
        self.assertEqual(result.rows, [{'count_*': 10, 'sum_quantity': 11}])

    def test_avg_min_max(self):
        """Test AVG, MIN, MAX"""
        result = self.engine.execute("SELECT AVG(orders) AS a FROM customers")
        self.assertAlmostEqual(result.rows[0]['a'], 5.7)

        result = self.engine.execute("SELECT MIN(price) AS lo, MAX(price) AS hi FROM products")
        self.assertEqual(result.rows, [{'lo': 49.99, 'hi': 999.99}])

    def test_group_by(self):
        """Test GROUP BY keeps first-seen group order"""
        result = self.engine.execute("SELECT status, COUNT(*) as n FROM orders GROUP BY status")
        self.assertEqual(result.rows, [
            {'status': 'completed', 'n': 4},
            {'status': 'shipped', 'n': 3},
            {'status': 'processing', 'n': 2},
            {'status': 'pending', 'n': 1},
        ])

    def test_group_sum(self):
        """Test SUM per group"""
        engine = QueryEngine({'t': [
            {'cust': 1, 'amt': 10}, {'cust': 1, 'amt': 20}, {'cust': 2, 'amt': 5},
        ]})
        result = engine.execute("SELECT cust, SUM(amt) as s FROM t GROUP BY cust")
        self.assertEqual(result.rows, [{'cust': 1, 's': 30}, {'cust': 2, 's': 5}])

    def test_group_key_uses_text_form(self):
        """Test 1, 1.0 and '1' fall into one group"""
        engine = QueryEngine({'t': [{'k': 1}, {'k': 1.0}, {'k': '1'}, {'k': 2}]})
        result = engine.execute("SELECT k, COUNT(*) AS n FROM t GROUP BY k")
        self.assertEqual(result.rows, [{'k': 1, 'n': 3}, {'k': 2, 'n': 1}])

    def test_non_numeric_values_skipped(self):
        """Test SUM/AVG ignore values that are not numbers"""
        engine = QueryEngine({'t': [{'v': 4}, {'v': 'n/a'}, {'v': '6'}, {'v': None}]})
        result = engine.execute("SELECT SUM(v) AS s, AVG(v) AS a, COUNT(v) AS c FROM t")
        self.assertEqual(result.rows, [{'s': 10, 'a': 5.0, 'c': 3}])

    def test_empty_input(self):
        """Test aggregates over no rows"""
        result = self.engine.execute(
            "SELECT COUNT(*) AS c, SUM(total) AS s, AVG(total) AS a, MIN(total) AS lo FROM orders WHERE total > 5000")
        self.assertEqual(result.rows, [{'c': 0, 's': 0, 'a': 0, 'lo': None}])

    def test_count_distinct(self):
        """Test COUNT(DISTINCT col)"""
        result = self.engine.execute("SELECT COUNT(DISTINCT status) AS statuses FROM orders")
        self.assertEqual(result.rows, [{'statuses': 4}])

    def test_bare_column_without_group_is_omitted(self):
        """Test non-grouped bare columns are dropped from aggregate rows"""
        result = self.engine.execute("SELECT name, COUNT(*) AS c FROM customers")
        self.assertEqual(result.rows, [{'c': 10}])

    def test_star_copies_first_row(self):
        """Test * in a grouped query copies the group's first row"""
        result = self.engine.execute("SELECT *, COUNT(*) AS c FROM orders GROUP BY status LIMIT 1")
        self.assertEqual(result.rows[0]['id'], 1)
        self.assertEqual(result.rows[0]['c'], 4)

    def test_having(self):
        """Test HAVING on an aggregate call and on its alias"""
        result = self.engine.execute(
            "SELECT customer_id, COUNT(*) as n FROM orders GROUP BY customer_id HAVING COUNT(*) > 1")
        self.assertEqual(result.rows, [{'customer_id': 1, 'n': 2}, {'customer_id': 3, 'n': 3}])

        result = self.engine.execute(
            "SELECT customer_id, COUNT(*) as n FROM orders GROUP BY customer_id HAVING n >= 3")
        self.assertEqual(result.rows, [{'customer_id': 3, 'n': 3}])

    def test_having_on_unselected_aggregate(self):
        """Test HAVING on an aggregate missing from the select list"""
        result = self.engine.execute(
            "SELECT customer_id FROM orders GROUP BY customer_id HAVING SUM(total) > 500")
        self.assertEqual(result.rows, [{'customer_id': 1}, {'customer_id': 3}, {'customer_id': 4}])

    def test_order_by_aggregate(self):
        """Test ORDER BY an aggregate alias and an aggregate call"""
        expected = ['shipped', 'completed', 'processing', 'pending']
        for order in ('revenue', 'SUM(total)'):
            result = self.engine.execute(
                f"SELECT status, SUM(total) AS revenue FROM orders GROUP BY status ORDER BY {order} DESC")
            self.assertEqual([row['status'] for row in result.rows], expected)


class TestJoins(unittest.TestCase):
    """Test JOIN operations"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def test_join_namespaces_columns(self):
        """Test combined rows carry table-prefixed keys"""
        engine = QueryEngine({
            'A': [{'id': 1, 'name': 'x'}],
            'B': [{'a_id': 1, 'val': 'v'}],
        })
        result = engine.execute("SELECT * FROM A JOIN B ON A.id = B.a_id")
        self.assertEqual(result.rows, [{'A_id': 1, 'A_name': 'x', 'B_a_id': 1, 'B_val': 'v'}])

    def test_boolean_keys_do_not_join_numbers(self):
        """Test True and 1 are different join keys"""
        engine = QueryEngine({
            'A': [{'id': True}, {'id': 2}],
            'B': [{'a_id': 1}, {'a_id': '2'}, {'a_id': 2}],
        })
        result = engine.execute("SELECT * FROM A JOIN B ON A.id = B.a_id")
        self.assertEqual(result.rows, [{'A_id': 2, 'B_a_id': 2}])

    def test_inner_join_with_where(self):
        """Test JOIN filtered on a qualified column"""
        result = self.engine.execute(
            "SELECT c.name, o.total FROM customers c JOIN orders o ON c.id = o.customer_id "
            "WHERE o.status = 'completed'")
        self.assertEqual([row['customers_name'] for row in result.rows],
                         ['John Doe', 'John Doe', 'Bob Johnson', 'James Wilson'])
        self.assertEqual(result.columns, ['customers_name', 'orders_total'])

    def test_on_condition_order_does_not_matter(self):
        """Test ON with the joined table named first"""
        a = self.engine.execute("SELECT * FROM customers c JOIN orders o ON c.id = o.customer_id")
        b = self.engine.execute("SELECT * FROM customers c JOIN orders o ON o.customer_id = c.id")
        self.assertEqual(a.rows, b.rows)
        self.assertEqual(a.total_count, 10)

    def test_left_join(self):
        """Test LEFT JOIN keeps unmatched rows with null columns"""
        result = self.engine.execute(
            "SELECT * FROM customers c LEFT JOIN orders o ON c.id = o.customer_id")
        self.assertEqual(result.total_count, 13)

        result = self.engine.execute(
            "SELECT c.name FROM customers c LEFT OUTER JOIN orders o ON c.id = o.customer_id "
            "WHERE o.id IS NULL")
        self.assertEqual([row['customers_name'] for row in result.rows],
                         ['Michael Clark', 'Jessica Parker', 'Daniel Wright'])

    def test_join_group_order_limit(self):
        """Test the full pipeline on joined rows"""
        result = self.engine.execute(
            "SELECT c.name AS customer, COUNT(*) AS n FROM customers c "
            "JOIN orders o ON c.id = o.customer_id GROUP BY c.name ORDER BY n DESC LIMIT 1")
        self.assertEqual(result.rows, [{'customer': 'Bob Johnson', 'n': 3}])

    def test_join_keys_are_not_coerced(self):
        """Test 1 and '1' do not join"""
        engine = QueryEngine({'A': [{'id': 1}], 'B': [{'a_id': '1'}]})
        self.assertEqual(engine.execute("SELECT * FROM A JOIN B ON A.id = B.a_id").rows, [])

    def test_null_keys_never_join(self):
        """Test null join keys never match"""
        engine = QueryEngine({'A': [{'id': None}], 'B': [{'a_id': None}]})
        self.assertEqual(engine.execute("SELECT * FROM A JOIN B ON A.id = B.a_id").rows, [])

    def test_self_join_uses_aliases(self):
        """Test a table joined with itself"""
        result = self.engine.execute(
            "SELECT * FROM employees e1 JOIN employees e2 ON e1.department = e2.department")
        self.assertEqual(result.total_count, 28)
        self.assertIn('e1_name', result.rows[0])
        self.assertIn('e2_name', result.rows[0])

    def test_unsupported_joins(self):
        """Test join shapes outside the single equi-join"""
        queries = [
            "SELECT * FROM customers c RIGHT JOIN orders o ON c.id = o.customer_id",
            "SELECT * FROM customers c FULL JOIN orders o ON c.id = o.customer_id",
            "SELECT * FROM customers c CROSS JOIN orders o",
            "SELECT * FROM customers c JOIN orders o",
            "SELECT * FROM customers c JOIN orders o ON c.id > o.customer_id",
            "SELECT * FROM customers c JOIN orders o ON c.id = o.customer_id AND o.total > 5",
            "SELECT * FROM customers c JOIN orders o ON x.id = y.customer_id",
            "SELECT * FROM orders o JOIN customers c ON o.customer_id = c.id "
            "JOIN products p ON p.id = o.id",
            "SELECT * FROM customers WHERE id = 1 JOIN orders ON customers.id = orders.customer_id",
        ]
        for query in queries:
            with self.assertRaises(UnsupportedJoinCondition, msg=query):
                self.engine.execute(query)


class TestErrors(unittest.TestCase):
    """Test error reporting"""

    def setUp(self):
        self.engine = QueryEngine(sample_store(), strict=False)

    def test_not_a_select(self):
        """Test non-SELECT input"""
        for query in ("", "   ", "DELETE FROM customers", "show me customers"):
            with self.assertRaises(UnsupportedQueryKind, msg=query):
                self.engine.execute(query)

    def test_missing_table(self):
        """Test SELECT without a FROM table"""
        for query in ("SELECT *", "SELECT * FROM", "SELECT * FROM 42"):
            with self.assertRaises(MissingTable, msg=query):
                self.engine.execute(query)

    def test_unknown_table(self):
        """Test a table that does not exist"""
        with self.assertRaises(UnknownTable) as ctx:
            self.engine.execute("SELECT * FROM invoices")
        self.assertEqual(ctx.exception.table, 'invoices')

    def test_errors_are_value_errors(self):
        """Test every query error is a ValueError"""
        with self.assertRaises(ValueError):
            self.engine.execute("UPDATE customers SET name = 'x'")
        self.assertTrue(issubclass(QueryError, ValueError))


class TestQueryResult(unittest.TestCase):
    """Test result rendering"""

    def setUp(self):
        self.engine = QueryEngine({'t': [{'id': 1, 'note': 'a, b'}, {'id': 2, 'note': None}]})

    def test_to_dict(self):
        """Test the data/count payload"""
        result = self.engine.execute("SELECT * FROM t LIMIT 1")
        self.assertEqual(result.to_dict(), {'data': [{'id': 1, 'note': 'a, b'}], 'count': 2})

    def test_to_csv(self):
        """Test CSV rendering quotes commas and blanks nulls"""
        csv_text = self.engine.execute("SELECT * FROM t").to_csv()
        self.assertEqual(csv_text.splitlines(), ['id,note', '1,"a, b"', '2,'])

    def test_execute_many(self):
        """Test scripts split on semicolons outside string literals"""
        results = self.engine.execute_many(
            "SELECT id FROM t WHERE id > 0 OR note = 'x;y';\n;SELECT COUNT(*) AS n FROM t; -- done")
        self.assertEqual([result.rows for result in results],
                         [[{'id': 1}, {'id': 2}], [{'n': 2}]])


class TestTableStore(unittest.TestCase):
    """Test table loading and schemas"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def write(self, name, data):
        with open(os.path.join(self.test_dir, name), 'w') as f:
            json.dump(data, f)

    def test_from_directory(self):
        """Test loading JSON tables from a directory"""
        self.write('people.json', [{'id': 1, 'name': 'Ann'}, {'id': 2, 'name': 'Ben'}])
        self.write('pets.json', {
            'rows': [{'id': 1, 'owner_id': 2}],
            'schema': [{'column': 'id', 'type': 'integer', 'primary': True},
                       {'column': 'owner_id', 'type': 'integer', 'nullable': False}],
        })
        self.write('notes.txt', 'ignored')

        store = TableStore.from_directory(self.test_dir)
        self.assertEqual(store.list_tables(), ['people', 'pets'])

        engine = QueryEngine(store)
        result = engine.execute("SELECT p.name FROM pets JOIN people p ON pets.owner_id = p.id")
        self.assertEqual(result.rows, [{'people_name': 'Ben'}])
        self.assertEqual(engine.describe('pets')['primary_key'], 'id')

    def test_from_directory_rejects_bad_files(self):
        """Test a JSON file that is not a list of rows"""
        self.write('bad.json', [1, 2, 3])
        with self.assertRaises(ValueError):
            TableStore.from_directory(self.test_dir)

    def test_resolve(self):
        """Test exact then case-insensitive table lookup"""
        store = TableStore({'Orders': [], 'orders': [{'id': 1}]})
        self.assertEqual(store.resolve('orders'), 'orders')
        self.assertEqual(store.resolve('ORDERS'), 'Orders')
        with self.assertRaises(UnknownTable):
            store.resolve('missing')

    def test_inferred_schema(self):
        """Test schemas inferred from rows"""
        store = TableStore({'t': [
            {'id': 1, 'price': 2.5, 'day': '2024-01-15', 'label': 'x'},
            {'id': 2, 'price': 3, 'day': '2024-01-16', 'label': None},
        ]})
        schema = store.get_table_schema('t').to_dict()
        self.assertEqual([(c['column'], c['type']) for c in schema['columns']], [
            ('id', 'integer'), ('price', 'numeric'), ('day', 'date'), ('label', 'varchar(255)'),
        ])
        self.assertEqual(schema['primary_key'], 'id')
        self.assertTrue(schema['columns'][3]['nullable'])

    def test_sample_schema(self):
        """Test the declared schemas of the sample tables"""
        engine = QueryEngine(sample_store())
        schema = engine.describe('customers')
        self.assertEqual(schema['columns'][1]['type'], 'varchar(255)')
        self.assertEqual(engine.count('employees'), 10)


def run_tests():
    """Run all tests"""
    # Create test suite
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    # Add test classes
    suite.addTests(loader.loadTestsFromTestCase(TestSelect))
    suite.addTests(loader.loadTestsFromTestCase(TestWhereClause))
    suite.addTests(loader.loadTestsFromTestCase(TestOrderByLimitOffset))
    suite.addTests(loader.loadTestsFromTestCase(TestAggregations))
    suite.addTests(loader.loadTestsFromTestCase(TestJoins))
    suite.addTests(loader.loadTestsFromTestCase(TestErrors))
    suite.addTests(loader.loadTestsFromTestCase(TestQueryResult))
    suite.addTests(loader.loadTestsFromTestCase(TestTableStore))

    # Run tests
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
