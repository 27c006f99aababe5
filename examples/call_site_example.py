#!/usr/bin/env python3
"""
Simple example showing SQL call-site analysis of a data-access module.
"""

from sql_callsite_analyzer import analyze_source
from sql_callsite_analyzer.sql_analysis.analyzer import SqlAnalyzer

ORDERS_MODULE = '''
ORDERS_SQL = """
    SELECT o.order_id, o.total AS amount, COUNT(*) items
    FROM {{tkey}}orders o
    WHERE o.customer_id = :customer_id AND o.created > :since
    GROUP BY o.order_id, o.total
"""


class OrderRepository:
    def __init__(self, ora):
        self.ora = ora

    def for_customer(self, customer_id):
        return self.ora.getSelectRows(ORDERS_SQL, {"customer_id": customer_id})

    def cancel(self, order_id):
        self.ora.execSql(
            "UPDATE orders SET status = 'X' WHERE order_id = :order_id",
            {"order_id": order_id},
        )

    def latest(self, limit):
        return self.ora.execLimitSql("SELECT order_id FROM orders ORDER BY", 0, limit)
'''


def main():
    print("🔍 SQL CALL-SITE ANALYSIS EXAMPLE")
    print("=" * 50)

    # Analyze the module source without importing it
    print("\n1️⃣ ANALYZING MODULE SOURCE")
    report = analyze_source(ORDERS_MODULE, path="orders.py")

    print("✅ Analysis completed!")
    print(f"   SQL calls analyzed: {report.calls_analyzed}")

    print(f"\n🚨 ISSUES ({len(report.issues)}):")
    for issue in report.issues:
        print(f"   - {issue.format()}")

    print(f"\n📋 ROW SHAPES ({len(report.shapes)}):")
    for row_shape in report.shapes:
        print(f"   - line {row_shape.line}: {row_shape.function} returns {row_shape.shape.describe()}")

    # The SQL analyzer can also be used directly on SQL text
    print("\n2️⃣ CHECKING SQL DIRECTLY")
    analyzer = SqlAnalyzer()
    diagnostics = analyzer.analyze_call_bind_vars(
        "SELECT name FROM customers WHERE id = :id",
        ["id", "region"],
    )
    for diagnostic in diagnostics:
        print(f"   - {diagnostic.kind.identifier}: {diagnostic.message}")


if __name__ == "__main__":
    main()
