"""Simple example: aggregating a day and building the history view.

This demonstrates the key usage patterns: daily KPIs for both employees,
masking a deleted record, and the multi-day history table.
"""

from pos_kpi import DeletionMask, aggregate_day, build_daily_history, history_frame

records = [
    {"id": "s1", "tipo": "unitaria", "empleada": "Ingrid", "fecha": "2024-03-01", "hora": "10:05", "articulos": 1, "venta": 10},
    {"id": "s2", "tipo": "unitaria", "empleada": "Ingrid", "fecha": "2024-03-01", "hora": "11:40", "articulos": 2, "venta": 20},
    {"id": "s3", "tipo": "unitaria", "empleada": "Ingrid", "fecha": "2024-03-01", "hora": "12:15", "articulos": 1, "venta": 15},
    {"id": "r1", "tipo": "abono", "empleada": "Ingrid", "fecha": "2024-03-01", "hora": "13:00", "abono": 5},
    {"id": "c1", "tipo": "cierre", "empleada": "Ingrid", "fecha": "2024-03-01", "clientes": 20, "horasTrabajadas": 8},
    # Older one-row-per-day format
    {"id": "l1", "empleada": "Marta", "fecha": "2024-02-29", "clientes": 40, "operaciones": 12, "unidades": 20, "venta": 480, "abonos": 50, "horasTrabajadas": 8},
]

mask = DeletionMask()

# Example 1: One day, both employees and the combined total
print("Example 1: Daily KPIs")
print("-" * 60)
result = aggregate_day([r for r in records if r["fecha"] == "2024-03-01"], mask=mask)
ingrid = result.for_employee("Ingrid")
print(f"Ingrid: net {ingrid.net_sales:.2f}, conversion {ingrid.conversion}%, ticket {ingrid.avg_ticket}")
print(f"Total:  net {result.total.net_sales:.2f}, closed: {result.total.has_close}\n")

# Example 2: A deleted record stays hidden even if the store still returns it
print("Example 2: Masking a deleted sale")
print("-" * 60)
mask.add("s2")
result = aggregate_day([r for r in records if r["fecha"] == "2024-03-01"], mask=mask)
print(f"Ingrid operations after delete: {result.for_employee('Ingrid').operations}\n")

# Example 3: History view, newest day first
print("Example 3: History")
print("-" * 60)
history = build_daily_history(records, mask=mask)
print(history_frame(history).to_string(index=False))
print(f"\nIds to delete {history[-1].day}: {list(history[-1].source_record_ids)}")
