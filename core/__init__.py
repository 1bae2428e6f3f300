"""Core (UI-agnostic) dashboard logic.

This package contains:
- data loading (activity XLSX -> immutable records, KPI workbook, marketing JSON)
- date-range normalization
- page compute functions (JSON-serializable payloads)
- the executive summary digest
"""
