"""
budget_ingestion -- From raw budget files to validated LineRows.

Provides the row normalizer, the error taxonomy, typed row mapping, the
structural validator and CSV/XLSX source adapters.

Architecture:
    budget_ingestion/ is a top-level package. It imports budget_kernel
    only; nothing in budget_kernel/ or budget_engines/ imports from
    ingestion.
"""
