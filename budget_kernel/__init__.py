"""
Budget Kernel

Pure building blocks for hierarchical budget processing:
- Decimal-only amount handling with explicit half-up rounding
- Integer-sequence node identifiers (no string-prefix matching)
- Frozen row, node and validation-error types
- Structured JSON logging shared by every layer
"""

__version__ = "0.1.0"
