"""
P2P Kernel

Shared infrastructure for the procure-to-pay modules:
- Typed, code-tagged exception hierarchy
- Structured JSON logging with request-scoped context
- Injectable clock
- SQLAlchemy declarative base and engine helpers
"""

__version__ = "0.1.0"
