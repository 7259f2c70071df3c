"""
Module ORM Registry (``p2p_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` holds its table before tables are created.

Architecture position
---------------------
**Modules layer** -- utility.  Imports sibling ``p2p_modules`` packages and
``p2p_kernel.db.engine`` (modules -> kernel).  MUST NOT be imported by
``p2p_kernel``.

Usage
-----
Scripts and ``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``p2p_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import p2p_modules.ap.orm  # noqa: F401
    import p2p_modules.inventory.orm  # noqa: F401
    import p2p_modules.procurement.orm  # noqa: F401
    # fmt: on


def create_all_tables() -> None:
    """Register all module ORM models, then create every table.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from p2p_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
