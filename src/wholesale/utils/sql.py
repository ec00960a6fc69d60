"""Direct SQLAlchemy access for what repositories cannot say through protean.

Protean's query API covers lookups and filters. Row locks, aggregate sums
across tables and recognising lock contention in driver errors need the
session and the generated models themselves.
"""

from contextlib import contextmanager

from protean.utils.globals import current_domain, current_uow
from protean.utils.reflection import id_field
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm.exc import StaleDataError

# PostgreSQL lock_not_available, deadlock_detected and serialization_failure
CONTENTION_SQLSTATES = frozenset({"55P03", "40P01", "40001"})


def model_for(element_cls):
    """The SQLAlchemy model protean generated for an aggregate or entity."""
    return current_domain.repository_for(element_cls)._dao.database_model_cls


@contextmanager
def session_for(repository):
    """Yield the session the repository writes through.

    Inside a unit of work this is the unit of work's own session. Outside one
    a standalone session is opened and closed on exit.
    """
    session = repository._dao._get_session()
    try:
        yield session
    finally:
        if not current_uow:
            session.close()


def lock_rows(repository, *identifiers):
    """Hold row locks on aggregate rows until the unit of work ends.

    Rows are locked in ascending identifier order and reloaded into the
    session, so a following ``repository.get`` sees their latest committed
    state. With ``LOCK_NOWAIT`` a row held by another transaction fails the
    statement at once. SQLite has no row locks; there only the reload happens
    and the version check at flush time detects conflicts.
    """
    dao = repository._dao
    model = dao.database_model_cls
    column = getattr(model, id_field(dao.entity_cls).attribute_name)

    stmt = (
        select(model)
        .where(column.in_(sorted(identifiers)))
        .order_by(column)
        .with_for_update(nowait=current_domain.LOCK_NOWAIT)
        .execution_options(populate_existing=True)
    )
    with session_for(repository) as session:
        return session.scalars(stmt).all()


def is_contention(exc: BaseException | None) -> bool:
    """True if ``exc`` means another transaction got in the way."""
    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, DBAPIError):
        if getattr(exc.orig, "pgcode", None) in CONTENTION_SQLSTATES:
            return True
        return "database is locked" in str(exc.orig)
    return False
