import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, List, Optional, TypeVar, Generic, Type

from sqlalchemy import select, func, Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from database.repositories.exceptions import (
    RepositoryError,
    DatabaseConnectionError,
)

# Set up logger
logger = logging.getLogger(__name__)

# Type variable for ORM models
T = TypeVar("T")

class BaseRepository(Generic[T]):
    """
    Base repository class providing the read-only ledger primitives.

    Every analytics query reduces to one of three shapes: a count, a sum over a
    column, or a list of rows. All of them take SQLAlchemy criteria so the
    entity repositories only have to express filters.
    """

    def __init__(self, engine: Engine, model_class: Type[T] = None):
        """
        Initialize the repository.

        Args:
            engine: Shared, pooled SQLAlchemy engine owned by the application
            model_class: The SQLAlchemy model class this repository manages (optional)
        """
        if engine is None:
            raise DatabaseConnectionError("Repository requires a database engine")
        self._engine: Engine = engine
        self.model_class = model_class
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def session(self) -> Session:
        """
        Context manager for read sessions.
        Translates driver errors into RepositoryError.
        """
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database Error in session: {e}")
            raise RepositoryError(f"Database error: {e}")
        except Exception as e:
            session.rollback()
            logger.error(f"Unexpected error in session: {e}")
            raise e
        finally:
            session.close()

    # Ledger primitives

    def count(self, *criteria, model=None) -> int:
        """Count rows of the managed model (or `model`) matching all criteria."""
        stmt = select(func.count()).select_from(model if model is not None else self.model_class)
        if criteria:
            stmt = stmt.where(*criteria)
        with self.session() as session:
            return int(session.execute(stmt).scalar() or 0)

    def sum(self, column, *criteria) -> Optional[Decimal]:
        """Sum a column over the rows matching all criteria. None when no row matches."""
        stmt = select(func.sum(column))
        if criteria:
            stmt = stmt.where(*criteria)
        with self.session() as session:
            result = session.execute(stmt).scalar()
        if result is None:
            return None
        # SQLite hands back floats for NUMERIC sums
        return result if isinstance(result, Decimal) else Decimal(str(result))

    def list(self, stmt) -> List[Any]:
        """Execute a select and return its rows as plain Row tuples."""
        with self.session() as session:
            return session.execute(stmt).all()
