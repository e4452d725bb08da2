from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from students_api.core.exceptions import StorageError
import logging

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


# =============================================================================
# DATABASE ENGINE CONFIGURATION
# =============================================================================

def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for the storage location.

    The engine is built once at startup and handed to whoever needs it;
    nothing in this module keeps a reference to it.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Requests are served from a thread pool
        connect_args["check_same_thread"] = False

    engine = create_engine(
        database_url,
        pool_pre_ping=True,  # Test connection before using (detect disconnects)
        echo=echo,  # Print all SQL queries to console
        connect_args=connect_args,
    )
    event.listen(engine, "connect", _on_connect)
    return engine


def _on_connect(dbapi_conn, connection_record):
    """
    Event listener for new database connections.
    """
    logger.debug("New database connection established")


# =============================================================================
# SESSION CONFIGURATION
# =============================================================================

def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autoflush=False,   # Don't auto-flush before queries
        bind=engine,
        expire_on_commit=False  # Don't expire objects after commit
    )


# =============================================================================
# DATABASE UTILITIES
# =============================================================================

def create_database_tables(engine: Engine):
    """
    Create all database tables defined in models.

    Existing tables are left untouched, so calling this on every start is safe.
    """
    from students_api.models import student  # noqa: F401  registers the table on Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully!")


def check_database_connection(engine: Engine) -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.debug("Database connection successful!")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


# =============================================================================
# INITIALIZATION
# =============================================================================

def init_db(engine: Engine):
    """
    Initialize database.
    Run this when starting the application.
    """
    logger.info("Initializing database...")

    if not check_database_connection(engine):
        raise StorageError("Failed to initialize storage", "cannot connect to database")

    try:
        create_database_tables(engine)
    except SQLAlchemyError as e:
        raise StorageError("Failed to initialize storage", f"create table failed: {e}") from e

    logger.info("Database initialized successfully!")
