"""Database engine and session factory construction."""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()

# Driver shipped with psycopg2-binary
POSTGRES_DRIVER = "postgresql+psycopg2"


def resolve_database_url(database_url: str) -> URL:
    """Parse ``database_url`` and pin PostgreSQL URLs to the psycopg2 driver.

    Heroku-style ``postgres://`` URLs are accepted as ``postgresql``. An
    explicit driver (``postgresql+asyncpg://...``) is left untouched.
    """
    url = make_url(database_url)
    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername=POSTGRES_DRIVER)
    elif url.drivername.startswith("postgres+"):
        url = url.set(drivername="postgresql+" + url.drivername.split("+", 1)[1])
    return url


def create_db_engine(database_url: str, ssl_required: bool = False) -> Engine:
    """Create a database engine for the given URL.

    PostgreSQL engines get connection pooling and, when ``ssl_required`` is set,
    ``sslmode=require``. SQLite engines share a single connection so that an
    in-memory database survives across sessions.

    Args:
        database_url: SQLAlchemy connection URL
        ssl_required: Require SSL on PostgreSQL connections

    Returns:
        Engine: SQLAlchemy engine (no connection is opened yet)

    Example:
        ```python
        from donation_api.database import create_db_engine

        engine = create_db_engine("postgresql://user:pw@localhost/donations", ssl_required=True)
        ```
    """
    url = resolve_database_url(database_url)

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    connect_args = {"sslmode": "require"} if ssl_required else {}
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,  # Number of connections to maintain
        max_overflow=20,  # Maximum number of connections beyond pool_size
        echo=False,  # Set to True for SQL query logging in development
        connect_args=connect_args,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to ``engine``."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_database(engine: Engine, create_tables: bool = False) -> None:
    """Check the database is reachable and optionally create missing tables.

    Args:
        engine: Engine to initialize
        create_tables: Run ``Base.metadata.create_all`` after the connection check

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
    """
    # Register the mapped classes on Base.metadata
    import donation_api.models  # noqa: F401

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))

    if create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
