import logging
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from portfolio.core.config import settings
from portfolio.core.security import ADMIN_ROLE, USER_ROLE

logger = logging.getLogger(__name__)


def _engine_options(url: URL) -> dict:
    """Pool options for the given backend"""
    if url.get_backend_name() == "sqlite":
        # SQLite connections are used from FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    # Bounded pool, no overflow: extra callers queue until a connection is returned
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": 0,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


database_url = settings.get_database_url()

# Create database engine - manages connection pool
engine = create_engine(database_url, **_engine_options(database_url))

# Create session factory - each request gets a new session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even when the
    handler raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_database(url: URL) -> None:
    """
    Create the target database if it does not exist yet.

    Connects to the server without selecting the database. SQLite creates
    its file on first connect, so there is nothing to do for it.
    """
    backend = url.get_backend_name()
    name = url.database
    if backend == "sqlite" or not name:
        return

    if backend == "mysql":
        server_engine = create_engine(url.set(database=None))
        quoted = server_engine.dialect.identifier_preparer.quote(name)
        try:
            with server_engine.begin() as conn:
                conn.execute(text(
                    f"CREATE DATABASE IF NOT EXISTS {quoted} "
                    "DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                ))
        finally:
            server_engine.dispose()
    elif backend == "postgresql":
        # CREATE DATABASE cannot run inside a transaction block
        server_engine = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT")
        quoted = server_engine.dialect.identifier_preparer.quote(name)
        try:
            with server_engine.connect() as conn:
                exists = conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": name},
                ).scalar()
                if not exists:
                    conn.execute(text(
                        f"CREATE DATABASE {quoted} ENCODING 'UTF8' TEMPLATE template0"
                    ))
        finally:
            server_engine.dispose()
    else:
        logger.warning(f"Skipping database creation for unsupported backend '{backend}'")


def add_role_column(bind: Engine) -> None:
    """
    Add users.role to a table created before roles existed.

    create_all never alters existing tables. Existing rows get the user role,
    except the configured admin username.
    """
    columns = {column["name"] for column in inspect(bind).get_columns("users")}
    if "role" in columns:
        return

    logger.info("Adding role column to users table")
    with bind.begin() as conn:
        conn.execute(text(
            f"ALTER TABLE users ADD COLUMN role VARCHAR(20) NOT NULL DEFAULT '{USER_ROLE}'"
        ))
        conn.execute(
            text("UPDATE users SET role = :role WHERE username = :username"),
            {"role": ADMIN_ROLE, "username": settings.ADMIN_USERNAME},
        )


def init_db(bind: Engine = None) -> None:
    """
    Bootstrap the schema: create the database, then the tables, then
    upgrade a users table that predates the role column.

    Safe to run on every start. Raises when the database is unreachable
    and DB_BOOTSTRAP_REQUIRED is set; otherwise the failure is only logged.
    """
    bind = bind or engine
    # Register models on Base.metadata before create_all
    from portfolio.models import user, message  # noqa: F401

    try:
        ensure_database(bind.url)
        Base.metadata.create_all(bind=bind)
        add_role_column(bind)
    except Exception:
        logger.exception("Database initialization failed")
        if settings.DB_BOOTSTRAP_REQUIRED:
            raise
        return
    logger.info("Database initialized successfully")
