import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from hrdocs.config import settings

logger = logging.getLogger("hrdocs.database")


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def get_engine(url: str | None = None):
    url = url or settings.db_url
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _set_sqlite_pragmas)
        return engine
    return create_engine(url, pool_pre_ping=True)


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a unit of work: commit on success, roll back on any exception."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


SCHEMA_SQL = """\
-- ============================================================
-- FOLDERS (reference data)
-- ============================================================
CREATE TABLE IF NOT EXISTS document_folders (
    id                 TEXT PRIMARY KEY,
    company_id         TEXT NOT NULL,
    folder_name        TEXT NOT NULL,
    folder_description TEXT,
    display_order      INTEGER NOT NULL DEFAULT 0,
    is_system_folder   INTEGER NOT NULL DEFAULT 0,
    is_active          INTEGER NOT NULL DEFAULT 1,
    created_by         TEXT NOT NULL,
    updated_by         TEXT,
    created_at         TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at         TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_folders_company ON document_folders(company_id);

-- ============================================================
-- DOCUMENT TYPES
-- ============================================================
CREATE TABLE IF NOT EXISTS document_types (
    id                   TEXT PRIMARY KEY,
    company_id           TEXT NOT NULL,
    folder_id            TEXT NOT NULL REFERENCES document_folders(id),
    code                 TEXT NOT NULL,
    name                 TEXT NOT NULL,
    description          TEXT,
    allow_single         INTEGER NOT NULL DEFAULT 1,
    allow_multiple       INTEGER NOT NULL DEFAULT 0,
    is_mandatory         INTEGER NOT NULL DEFAULT 0,
    allow_not_applicable INTEGER NOT NULL DEFAULT 0,
    require_expiry_date  INTEGER NOT NULL DEFAULT 0,
    allowed_file_types   TEXT NOT NULL DEFAULT 'pdf,jpg,jpeg,png,doc,docx',
    max_file_size_mb     REAL NOT NULL DEFAULT 5.0,
    display_order        INTEGER NOT NULL DEFAULT 0,
    is_system_type       INTEGER NOT NULL DEFAULT 0,
    is_active            INTEGER NOT NULL DEFAULT 1,
    created_by           TEXT NOT NULL,
    updated_by           TEXT,
    created_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_types_company_code ON document_types(company_id, code);
CREATE INDEX IF NOT EXISTS idx_types_folder ON document_types(folder_id);

CREATE TABLE IF NOT EXISTS document_type_fields (
    id               TEXT PRIMARY KEY,
    document_type_id TEXT NOT NULL REFERENCES document_types(id) ON DELETE CASCADE,
    field_name       TEXT NOT NULL,
    field_label      TEXT NOT NULL,
    field_type       TEXT NOT NULL
                     CHECK(field_type IN ('text','textarea','number','date','time','datetime',
                                          'email','phone','url','single_select','multi_select',
                                          'checkbox','radio','file')),
    field_values     TEXT,
    placeholder      TEXT,
    default_value    TEXT,
    validation_rules TEXT,
    is_required      INTEGER NOT NULL DEFAULT 0,
    is_readonly      INTEGER NOT NULL DEFAULT 0,
    is_visible       INTEGER NOT NULL DEFAULT 1,
    display_order    INTEGER NOT NULL DEFAULT 0,
    help_text        TEXT,
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_fields_type_name ON document_type_fields(document_type_id, field_name);

-- ============================================================
-- EMPLOYEE DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS employee_documents (
    id                    TEXT PRIMARY KEY,
    company_id            TEXT NOT NULL,
    employee_id           TEXT NOT NULL,
    document_type_id      TEXT NOT NULL REFERENCES document_types(id),
    folder_id             TEXT NOT NULL,
    document_number       TEXT,
    document_description  TEXT,
    file_name             TEXT,
    file_path             TEXT,
    file_size_kb          REAL,
    file_type             TEXT,
    file_extension        TEXT,
    issue_date            TEXT,
    expiry_date           TEXT,
    is_not_applicable     INTEGER NOT NULL DEFAULT 0,
    not_applicable_reason TEXT,
    is_active             INTEGER NOT NULL DEFAULT 1,
    uploaded_by           TEXT NOT NULL,
    updated_by            TEXT,
    created_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_documents_slot
    ON employee_documents(company_id, employee_id, document_type_id, is_active, is_not_applicable);
CREATE INDEX IF NOT EXISTS idx_documents_folder ON employee_documents(folder_id);
CREATE INDEX IF NOT EXISTS idx_documents_expiry ON employee_documents(expiry_date);

-- field_id carries no FK: values of a deleted field stay behind, inert
CREATE TABLE IF NOT EXISTS employee_document_field_values (
    id                   TEXT PRIMARY KEY,
    employee_document_id TEXT NOT NULL REFERENCES employee_documents(id) ON DELETE CASCADE,
    field_id             TEXT NOT NULL,
    field_value          TEXT
);

CREATE INDEX IF NOT EXISTS idx_field_values_document ON employee_document_field_values(employee_document_id);

-- ============================================================
-- SLOT LOCKS (serializes count-then-insert per employee/type)
-- ============================================================
CREATE TABLE IF NOT EXISTS document_slot_locks (
    company_id       TEXT NOT NULL,
    employee_id      TEXT NOT NULL,
    document_type_id TEXT NOT NULL,
    version          INTEGER NOT NULL,
    updated_at       TEXT NOT NULL,
    PRIMARY KEY (company_id, employee_id, document_type_id)
);

-- ============================================================
-- AUDIT (append-only, no FKs so events outlive their targets)
-- ============================================================
CREATE TABLE IF NOT EXISTS document_audit_logs (
    id                     TEXT PRIMARY KEY,
    company_id             TEXT NOT NULL,
    employee_document_id   TEXT,
    document_type_id       TEXT,
    folder_id              TEXT,
    action                 TEXT NOT NULL
                           CHECK(action IN ('document_type_created','document_type_updated',
                                            'document_type_deleted','document_uploaded',
                                            'document_updated','document_deleted',
                                            'document_marked_na')),
    performed_by           TEXT NOT NULL,
    performed_on_behalf_of TEXT,
    action_details         TEXT,
    created_at             TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_audit_company ON document_audit_logs(company_id, created_at);
CREATE INDEX IF NOT EXISTS idx_audit_document ON document_audit_logs(employee_document_id);

CREATE TRIGGER IF NOT EXISTS audit_no_update BEFORE UPDATE ON document_audit_logs BEGIN
    SELECT RAISE(ABORT, 'audit log is append-only');
END;

CREATE TRIGGER IF NOT EXISTS audit_no_delete BEFORE DELETE ON document_audit_logs BEGIN
    SELECT RAISE(ABORT, 'audit log is append-only');
END;
"""


def init_db(db_path: Path | None = None):
    """Create the schema at db_path, or at the configured database_url."""
    if db_path is None:
        url = make_url(settings.db_url)
        if url.get_backend_name() != "sqlite":
            _create_from_metadata(settings.db_url)
            return
        db_path = Path(url.database)
    path = db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()
    logger.info("Schema applied to %s", path)


def _create_from_metadata(url: str):
    # Non-SQLite stores get the ORM tables; the audit triggers are SQLite-only.
    import hrdocs.models  # noqa: F401

    target = get_engine(url)
    try:
        Base.metadata.create_all(target)
    finally:
        target.dispose()
    logger.info("Schema created from metadata on %s", make_url(url).render_as_string(hide_password=True))
