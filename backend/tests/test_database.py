from sqlalchemy import create_engine, inspect

import hrdocs.models  # noqa: F401
from hrdocs.config import settings
from hrdocs.database import Base, init_db


def _tables(url):
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


class TestInitDb:
    def test_uses_configured_database_url(self, tmp_path, monkeypatch):
        db_file = tmp_path / "elsewhere" / "custom.db"
        monkeypatch.setattr(settings, "data_path", tmp_path / "unused")
        monkeypatch.setattr(settings, "database_url", f"sqlite:///{db_file}")

        init_db()

        assert db_file.exists()
        assert not (tmp_path / "unused").exists()
        assert "employee_documents" in _tables(f"sqlite:///{db_file}")

    def test_defaults_to_data_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "data_path", tmp_path / "HRDocs")
        monkeypatch.setattr(settings, "database_url", None)

        init_db()

        assert settings.db_path.exists()
        assert "document_slot_locks" in _tables(settings.db_url)

    def test_metadata_covers_schema(self, tmp_path):
        # Non-SQLite stores are built from the ORM metadata alone.
        db_file = tmp_path / "schema.db"
        init_db(db_file)
        assert set(Base.metadata.tables) == _tables(f"sqlite:///{db_file}")
