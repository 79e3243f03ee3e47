"""Tests for CLI module."""

from pathlib import Path

import pytest

from quotebook.cli import (
    cmd_init,
    cmd_version,
    create_container,
    get_default_db_path,
    main,
)
from quotebook.domain.value_objects import DocumentStatus, DocumentType


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "quotebook.db"
    assert main(["-d", str(path), "init"]) == 0
    return path


def _seed_invoice(db_path: Path) -> str:
    with create_container(db_path) as container:
        client = container.client_service.create_client(
            "Acme Corp", primary_contact={"name": "Jane Doe"}
        )
        service = container.document_service
        invoice = service.create_document(DocumentType.INVOICE, client.id)
        invoice = service.add_item(invoice.id, description="Consulting\nMarch")
        service.update_item(invoice.id, invoice.items[0].id, "unit_price", "250")
        service.change_status(invoice.id, DocumentStatus.SENT)
        return str(invoice.id)


class TestGetDefaultDbPath:
    def test_returns_configured_path(self, monkeypatch):
        from quotebook.config import get_settings

        monkeypatch.setenv("QB_SQLITE_PATH", "/tmp/qb-test/books.db")
        get_settings.cache_clear()
        try:
            result = get_default_db_path()
        finally:
            get_settings.cache_clear()

        assert isinstance(result, Path)
        assert result == Path("/tmp/qb-test/books.db")


class TestCreateContainer:
    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dirs" / "test.db"

        with create_container(db_path) as container:
            assert container.settings_service.get_settings().quote_prefix == "Q"

        assert db_path.exists()


class TestCmdInit:
    def test_creates_new_database(self, tmp_path, capsys):
        db_path = tmp_path / "test.db"

        class Args:
            database = str(db_path)
            force = False

        result = cmd_init(Args())

        assert result == 0
        assert db_path.exists()
        assert "Initialized database at" in capsys.readouterr().out

    def test_refuses_existing_database(self, db_path, capsys):
        capsys.readouterr()

        result = main(["-d", str(db_path), "init"])

        assert result == 1
        assert "already exists" in capsys.readouterr().out

    def test_force_reinitializes(self, db_path, capsys):
        _seed_invoice(db_path)

        assert main(["-d", str(db_path), "init", "--force"]) == 0
        capsys.readouterr()

        main(["-d", str(db_path), "status"])
        assert "Clients: 0" in capsys.readouterr().out


class TestCmdVersion:
    def test_prints_version(self, capsys):
        result = cmd_version(None)

        assert result == 0
        assert "Quotebook v0.1.0" in capsys.readouterr().out


class TestCmdStatus:
    def test_missing_database(self, tmp_path, capsys):
        result = main(["-d", str(tmp_path / "missing.db"), "status"])

        assert result == 1
        assert "Database not found" in capsys.readouterr().out

    def test_shows_counts_and_next_numbers(self, db_path, capsys):
        _seed_invoice(db_path)
        capsys.readouterr()

        result = main(["-d", str(db_path), "status"])

        out = capsys.readouterr().out
        assert result == 0
        assert "Clients: 1" in out
        assert "Quotes: 0" in out
        assert "Invoices: 1" in out
        assert "Next invoice number: INV-002" in out


class TestClientCommands:
    def test_add_and_list(self, db_path, capsys):
        result = main(
            [
                "-d",
                str(db_path),
                "client",
                "add",
                "Globex",
                "--email",
                "billing@globex.test",
                "--currency",
                "eur",
                "--contact",
                "Hank",
            ]
        )
        out = capsys.readouterr().out
        assert result == 0
        assert "Client created:" in out
        assert "Currency: EUR" in out

        main(["-d", str(db_path), "client", "list"])
        assert "Globex" in capsys.readouterr().out

    def test_list_empty(self, db_path, capsys):
        capsys.readouterr()

        main(["-d", str(db_path), "client", "list"])

        assert "No clients found" in capsys.readouterr().out

    def test_list_shows_outstanding(self, db_path, capsys):
        _seed_invoice(db_path)
        capsys.readouterr()

        main(["-d", str(db_path), "client", "list"])

        assert "$250.00" in capsys.readouterr().out

    def test_group_without_subcommand_prints_help(self, db_path, capsys):
        assert main(["-d", str(db_path), "client"]) == 0
        assert "add" in capsys.readouterr().out


class TestDocumentCommands:
    def test_list_quotes_empty(self, db_path, capsys):
        capsys.readouterr()

        main(["-d", str(db_path), "doc", "list"])

        assert "No quotes found" in capsys.readouterr().out

    def test_list_invoices(self, db_path, capsys):
        _seed_invoice(db_path)
        capsys.readouterr()

        main(["-d", str(db_path), "doc", "list", "--type", "invoice"])

        out = capsys.readouterr().out
        assert "INV-001" in out
        assert "SENT" in out

    def test_show(self, db_path, capsys):
        document_id = _seed_invoice(db_path)
        capsys.readouterr()

        result = main(["-d", str(db_path), "doc", "show", document_id])

        out = capsys.readouterr().out
        assert result == 0
        assert "INVOICE INV-001" in out
        assert "Consulting" in out
        assert "Total: $250.00" in out
        assert "Amount due: $250.00" in out

    def test_show_invalid_id(self, db_path, capsys):
        result = main(["-d", str(db_path), "doc", "show", "not-a-uuid"])

        assert result == 1
        assert "Invalid document ID" in capsys.readouterr().out

    def test_show_unknown_document(self, db_path, capsys):
        result = main(
            ["-d", str(db_path), "doc", "show", "00000000-0000-0000-0000-000000000000"]
        )

        assert result == 1
        assert "Document not found" in capsys.readouterr().out

    def test_render_writes_pdf(self, db_path, tmp_path, capsys):
        document_id = _seed_invoice(db_path)
        output = tmp_path / "out.pdf"

        result = main(
            [
                "-d",
                str(db_path),
                "doc",
                "render",
                document_id,
                "--template",
                "modern",
                "-o",
                str(output),
            ]
        )

        assert result == 0
        assert output.read_bytes().startswith(b"%PDF")
        assert "Rendered INV-001" in capsys.readouterr().out


class TestSettingsCommands:
    def test_show_defaults(self, db_path, capsys):
        capsys.readouterr()

        result = main(["-d", str(db_path), "settings", "show"])

        out = capsys.readouterr().out
        assert result == 0
        assert "Business: Your Business" in out
        assert "Currency: USD (symbol_before)" in out
        assert "Quotes: next Q-001, valid for 30 days" in out
        assert "Template: classic" in out
