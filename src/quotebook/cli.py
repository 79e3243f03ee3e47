"""Command-line interface for Quotebook."""

import argparse
import os
import sys
from pathlib import Path
from uuid import UUID

from quotebook import __version__
from quotebook.config import get_settings
from quotebook.container import Container
from quotebook.domain.currency_format import format_currency
from quotebook.domain.documents import Document
from quotebook.domain.value_objects import DocumentType
from quotebook.exceptions import QuotebookError
from quotebook.repositories.sqlite import SQLiteDatabase
from quotebook.templates.base import plain_number


def get_default_db_path() -> Path:
    """Get the database path configured through QB_SQLITE_PATH."""
    return Path(get_settings().sqlite_path)


def _db_path(args: argparse.Namespace) -> Path:
    return Path(args.database) if args.database else get_default_db_path()


def create_container(db_path: Path | None = None) -> Container:
    """Open the database at ``db_path`` and wire the services around it."""
    if db_path is None:
        db_path = get_default_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = SQLiteDatabase(str(db_path))
    db.initialize()
    return Container(database=db)


def _open_existing(args: argparse.Namespace) -> Container | None:
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        print("Run 'quotebook init' to create a new database")
        return None
    return create_container(db_path)


def _parse_id(value: str, label: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        print(f"Error: Invalid {label} ID: {value}")
        return None


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = _db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    with create_container(db_path) as container:
        container.settings_service.get_settings()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        clients = container.client_service.list_clients()
        quotes = container.document_service.list_quotes()
        invoices = container.document_service.list_invoices()
        settings = container.settings_service.get_settings()

        print(f"Database: {container.database.path}")
        print(f"Clients: {len(clients)}")
        print(f"Quotes: {len(quotes)}")
        print(f"Invoices: {len(invoices)}")
        print(f"Next quote number: {settings.peek_number(DocumentType.QUOTE)}")
        print(f"Next invoice number: {settings.peek_number(DocumentType.INVOICE)}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Quotebook v{__version__}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    if args.database:
        os.environ["QB_SQLITE_PATH"] = str(args.database)
        get_settings.cache_clear()
    settings = get_settings()

    uvicorn.run(
        "quotebook.api.app:create_app",
        factory=True,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload or settings.api_reload,
    )
    return 0


def cmd_client_add(args: argparse.Namespace) -> int:
    """Add a client, with a primary contact when a contact name is given."""
    container = _open_existing(args)
    if container is None:
        return 1

    details = {
        key: value
        for key, value in (
            ("email", args.email),
            ("phone", args.phone),
            ("currency", args.currency),
        )
        if value
    }
    contact = {"name": args.contact} if args.contact else None

    with container:
        try:
            client = container.client_service.create_client(
                args.name, details=details, primary_contact=contact
            )
        except QuotebookError as e:
            print(f"Error: {e.message}")
            return 1

    print(f"Client created: {client.id}")
    print(f"  Name: {client.name}")
    print(f"  Currency: {client.currency}")
    return 0


def cmd_client_list(args: argparse.Namespace) -> int:
    """List clients with their outstanding balance."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        balances = container.client_service.list_clients()

    if not balances:
        print("No clients found")
        return 0

    print(f"{'ID':<36}  {'Name':<30}  {'Open':>4}  {'Outstanding':>14}")
    print("-" * 90)
    for balance in balances:
        client = balance.client
        outstanding = format_currency(balance.outstanding, client.currency)
        print(
            f"{str(client.id):<36}  {client.name[:30]:<30}  "
            f"{balance.open_invoices:>4}  {outstanding:>14}"
        )
    return 0


def cmd_doc_list(args: argparse.Namespace) -> int:
    """List quotes or invoices."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        service = container.document_service
        if args.type == "invoice":
            documents = service.list_invoices()
        else:
            documents = service.list_quotes()

    if not documents:
        print(f"No {args.type}s found")
        return 0

    print(f"{'Number':<12}  {'Status':<10}  {'Issued':<10}  {'Total':>14}  ID")
    print("-" * 90)
    for doc in documents:
        total = format_currency(doc.total, doc.currency)
        print(
            f"{doc.document_number:<12}  {doc.status.value:<10}  "
            f"{doc.issue_date.isoformat():<10}  {total:>14}  {doc.id}"
        )
    return 0


def _print_document(document: Document) -> None:
    def money(value) -> str:
        return format_currency(value, document.currency)

    print(f"{document.document_type.value} {document.document_number}")
    print(f"  Status: {document.status.value}")
    print(f"  Client: {document.client_id}")
    print(f"  Issued: {document.issue_date.isoformat()}")
    if document.due_date:
        print(f"  Due: {document.due_date.isoformat()}")
    if document.valid_until:
        print(f"  Valid until: {document.valid_until.isoformat()}")
    print("  Items:")
    for item in sorted(document.items, key=lambda i: i.order):
        description = item.description.splitlines()[0] if item.description else "-"
        print(
            f"    {description[:40]:<40}  {plain_number(item.quantity):>6} x "
            f"{money(item.unit_price):>12}  {money(item.amount):>12}"
        )
    print(f"  Subtotal: {money(document.subtotal)}")
    print(f"  Tax ({plain_number(document.tax_rate)}%): {money(document.tax_amount)}")
    print(f"  Discount: {money(document.discount_amount)}")
    print(f"  Total: {money(document.total)}")
    if document.is_invoice:
        print(f"  Paid: {money(document.amount_paid)}")
        print(f"  Amount due: {money(document.amount_due)}")


def cmd_doc_show(args: argparse.Namespace) -> int:
    """Show a document with its items and totals."""
    document_id = _parse_id(args.document_id, "document")
    if document_id is None:
        return 1
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        try:
            document = container.document_service.get_document(document_id)
        except QuotebookError as e:
            print(f"Error: {e.message}")
            return 1

    _print_document(document)
    return 0


def cmd_doc_render(args: argparse.Namespace) -> int:
    """Render a document to a PDF file."""
    document_id = _parse_id(args.document_id, "document")
    if document_id is None:
        return 1
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        service = container.document_service
        try:
            document = service.get_document(document_id)
            pdf = service.render(document_id, args.template)
        except QuotebookError as e:
            print(f"Error: {e.message}")
            return 1

    output = Path(args.output) if args.output else Path(f"{document.document_number}.pdf")
    output.write_bytes(pdf)
    print(f"Rendered {document.document_number} to {output}")
    return 0


def cmd_settings_show(args: argparse.Namespace) -> int:
    """Show the business profile and document defaults."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        profile = container.settings_service.get_profile()
        settings = container.settings_service.get_settings()

    print(f"Business: {profile.business_name}")
    print(f"  Brand color: {profile.brand_color}")
    print(f"Currency: {settings.default_currency} ({settings.currency_display_format.value})")
    if settings.show_tax_settings:
        print(f"Tax: {settings.tax_name} {plain_number(settings.default_tax_rate)}%")
    print(
        f"Quotes: next {settings.peek_number(DocumentType.QUOTE)}, "
        f"valid for {settings.quote_validity_days} days"
    )
    print(
        f"Invoices: next {settings.peek_number(DocumentType.INVOICE)}, "
        f"due in {settings.invoice_default_due_days} days"
    )
    print(f"Template: {settings.selected_template_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quotebook",
        description="Quotebook - Quotes and invoices for small businesses",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show database status")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload"
    )
    serve_parser.set_defaults(func=cmd_serve)

    # client command group
    client_parser = subparsers.add_parser("client", help="Client commands")
    client_subparsers = client_parser.add_subparsers(
        dest="client_command", help="Client commands"
    )

    client_add_parser = client_subparsers.add_parser("add", help="Add a client")
    client_add_parser.add_argument("name", help="Client name")
    client_add_parser.add_argument("--email", default=None, help="Client email")
    client_add_parser.add_argument("--phone", default=None, help="Client phone")
    client_add_parser.add_argument(
        "--currency", default=None, help="Billing currency (e.g. EUR)"
    )
    client_add_parser.add_argument(
        "--contact", default=None, help="Name of the primary contact"
    )
    client_add_parser.set_defaults(func=cmd_client_add)

    client_list_parser = client_subparsers.add_parser("list", help="List clients")
    client_list_parser.set_defaults(func=cmd_client_list)

    # doc command group
    doc_parser = subparsers.add_parser("doc", help="Quote and invoice commands")
    doc_subparsers = doc_parser.add_subparsers(
        dest="doc_command", help="Document commands"
    )

    doc_list_parser = doc_subparsers.add_parser("list", help="List documents")
    doc_list_parser.add_argument(
        "--type",
        "-t",
        choices=["quote", "invoice"],
        default="quote",
        help="Document type (default: quote)",
    )
    doc_list_parser.set_defaults(func=cmd_doc_list)

    doc_show_parser = doc_subparsers.add_parser("show", help="Show a document")
    doc_show_parser.add_argument("document_id", help="Document ID")
    doc_show_parser.set_defaults(func=cmd_doc_show)

    doc_render_parser = doc_subparsers.add_parser("render", help="Render a document to PDF")
    doc_render_parser.add_argument("document_id", help="Document ID")
    doc_render_parser.add_argument(
        "--template", default=None, help="Template ID (default: selected template)"
    )
    doc_render_parser.add_argument(
        "--output", "-o", default=None, help="Output file (default: <number>.pdf)"
    )
    doc_render_parser.set_defaults(func=cmd_doc_render)

    # settings command group
    settings_parser = subparsers.add_parser("settings", help="Settings commands")
    settings_subparsers = settings_parser.add_subparsers(
        dest="settings_command", help="Settings commands"
    )
    settings_show_parser = settings_subparsers.add_parser("show", help="Show settings")
    settings_show_parser.set_defaults(func=cmd_settings_show)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "client" and (
        not hasattr(args, "client_command") or args.client_command is None
    ):
        client_parser.print_help()
        return 0

    if args.command == "doc" and (
        not hasattr(args, "doc_command") or args.doc_command is None
    ):
        doc_parser.print_help()
        return 0

    if args.command == "settings" and (
        not hasattr(args, "settings_command") or args.settings_command is None
    ):
        settings_parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
