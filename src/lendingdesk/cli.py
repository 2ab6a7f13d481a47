"""Command-line interface for lendingdesk.

Built with Typer for commands and Rich for output. The ``session``
command is the desk itself: log in, browse the inventory, borrow, return
and check your status. The default database lives in memory, so
everything done in a session is gone when it ends.
"""

import logging
from datetime import date
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .accounts import AccountManager
from .catalog import SEED_BOOKS, Catalog
from .config import get_config
from .db import UserCreate, get_db
from .db.models import Book, User
from .errors import (
    AuthenticationError,
    LendingRuleError,
    RegistrationError,
    VetoActive,
)
from .lending import VETO_PERIOD, LendingEngine

# Create the main app
app = typer.Typer(
    name="lendingdesk",
    help="Borrow and return library books, one at a time.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()
err_console = Console(stderr=True)

DATE_FORMAT = "%d/%m/%Y"


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def fmt_date(value: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime(DATE_FORMAT)


def format_inventory_table(books: list[Book], own_code: Optional[str] = None) -> Table:
    """Create a rich table for the inventory.

    The row of the book the logged-in user holds is highlighted.
    """
    table = Table(title="Inventory", show_header=True, header_style="bold magenta")
    table.add_column("Code", style="dim")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Status")

    for book in books:
        status = f"[yellow]{book.status}[/yellow]" if book.on_loan else f"[green]{book.status}[/green]"
        table.add_row(
            book.code,
            book.title,
            book.author,
            status,
            style="black on light_green" if book.code == own_code else None,
        )

    return table


def setup_logging(level_name: str) -> None:
    """Send log records to stderr through Rich."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def resolve_today(value: Optional[str]) -> date:
    """Parse a --today option, falling back to the configured clock."""
    if value:
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise typer.BadParameter(f"Not a YYYY-MM-DD date: {value}")
    return get_config().today()


def bootstrap() -> tuple[Catalog, AccountManager, LendingEngine]:
    """Open the database and load the seed data if configured."""
    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    db = get_db(config.db_path)
    catalog = Catalog(db)
    accounts = AccountManager(db)
    if config.seed:
        catalog.seed(SEED_BOOKS)
        accounts.seed_demo_account()

    return catalog, accounts, LendingEngine(db, catalog)


def _prompt_registration() -> Optional[UserCreate]:
    """Ask for the registration fields, return None if they do not validate."""
    full_name = typer.prompt("Full name", default="", show_default=False)
    identity_number = typer.prompt("Identity number")
    birth_date = typer.prompt("Birth date (DD/MM/YYYY)", default="", show_default=False)
    age = typer.prompt("Age")
    gender = typer.prompt("Gender", default="", show_default=False)
    email = typer.prompt("Email", default="", show_default=False)
    username = typer.prompt("Username")
    password = typer.prompt("Password", hide_input=True)

    try:
        return UserCreate(
            full_name=full_name,
            identity_number=identity_number,
            birth_date=birth_date,
            age=age,
            gender=gender,
            email=email,
            username=username,
            password=password,
        )
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            if field == "age" and err["type"] == "int_parsing":
                print_error("Age must be a valid number.")
            else:
                print_error(f"{field}: {err['msg']}")
        return None


def _register(accounts: AccountManager) -> Optional[User]:
    data = _prompt_registration()
    if data is None:
        return None
    try:
        user = accounts.register(data)
    except RegistrationError as e:
        print_error(str(e))
        return None
    print_success(f"Registered {user.username}. You can log in now.")
    return user


# ============================================================================
# Desk actions (shared by the interactive session)
# ============================================================================


def show_books(catalog: Catalog, engine: LendingEngine, user: Optional[User] = None) -> None:
    """Print the inventory, highlighting the user's own loan."""
    own_code = engine.active_book_code(user.identity_number) if user else None
    console.print(format_inventory_table(catalog.list_all(), own_code))


def do_borrow(engine: LendingEngine, user: User, code: str, today: date) -> bool:
    """Borrow a book and report the outcome."""
    try:
        loan = engine.borrow(user.identity_number, code, today)
    except VetoActive as e:
        print_warning(f"You cannot borrow books. You are vetoed until: {fmt_date(e.until)}")
        return False
    except LendingRuleError as e:
        print_error(str(e))
        return False

    print_success("Loan registered!")
    console.print(f"Book: [cyan]{loan.book_title}[/cyan]")
    console.print(f"Return by: [bold]{fmt_date(loan.due_date)}[/bold]")
    return True


def do_return(engine: LendingEngine, user: User, today: date) -> bool:
    """Return the user's book and report on-time or late."""
    try:
        outcome = engine.give_back(user.identity_number, today)
    except LendingRuleError as e:
        print_info(str(e))
        return False

    if outcome.is_late:
        print_warning(
            f"LATE return of '{outcome.book_title}'! As a penalty you are vetoed for "
            f"{VETO_PERIOD.days} days, until {fmt_date(outcome.veto_until)}."
        )
    else:
        print_success(f"'{outcome.book_title}' returned on time. Thank you!")
    return True


def show_status(engine: LendingEngine, user: User, today: date) -> None:
    """Print the user's veto and loan status."""
    snapshot = engine.describe_status(user.identity_number, today)

    if snapshot.vetoed:
        text = (
            "Status: [bold red]VETOED[/bold red] ❌\n"
            f"You cannot borrow books until: {fmt_date(snapshot.veto_until)}"
        )
        style = "red"
    else:
        text = "Status: [bold green]ACTIVE[/bold green] ✅\nYou have no fines or vetoes."
        style = "green"

    if snapshot.has_active_loan:
        text += (
            "\n\n--- Book on loan ---\n"
            f"Title: {snapshot.book_title}\n"
            f"Due date: {fmt_date(snapshot.due_date)}"
        )
    else:
        text += "\n\nYou have no books on loan."

    text += f"\nBooks borrowed so far: {snapshot.loan_history_count}"
    console.print(Panel(text, title=f"User status: {user.username}", style=style))


# ============================================================================
# Commands
# ============================================================================


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Borrow and return library books, one at a time."""
    setup_logging("DEBUG" if verbose else get_config().log_level)


@app.command("books")
def books_command() -> None:
    """Show the inventory with availability."""
    catalog, _, engine = bootstrap()
    show_books(catalog, engine)


@app.command("register")
def register_command() -> None:
    """Register a new user."""
    _, accounts, _ = bootstrap()
    if _register(accounts) is None:
        raise typer.Exit(1)


@app.command("session")
def session_command(
    today: Optional[str] = typer.Option(
        None, "--today", "-t", help="Pretend today is this date (YYYY-MM-DD)"
    ),
) -> None:
    """Open the desk: log in, then borrow, return and check your status."""
    current = resolve_today(today)
    catalog, accounts, engine = bootstrap()

    console.print(Panel("[bold]Library lending desk[/bold]", style="blue"))
    if engine.db.is_memory:
        print_info("In-memory database: nothing is kept after this session.")

    while True:
        action = typer.prompt("\n[l]ogin, [r]egister or [q]uit", default="l").strip().lower()

        if action == "q":
            console.print("[dim]Goodbye.[/dim]")
            return
        if action == "r":
            _register(accounts)
            continue
        if action != "l":
            print_error(f"Unknown option: {action}")
            continue

        username = typer.prompt("Username")
        password = typer.prompt("Password", hide_input=True)
        try:
            user = accounts.authenticate(username, password)
        except AuthenticationError as e:
            print_error(str(e))
            continue

        console.print(f"\n[bold]Welcome, {user.username}![/bold]")
        show_books(catalog, engine, user)
        _desk_loop(catalog, engine, user, current)


def _desk_loop(catalog: Catalog, engine: LendingEngine, user: User, today: date) -> None:
    menu = (
        "\n[1] Show books  [2] Borrow a book  [3] Return my book  "
        "[4] My status  [5] Log out"
    )
    while True:
        console.print(menu)
        choice = typer.prompt("Choose", default="1").strip()

        if choice == "1":
            show_books(catalog, engine, user)
        elif choice == "2":
            code = typer.prompt("Book code").strip()
            if do_borrow(engine, user, code, today):
                show_books(catalog, engine, user)
        elif choice == "3":
            if do_return(engine, user, today):
                show_books(catalog, engine, user)
        elif choice == "4":
            show_status(engine, user, today)
        elif choice == "5":
            console.print("[dim]Logged out.[/dim]")
            return
        else:
            print_error(f"Unknown option: {choice}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"lendingdesk version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
