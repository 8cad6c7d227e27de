# cli.py - interactive marketplace client
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.market import ApiError, MarketClient, parse_price
from sdk.views import DetailLoader, ListingLoader, ListingQuery, ViewState, is_owner

console = Console()

CURRENCY = "৳"

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def _env_user_id() -> Optional[int]:
    raw = os.environ.get("MARKET_USER_ID", "").strip()
    return int(raw) if raw.isascii() and raw.isdigit() else None


# ---------------------------
# Display helpers
# ---------------------------
def format_price(price: Any) -> str:
    return f"{CURRENCY} {price}"


def category_name(categories: List[Dict[str, Any]], category_id: Optional[int]) -> str:
    for cat in categories:
        if cat.get("id") == category_id:
            return cat.get("name", "")
    return "N/A"


def show_products(products: List[Dict[str, Any]], categories: List[Dict[str, Any]],
                  user_id: Optional[int], empty_message: str):
    if not products:
        console.print(f"[italic yellow]{empty_message}[/italic yellow]")
        return

    table = Table(
        title="📦 Products",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Title", style="bold", width=28)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Location", width=18)
    table.add_column("Category", width=15)
    table.add_column("Status", width=10)

    for p in products:
        status = "[yellow]Sold[/yellow]" if p.get("isSold") else "[green]Available[/green]"
        if is_owner(user_id, p):
            status += "\n[dim]yours[/dim]"
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("title", "N/A"),
            format_price(p.get("price", "")),
            p.get("location") or "No location",
            category_name(categories, p.get("categoryId")),
            status,
        )
    console.print(table)


def show_product(product: Dict[str, Any], categories: List[Dict[str, Any]], user_id: Optional[int]):
    lines = [
        f"[bold]{format_price(product.get('price', ''))}[/bold]",
        product.get("location") or "No location",
        f"Category: {category_name(categories, product.get('categoryId'))}",
        f"Image: {product.get('imageUrl') or 'No image'}",
    ]
    if product.get("description"):
        lines.append("")
        lines.append(product["description"])

    contacts = [label for key, label in (("showEmail", "Email"), ("showWhatsapp", "WhatsApp"),
                                         ("showMessenger", "Messenger")) if product.get(key)]
    lines.append("")
    lines.append(f"Contact via: {', '.join(contacts) if contacts else 'not shared'}")

    if is_owner(user_id, product):
        if product.get("isSold"):
            lines.append("[dim]Owner actions: Delete (already sold)[/dim]")
        else:
            lines.append("[dim]Owner actions: Mark Sold, Delete[/dim]")

    title = product.get("title", "N/A")
    if product.get("isSold"):
        title += " [yellow](Sold)[/yellow]"
    console.print(Panel("\n".join(lines), title=title, border_style="cyan"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def show_error(state: ViewState) -> bool:
    if state.status == "error":
        console.print(show_status(state.message or "Something went wrong", False))
        return True
    return False


# ---------------------------
# API wrapper
# ---------------------------
def with_spinner(fn, *args, **kwargs):
    """Calls fn(*args, **kwargs) while showing a spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        progress.add_task(description="Loading...", total=None)
        return fn(*args, **kwargs)


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) with a spinner. Prints an error panel and returns
    None when the call fails.
    """
    try:
        result = with_spinner(fn, *args, **kwargs)
    except ApiError as e:
        console.print(show_status(f"Error: {e.message}", False))
        return None
    if success_msg:
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def product_completer(products: List[Dict[str, Any]]):
    return WordCompleter([str(p.get("id")) for p in products if p.get("id") is not None])


def ask_category(categories: List[Dict[str, Any]], allow_all: bool) -> Optional[int]:
    """Returns a category id, or None for "All categories"."""
    names = {c["name"].lower(): c["id"] for c in categories}
    hint = " (blank for all)" if allow_all else ""
    completer = WordCompleter([c["name"] for c in categories], ignore_case=True, sentence=True)
    while True:
        raw = prompt_with_autocomplete(f"🏷️ Category{hint}", completer=completer).strip()
        if not raw and allow_all:
            return None
        if raw.lower() in names:
            return names[raw.lower()]
        console.print("[red]Please choose one of the listed categories.[/red]")


def create_header(user_id: Optional[int]):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    who = f"user {user_id}" if user_id is not None else "not logged in"
    header.add_row(
        "🛍️ Marketplace",
        f"[bold blue]Buy & sell listings[/bold blue] [dim]({who})[/dim]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Screens
# ---------------------------
class MarketCLI:
    def __init__(self, client: MarketClient):
        self.client = client
        self.query = ListingQuery(user_id=client.user_id)
        self.listing = ListingLoader(client)
        self.detail = DetailLoader(client)

    @property
    def user_id(self) -> Optional[int]:
        return self.query.user_id

    def refresh_listing(self):
        state = with_spinner(self.listing.load, self.query)
        if not show_error(state):
            show_products(state.data or [], self.listing.categories, self.user_id, self.query.empty_message)

    def list_all(self):
        self.query = self.query.select_view("all").select_category(None)
        self.refresh_listing()

    def filter_by_category(self):
        if not self.listing.categories:
            self.listing.load(self.query)
        category_id = ask_category(self.listing.categories, allow_all=True)
        self.query = self.query.select_view("all").select_category(category_id)
        self.refresh_listing()

    def my_products(self):
        if self.user_id is None:
            console.print(show_status("Login to see your products", False))
            return
        self.query = self.query.select_view("my")
        self.refresh_listing()

    def product_details(self):
        raw = prompt_with_autocomplete("Enter product ID", completer=product_completer(self.listing.state.data or []))
        state = with_spinner(self.detail.load, raw.strip())
        if show_error(state):
            return
        if not state.data:
            console.print("[italic yellow]Product not found.[/italic yellow]")
            return
        show_product(state.data, self.listing.categories, self.user_id)

    def create_product(self):
        if self.user_id is None:
            console.print(show_status("Please login first", False))
            return
        categories = try_api(self.client.list_categories)
        if not categories:
            console.print(show_status("No categories available", False))
            return

        category_id = ask_category(categories, allow_all=False)
        title = Prompt.ask("Title").strip()
        while not title:
            title = Prompt.ask("[red]Title is required[/red]").strip()
        while True:
            try:
                price = parse_price(Prompt.ask(f"💰 Price ({CURRENCY})"))
                break
            except ApiError as e:
                console.print(f"[red]{e.message}[/red]")
        description = Prompt.ask("Description (optional)", default="")
        location = Prompt.ask("Location (optional)", default="")
        image_url = Prompt.ask("Image URL (optional)", default="")
        show_email = Confirm.ask("Show Email?", default=True)
        show_whatsapp = Confirm.ask("Show Whatsapp?", default=False)
        show_messenger = Confirm.ask("Show Messenger?", default=False)

        created = try_api(
            self.client.create_product, category_id, title, price,
            description=description, location=location, image_url=image_url,
            show_email=show_email, show_whatsapp=show_whatsapp, show_messenger=show_messenger,
            success_msg=f"Product '{title}' created",
        )
        if created:
            self.detail.resolve(self.detail.begin(), created)
            show_product(created, categories, self.user_id)

    def _pick_owned_product(self) -> Optional[Dict[str, Any]]:
        if self.user_id is None:
            console.print(show_status("Please login first", False))
            return None
        owned = try_api(self.client.list_my_products) or []
        if not owned:
            console.print("[italic yellow]You have not created any products yet.[/italic yellow]")
            return None
        raw = prompt_with_autocomplete("Enter product ID", completer=product_completer(owned)).strip()
        for p in owned:
            if str(p.get("id")) == raw:
                return p
        console.print(show_status("You can only manage your own products", False))
        return None

    def mark_sold(self):
        product = self._pick_owned_product()
        if product is None:
            return
        if product.get("isSold"):
            console.print(show_status("Already sold", False))
            return
        state = with_spinner(self.listing.mark_sold, self.query, product["id"])
        if not show_error(state):
            console.print(show_status(f"'{product.get('title')}' marked as sold", True))
            show_products(state.data or [], self.listing.categories, self.user_id, self.query.empty_message)

    def delete_product(self):
        product = self._pick_owned_product()
        if product is None:
            return
        state = self.listing.delete(
            self.query, product["id"],
            confirm=lambda: Confirm.ask(f"[red]Delete '{product.get('title')}'?[/red]"),
        )
        if not show_error(state):
            show_products(state.data or [], self.listing.categories, self.user_id, self.query.empty_message)

    def switch_user(self):
        raw = Prompt.ask("User ID (blank to log out)", default="").strip()
        user_id = None
        if raw:
            if not (raw.isascii() and raw.isdigit()) or int(raw) <= 0:
                console.print(show_status("User ID must be a positive integer", False))
                return
            user_id = int(raw)
        self.client.set_user(user_id)
        self.query = self.query.with_user(user_id)
        if user_id is None and self.query.view == "my":
            self.query = self.query.select_view("all")
        console.print(show_status(f"Now acting as user {user_id}" if user_id else "Logged out", True))


# ---------------------------
# Main menu
# ---------------------------
def menu(cli: MarketCLI):
    console.clear()
    console.print(create_header(cli.user_id))
    cli.refresh_listing()

    actions = {
        "1": cli.list_all,
        "2": cli.filter_by_category,
        "3": cli.my_products,
        "4": cli.product_details,
        "5": cli.create_product,
        "6": cli.mark_sold,
        "7": cli.delete_product,
        "8": cli.switch_user,
    }

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 All products", "5", "➕ Create product"),
            ("2", "🏷️ Filter by category", "6", "✅ Mark sold"),
            ("3", "🙋 My products", "7", "🗑️ Delete product"),
            ("4", "ℹ️ Product details", "8", "👤 Switch user"),
            ("", "", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(list(actions) + ["q", "quit", "exit"])
        ).strip()

        if choice in actions:
            actions[choice]()
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thanks for visiting the marketplace! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)
        else:
            console.print("[red]Unknown option[/red]")

        console.print()
        console.rule(style="dim")


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Interactive marketplace client")
    parser.add_argument("--base-url", default=os.environ.get("MARKET_API_URL", "http://127.0.0.1:8085"))
    parser.add_argument("--user-id", type=int, default=_env_user_id(), help="Acting user id")
    args = parser.parse_args(argv)

    client = MarketClient(base_url=args.base_url, user_id=args.user_id)
    try:
        menu(MarketCLI(client))
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
