"""
Interactive CLI — a terminal shell over the storefront core.

┌─────────────────────────────────────────────────────────────────────────┐
│  COMMAND      COMPONENTS USED                                           │
├─────────────────────────────────────────────────────────────────────────┤
│  login        AccountService → SessionStore                             │
│  products     CatalogCache                                              │
│  review       ReviewBoard → product re-fetch                            │
│  cart / qty   CheckoutCoordinator (re-fetch after every change)         │
│  checkout     CheckoutCoordinator → purchase sequence → CatalogCache    │
│  orders       OrderBook                                                 │
└─────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from kungfu import Ok, Error

from storefront._errors import StateError
from storefront.account import AccountService
from storefront.api import Cart, Product, ShopApi
from storefront.catalog import CatalogCache
from storefront.checkout import CheckoutCoordinator, PaymentType
from storefront.config import Settings
from storefront.lift import request
from storefront.orders import OrderBook, describe_status_code
from storefront.reviews import ReviewBoard, sorted_reviews
from storefront.session import FileStorage, SessionStore


# ═══════════════════════════════════════════════════════════════════════════════
# Wiring
# ═══════════════════════════════════════════════════════════════════════════════

class ConsoleNotifier:
    def info(self, message: str) -> None:
        print(f"  · {message}")

    def success(self, message: str) -> None:
        print(f"  ✓ {message}")

    def warning(self, message: str) -> None:
        print(f"  ⚠️  {message}")

    def error(self, message: str) -> None:
        print(f"  ✗ {message}")


@dataclass
class Shop:
    api: ShopApi
    session: SessionStore
    catalog: CatalogCache
    checkout: CheckoutCoordinator
    account: AccountService
    orders: OrderBook
    reviews: ReviewBoard

    @classmethod
    def connect(cls, settings: Settings) -> Shop:
        api = ShopApi(settings.api_url, timeout=settings.request_timeout)
        session = SessionStore(FileStorage(settings.session_file))
        catalog = CatalogCache(api, limit=settings.catalog_limit)
        coordinator = CheckoutCoordinator(
            api,
            session,
            catalog,
            notifier=ConsoleNotifier(),
            purchase_timeout=settings.purchase_timeout,
        )
        return cls(
            api=api,
            session=session,
            catalog=catalog,
            checkout=coordinator,
            account=AccountService(api, session),
            orders=OrderBook(api, session),
            reviews=ReviewBoard(api),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Help
# ═══════════════════════════════════════════════════════════════════════════════

HELP_TEXT = """
┌─────────────────────────────────────────────────────────────────────────────┐
│                              COMMANDS                                        │
├─────────────────────────────────────────────────────────────────────────────┤
│  login <email> <password>       Log in                                      │
│  register <email> <password>    Create an account and log in                │
│  logout                         Forget the session                          │
│  whoami                         Show the current identity                   │
├─────────────────────────────────────────────────────────────────────────────┤
│  products [category_id]         List active products                        │
│  categories                     List categories                             │
│  product <product_id> [asc]     Show one product and its reviews            │
│  review <product_id> <1-5> [comment]  Rate a product                        │
│  add <product_id> <qty>         Add a product to the cart                   │
│  cart                           Show the cart                               │
│  qty <product_id> <qty>         Change a line's quantity                    │
│  rm <product_id>                Remove a line                               │
│  checkout <card|cash> [phone]   Buy everything in the cart                  │
│  orders                         Purchase history                            │
│  profile <name> <last> [phone]  Update contact details                      │
├─────────────────────────────────────────────────────────────────────────────┤
│  help                           Show this help                              │
│  quit                           Exit                                        │
└─────────────────────────────────────────────────────────────────────────────┘
"""


def print_help() -> None:
    print(HELP_TEXT)


# ═══════════════════════════════════════════════════════════════════════════════
# Data Display
# ═══════════════════════════════════════════════════════════════════════════════

def print_products(shop: Shop, category_id: int | None = None) -> None:
    print("\n┌────────────────────────────────────────────────────────┐")
    print("│                       PRODUCTS                          │")
    print("├────────────────────────────────────────────────────────┤")
    for p in shop.catalog.active_only(category_id):
        print(f"│  [{p.id_key:4}] {p.name:28} ${p.price:>9.2f} x{p.stock:<4} │")
    print("└────────────────────────────────────────────────────────┘")


def print_reviews(product: Product, descending: bool = True) -> None:
    reviews = sorted_reviews(product, descending=descending)
    if not reviews:
        print("  No reviews yet.")
        return
    print(f"  Reviews ({len(reviews)}):")
    for r in reviews:
        stars = "★" * round(r.rating)
        print(f"    {stars:5} {r.rating:.1f}  {r.comment or ''}")


def print_cart(cart: Cart) -> None:
    if cart.is_empty:
        print("\n  Cart is empty.")
        return
    print("\n┌────────────────────────────────────────────────────────┐")
    print("│                         CART                            │")
    print("├────────────────────────────────────────────────────────┤")
    for line in cart.items:
        if line.adjustment_message:
            print(f"│  ⚠️  {line.adjustment_message:50} │")
        print(
            f"│  [{line.product_id:4}] {line.product.name:20} "
            f"{line.quantity:>3} x ${line.product.price:>8.2f} = ${line.subtotal:>9.2f} │"
        )
        print(f"│         stock available: {line.product.stock:<30} │")
    print("├────────────────────────────────────────────────────────┤")
    print(f"│  TOTAL: ${cart.total:>10.2f}                                     │")
    print("└────────────────────────────────────────────────────────┘")


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════

async def cmd_login(shop: Shop, email: str, password: str) -> None:
    match await shop.account.login(email, password):
        case Ok(identity):
            print(f"\n  ✓ Welcome back, {identity.name}!")
            await shop.checkout.load()
        case Error(e):
            print(f"\n  ✗ {e}")


async def cmd_register(shop: Shop, email: str, password: str) -> None:
    match await shop.account.register(email, password):
        case Ok(_):
            print("\n  ✓ Account created. Welcome!")
            await shop.checkout.load()
        case Error(e):
            print(f"\n  ✗ {e}")


def cmd_whoami(shop: Shop) -> None:
    identity = shop.session.current()
    if identity is None:
        print("\n  Guest (not logged in)")
        return
    admin = " [admin]" if identity.is_admin else ""
    print(f"\n  #{identity.id} {identity.display_name} <{identity.email}>{admin}")
    if identity.telephone:
        print(f"  Phone: {identity.telephone}")


async def cmd_cart(shop: Shop) -> None:
    match await shop.checkout.load():
        case Ok(cart):
            print_cart(cart)
        case Error(e):
            print(f"\n  ✗ {e}")


async def cmd_checkout(shop: Shop, payment: str, phone: str | None) -> None:
    form = shop.checkout.form(PaymentType.parse(payment))
    if phone is not None:
        form = replace(form, telephone=phone)

    save = False
    match shop.checkout.validate(form):
        case Ok(_) if shop.checkout.needs_profile_decision(form):
            answer = input("  Save the new contact details to your profile? [y/N] ")
            save = answer.strip().lower() in ("y", "yes")
        case _:
            pass

    match await shop.checkout.purchase(form, save_profile=save):
        case Ok(receipt):
            print(f"""
╔════════════════════════════════════════════════╗
║  ORDER {receipt.order_id:<40}║
╠════════════════════════════════════════════════╣
║  Bill:     {receipt.bill_number:36}║
║  Payment:  {receipt.payment_type.name.lower():36}║
║  Lines:    {len(receipt.line_ids):<36}║
║  TOTAL:    ${receipt.total:<35.2f}║
╚════════════════════════════════════════════════╝
""")
        case Error(e):
            print(f"\n  ✗ Checkout failed: {e}")


async def cmd_product(shop: Shop, product_id: int, descending: bool = True) -> None:
    match await request(lambda: shop.api.get_product(product_id)):
        case Ok(p):
            status = "" if p.active else " [inactive]"
            print(f"\n  #{p.id_key} {p.name}{status}")
            print(f"  ${p.price:.2f}  ·  stock: {p.stock}")
            print_reviews(p, descending)
        case Error(e):
            print(f"\n  ✗ {e}")


async def cmd_orders(shop: Shop) -> None:
    match await shop.orders.history():
        case Ok(orders):
            if not orders:
                print("\n  No purchases yet.")
            for order in orders:
                badge = describe_status_code(order.status)
                when = order.date.strftime("%Y-%m-%d %H:%M") if order.date else "-"
                print(f"\n  #{order.id_key}  {when}  ${order.total:.2f}  [{badge.label}]")
                for d in order.details:
                    name = d.product.name if d.product else f"Product #{d.product_id}"
                    print(f"      {d.quantity} x {name} @ ${d.price:.2f}")
        case Error(e):
            print(f"\n  ✗ {e}")


async def cmd_profile(shop: Shop, name: str, lastname: str, phone: str | None) -> None:
    match await shop.account.update_profile(name, lastname, phone):
        case Ok(_):
            print("\n  ✓ Profile updated")
        case Error(e):
            print(f"\n  ✗ {e}")


async def cmd_review(shop: Shop, pid: str, rating: str, comment: str) -> None:
    if (nums := parse_ints(pid)) is None:
        return
    try:
        stars = float(rating)
    except ValueError:
        print("  ✗ rating must be a number")
        return
    match await shop.reviews.submit(nums[0], stars, comment):
        case Ok(product):
            print("\n  ✓ Review added")
            print_reviews(product)
        case Error(e):
            print(f"\n  ✗ Could not post the review: {e}")


def report_refusal(result: object) -> None:
    """The coordinator notifies validation and request errors itself, not refusals."""
    match result:
        case Error(StateError() as e):
            print(f"  ✗ {e}")
        case _:
            pass


def parse_ints(*values: str) -> tuple[int, ...] | None:
    try:
        return tuple(int(v) for v in values)
    except ValueError:
        print("  ✗ ids and quantities must be numbers")
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Main Loop
# ═══════════════════════════════════════════════════════════════════════════════

BANNER = """
╔════════════════════════════════════════════════════════════════════════════╗
║                              STOREFRONT                                     ║
╚════════════════════════════════════════════════════════════════════════════╝
"""


async def run_cli(settings: Settings) -> None:
    shop = Shop.connect(settings)

    print(BANNER)
    print_help()

    match await shop.catalog.refresh():
        case Ok(_):
            print_products(shop)
        case Error(e):
            print(f"  ✗ Catalog unavailable: {e}")

    if shop.session.current() is not None:
        cmd_whoami(shop)
        await shop.checkout.load()

    try:
        while True:
            try:
                line = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break

            if not line:
                continue

            parts = line.split()
            cmd, args = parts[0].lower(), parts[1:]

            match cmd, args:
                case ("quit" | "exit" | "q"), _:
                    print("Bye!")
                    break

                case ("help" | "h" | "?"), _:
                    print_help()

                case "login", [email, password]:
                    await cmd_login(shop, email, password)

                case "register", [email, password]:
                    await cmd_register(shop, email, password)

                case "logout", []:
                    shop.account.logout()
                    print("\n  ✓ Logged out")

                case "whoami", []:
                    cmd_whoami(shop)

                case "products", []:
                    await shop.catalog.refresh()
                    print_products(shop)

                case "products", [cid]:
                    if (nums := parse_ints(cid)) is not None:
                        await shop.catalog.refresh()
                        print_products(shop, *nums)

                case "categories", []:
                    for c in shop.catalog.categories():
                        print(f"  [{c.id_key}] {c.name}")

                case "product", [pid]:
                    if (nums := parse_ints(pid)) is not None:
                        await cmd_product(shop, *nums)

                case "product", [pid, "asc"]:
                    if (nums := parse_ints(pid)) is not None:
                        await cmd_product(shop, *nums, descending=False)

                case "review", [pid, rating, *comment]:
                    await cmd_review(shop, pid, rating, " ".join(comment))

                case "add", [pid, qty]:
                    if (nums := parse_ints(pid, qty)) is not None:
                        report_refusal(await shop.checkout.add_item(*nums))

                case "cart", []:
                    await cmd_cart(shop)

                case "qty", [pid, qty]:
                    if (nums := parse_ints(pid, qty)) is not None:
                        match await shop.checkout.change_quantity(*nums):
                            case Ok(cart):
                                print_cart(cart)
                            case refused:
                                report_refusal(refused)

                case "rm", [pid]:
                    if (nums := parse_ints(pid)) is not None:
                        report_refusal(await shop.checkout.remove_line(*nums))

                case "checkout", [payment]:
                    await cmd_checkout(shop, payment, None)

                case "checkout", [payment, *phone]:
                    await cmd_checkout(shop, payment, " ".join(phone))

                case "orders", []:
                    await cmd_orders(shop)

                case "profile", [name, lastname, *phone]:
                    await cmd_profile(shop, name, lastname, " ".join(phone) or None)

                case _:
                    print(f"  ✗ Unknown command or wrong arguments: {line}")
                    print("  Type 'help' for available commands.")
    finally:
        await shop.api.aclose()


def main(argv: list[str] | None = None) -> None:
    env = Settings.from_env()
    parser = argparse.ArgumentParser(prog="storefront")
    parser.add_argument("--api-url", default=env.api_url)
    parser.add_argument("--session-file", default=str(env.session_file))
    parser.add_argument("--log-level", default=env.log_level)
    args = parser.parse_args(argv)

    settings = replace(
        env,
        api_url=args.api_url,
        session_file=Path(args.session_file).expanduser(),
        log_level=args.log_level.upper(),
    )
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_cli(settings))


if __name__ == "__main__":
    main()
