"""Command-line interface for the storefront catalog."""

import argparse
import logging
import sys
from typing import List, Optional

from storefront.config import (
    BASE_CATALOG_PATH,
    DB_PATH,
    ITEMS_PER_PAGE,
    POLL_INTERVAL,
    SORT_CHOICES,
)
from storefront.csv_utils import export_products_to_csv
from storefront.errors import CatalogError
from storefront.logging_config import setup_logging
from storefront.models import Product
from storefront.query import ALL_CATEGORIES, Page, search_products
from storefront.services import Storefront, open_storefront
from storefront.storage import SQLiteStorage
from storefront.transfer import FileSink, read_document_file

__all__ = ["main", "parse_args", "show_stats", "print_page"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Storefront catalog admin: base catalog + overrides, inventory, import/export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List visible products, cheapest first
  python -m storefront.cli --list --sort price

  # Search hidden products too, second page
  python -m storefront.cli --list --include-hidden --search silk --page 2

  # Hide a product and set its stock
  python -m storefront.cli --hide abaya-02 --set-stock abaya-02 0

  # Back up overrides and inventory into ./backup
  python -m storefront.cli --export-overrides backup --export-inventory backup

  # Restore overrides from a backup (replaces all current overrides)
  python -m storefront.cli --import-overrides backup/catalog_overrides.json

  # Follow edits made by other processes on the same database
  python -m storefront.cli --watch
        """,
    )

    # Storage options
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite database path (default: {DB_PATH})")
    parser.add_argument(
        "--base-catalog",
        default=BASE_CATALOG_PATH,
        help="Base catalog file (.json or .csv; default: bundled catalog)",
    )

    # Listing
    parser.add_argument("--list", action="store_true", help="List products")
    parser.add_argument("--include-hidden", action="store_true", help="Include hidden products")
    parser.add_argument("--search", default="", help="Filter by text in title, description, tags or id")
    parser.add_argument("--category", default=ALL_CATEGORIES, help="Filter by category")
    parser.add_argument("--sort", choices=list(SORT_CHOICES), default="name", help="Sort order")
    parser.add_argument("--page", type=int, default=1, help="Page number")
    parser.add_argument(
        "--per-page", type=int, default=ITEMS_PER_PAGE,
        help=f"Products per page (default: {ITEMS_PER_PAGE})",
    )
    parser.add_argument("--list-categories", action="store_true", help="List categories and exit")
    parser.add_argument("--stats", action="store_true", help="Show catalog statistics and exit")

    # Edits
    parser.add_argument("--hide", metavar="ID", help="Hide a product")
    parser.add_argument("--unhide", metavar="ID", help="Show a hidden product again")
    parser.add_argument("--delete", metavar="ID", help="Delete a product")
    parser.add_argument("--duplicate", metavar="ID", help="Save a copy of a product")
    parser.add_argument(
        "--set-stock", nargs=2, metavar=("ID", "COUNT"),
        help="Set the stock count of a product",
    )

    # Import / export
    parser.add_argument("--export-overrides", metavar="DIR", help="Write catalog_overrides.json to DIR")
    parser.add_argument("--import-overrides", metavar="PATH", help="Replace all overrides from a JSON file")
    parser.add_argument("--clear-overrides", action="store_true", help="Remove all overrides")
    parser.add_argument("--export-inventory", metavar="DIR", help="Write inventory.json to DIR")
    parser.add_argument("--import-inventory", metavar="PATH", help="Replace all stock counts from a JSON file")
    parser.add_argument("--reset-inventory", action="store_true", help="Remove all stock counts")
    parser.add_argument("--export-csv", metavar="PATH", help="Export the merged catalog (hidden included) to CSV")

    # Watching
    parser.add_argument("--watch", action="store_true", help="Report changes made by other processes")
    parser.add_argument(
        "--interval", type=float, default=POLL_INTERVAL,
        help=f"Seconds between checks in --watch mode (default: {POLL_INTERVAL})",
    )

    # Logging
    parser.add_argument("--verbose", action="store_true", help="Debug output on the console")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write JSONL logs")

    return parser.parse_args(argv)


def _format_product(product: Product, stock: int) -> str:
    flags = []
    if product.hidden:
        flags.append("hidden")
    if product.on_sale:
        flags.append("sale")
    if product.is_new:
        flags.append("new")
    if product.is_best_seller:
        flags.append("best seller")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"  {product.id:<28} {product.price:>9.2f}  stock {stock:<5} {product.title}{suffix}"


def print_page(services: Storefront, page: Page) -> None:
    """Print one page of products with their stock."""
    if not page.items:
        print("No products found.")
        return
    for product in page.items:
        print(_format_product(product, services.inventory.get_stock(product.id)))
    print(f"\nPage {page.page}/{page.total_pages} ({page.total} products)")


def show_stats(services: Storefront) -> None:
    """Display catalog statistics."""
    catalog = services.catalog
    all_products = catalog.get_products(include_hidden=True)
    overrides = catalog.overrides.load()
    stock = services.inventory.list_stock()
    known_ids = {p.id for p in all_products}

    print(f"\n{'=' * 50}")
    print(f"Base catalog: {len(catalog.base)} products")
    print(f"{'=' * 50}")

    print(f"\nMerged catalog: {len(all_products)} products")
    print(f"  visible: {sum(1 for p in all_products if not p.hidden)}")
    print(f"  hidden:  {sum(1 for p in all_products if p.hidden)}")

    print("\nProducts by category:")
    for category in catalog.list_categories():
        count = sum(1 for p in all_products if p.category == category)
        print(f"  {category}: {count}")

    print(f"\nOverrides: {len(overrides)}")
    print(f"  deleted (tombstones): {sum(1 for o in overrides.values() if o.deleted)}")
    print(f"  added products: {sum(1 for i in overrides if i not in catalog.base)}")

    print(f"\nInventory entries: {len(stock)}")
    print(f"  total units: {sum(stock.values())}")
    print(f"  orphaned (no product): {sum(1 for i in stock if i not in known_ids)}")
    print()


def _watch(services: Storefront, interval: float) -> None:
    if not isinstance(services.storage, SQLiteStorage):
        raise CatalogError("--watch needs SQLite storage")

    def report(version: int) -> None:
        count = len(services.catalog.get_products(include_hidden=True))
        print(f"Catalog changed (version {version}): {count} products")

    services.catalog.on_external_change(report)
    services.inventory.subscribe(lambda key: print("Inventory changed"))
    print(f"Watching {services.storage.db_path} (Ctrl+C to stop)")
    try:
        services.storage.watch(interval=interval)
    except KeyboardInterrupt:
        print("\nStopped watching.")


def run(args: argparse.Namespace) -> None:
    """Execute the requested actions in a fixed order: imports, edits, exports, output."""
    services = open_storefront(db_path=args.db, base_catalog_path=args.base_catalog)
    catalog, inventory = services.catalog, services.inventory

    if args.list_categories:
        for category in catalog.list_categories():
            print(category)
        return

    if args.stats:
        show_stats(services)
        return

    # Imports replace whole tables, so they run before single edits
    if args.clear_overrides:
        catalog.clear_overrides()
        print("Cleared all overrides")
    if args.import_overrides:
        count = catalog.import_overrides(read_document_file(args.import_overrides))
        print(f"Imported {count} overrides from {args.import_overrides}")
    if args.reset_inventory:
        inventory.reset_inventory()
        print("Reset inventory")
    if args.import_inventory:
        count = inventory.import_inventory(read_document_file(args.import_inventory))
        print(f"Imported stock for {count} products from {args.import_inventory}")

    if args.hide:
        catalog.set_hidden(args.hide, True)
        print(f"Hid {args.hide}")
    if args.unhide:
        catalog.set_hidden(args.unhide, False)
        print(f"Unhid {args.unhide}")
    if args.duplicate:
        copy = catalog.duplicate_product(args.duplicate)
        print(f"Duplicated {args.duplicate} as {copy.id}")
    if args.delete:
        catalog.delete_product(args.delete)
        print(f"Deleted {args.delete}")
    if args.set_stock:
        product_id, raw_count = args.set_stock
        try:
            count = int(raw_count)
        except ValueError:
            raise CatalogError(f"Stock count must be an integer, got {raw_count!r}")
        inventory.set_stock(product_id, count)
        print(f"Stock for {product_id}: {count}")

    if args.export_overrides:
        catalog.export_overrides(sink=FileSink(args.export_overrides))
    if args.export_inventory:
        inventory.export_inventory(sink=FileSink(args.export_inventory))
    if args.export_csv:
        count = export_products_to_csv(catalog.get_products(include_hidden=True), args.export_csv)
        print(f"Exported {count} products to {args.export_csv}")

    if args.list:
        page = search_products(
            catalog.get_products(include_hidden=args.include_hidden),
            query=args.search,
            category=args.category,
            sort_by=args.sort,
            page=args.page,
            per_page=args.per_page,
        )
        print_page(services, page)

    if args.watch:
        _watch(services, args.interval)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_to_file=not args.no_log_file,
    )

    try:
        run(args)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
