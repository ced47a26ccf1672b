"""Storefront database management CLI.

Creates and drops the storefront schema, and seeds catalogue entries that
orders can reference.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
    python src/manage.py seed-product "Portfolio Template" 5000
    python src/manage.py seed-platform "Orange Money"
"""

import argparse
import sys


def _storefront():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _storefront()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _storefront()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def seed_product(name, fee):
    from storefront.catalogue.product import Product

    domain = _storefront()
    with domain.domain_context():
        product = Product.register(name=name, fee=fee)
        domain.repository_for(Product).add(product)
    print(f"Product {name!r} registered with id {product.id} and fee {fee}.")


def seed_platform(name):
    from storefront.catalogue.platform import PaymentPlatform

    domain = _storefront()
    with domain.domain_context():
        platform = PaymentPlatform(name=name)
        domain.repository_for(PaymentPlatform).add(platform)
    print(f"Payment platform {name!r} registered with id {platform.id}.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    product_parser = subparsers.add_parser("seed-product", help="Register a product")
    product_parser.add_argument("name")
    product_parser.add_argument("fee", type=int)

    platform_parser = subparsers.add_parser("seed-platform", help="Register a payment platform")
    platform_parser.add_argument("name")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-product":
        seed_product(args.name, args.fee)
    elif args.command == "seed-platform":
        seed_platform(args.name)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
