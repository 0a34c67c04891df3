"""
Seed a company with one shop for local development.
Prints the shop API key used as the bearer token.
"""
import argparse
import asyncio

from agegate.infrastructure.database import get_session, init_db
from agegate.infrastructure.database.session import dispose_engine
from agegate.modules.pricing import IDENTITY_METHODS
from agegate.modules.shops import ShopCreateInput, ShopRegistry


async def create_company(company_name: str, shop_name: str, methods: list[str]) -> None:
    await init_db()

    async for db in get_session():
        registry = ShopRegistry.with_session(db)
        company = await registry.create_company(company_name)
        shop = await registry.create_shop(
            ShopCreateInput(company_id=company.id, name=shop_name, allowed_methods=methods)
        )
        await db.commit()

        print(f"[company] {company.id} {company.name} ({company.currency})")
        print(f"[shop] {shop.id} {shop.name} methods={','.join(sorted(shop.allowed_methods))}")
        print(f"[shop] api key: {shop.api_key}")

    await dispose_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a company and a shop")
    parser.add_argument("--company", default="Demo s.r.o.", help="Company name")
    parser.add_argument("--shop", default="Demo e-shop", help="Shop name")
    parser.add_argument(
        "--methods",
        default=",".join(sorted(method.value for method in IDENTITY_METHODS)),
        help="Comma separated verification methods enabled for the shop",
    )
    args = parser.parse_args()
    methods = [name for name in args.methods.split(",") if name.strip()]
    asyncio.run(create_company(args.company, args.shop, methods))


if __name__ == "__main__":
    main()
