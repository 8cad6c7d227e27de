import asyncio

from sdk.market import MarketClient
from sdk.views import ListingLoader, ListingQuery


async def main():
    c = MarketClient(base_url="http://127.0.0.1:8085", user_id=42)
    categories = c.list_categories()
    if len(categories) < 2:
        print("Need at least two categories, run `python -m app.seed` first")
        return

    first, second = categories[0], categories[1]
    c.create_product(first["id"], f"Something in {first['name']}", 100)
    c.create_product(second["id"], f"Something in {second['name']}", 200)

    # Two filter changes in quick succession; the first response may land last
    loader = ListingLoader(c)
    query = ListingQuery(user_id=42)
    print(f"\n⚡ Loading {first['name']} then {second['name']} concurrently...")
    await asyncio.gather(
        loader.load_async(query.select_category(first["id"])),
        loader.load_async(query.select_category(second["id"])),
    )

    shown = {p["categoryId"] for p in loader.state.data}
    print(f"Status: {loader.state.status}, showing categories {shown}")
    print("✅ Latest filter kept" if shown <= {second["id"]} else "❌ Stale response shown")


if __name__ == "__main__":
    asyncio.run(main())
