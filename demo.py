#!/usr/bin/env python
from sdk.market import ApiError, MarketClient


def main():
    seller = MarketClient(base_url="http://127.0.0.1:8085", user_id=42)
    buyer = MarketClient(base_url="http://127.0.0.1:8085", user_id=7)

    print("Checking API...")
    print(seller.health())

    # -----------------------------
    # Categories
    # -----------------------------
    categories = seller.list_categories()
    print("\nCategories:", [c["name"] for c in categories])
    if not categories:
        print("No categories yet, run `python -m app.seed` first")
        return
    category_id = categories[0]["id"]

    # -----------------------------
    # Create a listing
    # -----------------------------
    print("\nCreating a listing as user 42...")
    desk = seller.create_product(category_id, "Desk", 500, location="Library block")
    print(desk)

    print("\nListing products in", categories[0]["name"])
    print(seller.list_products(category_id=category_id))

    # -----------------------------
    # Only the owner may change it
    # -----------------------------
    print("\nUser 7 tries to mark it sold...")
    try:
        buyer.mark_sold(desk["id"])
    except ApiError as e:
        print(f"Rejected ({e.status_code}): {e.message}")

    print("\nOwner marks it sold (twice)...")
    print(seller.mark_sold(desk["id"])["isSold"])
    print(seller.mark_sold(desk["id"])["isSold"])

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nOwner deletes it...")
    seller.delete_product(desk["id"])
    try:
        seller.get_product(desk["id"])
    except ApiError as e:
        print(f"Fetching it again: {e.status_code} {e.message}")


if __name__ == "__main__":
    main()
