"""
Storefront Simulation Script

Runs many concurrent shoppers against a live storefront. Each shopper has
its own session cookie and walks the full visit: add items, open the cart,
check out, then poll the order status until it is delivered.
Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_SHOPPERS = 20
STATUS_POLL_SECONDS = 2.0

# Sample data for random shoppers
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
STREETS = ["Main St", "Almeda Rd", "Kirby Dr", "Westheimer Rd", "Montrose Blvd", "Dowling St", "Scott St"]
VALID_ZIPS = ["77002", "77004", "77006", "77019", "77021", "77030", "77098"]
FAR_ADDRESSES = ["233 S Wacker Dr, Chicago, IL 60606", "1 Market St, San Francisco, CA 94105"]
PIZZA_TYPES = ["Cheese", "Pepperoni"]
SODAS = ["Coke", "Sprite", "Dr. Pepper", "Orange Soda"]


def generate_random_customer(deliverable: bool = True) -> dict[str, str]:
    """Generate random checkout form fields."""
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    if deliverable:
        address = f"{random.randint(1, 9999)} {random.choice(STREETS)}, Houston, TX {random.choice(VALID_ZIPS)}"
    else:
        address = random.choice(FAR_ADDRESSES)
    return {
        "name": f"{first} {last}",
        "phone": f"(713) {random.randint(200, 999)}-{random.randint(1000, 9999)}",
        "email": f"{first.lower()}.{last.lower()}@example.com",
        "address": address,
    }


def generate_random_items() -> list[dict[str, Any]]:
    """Generate add-to-cart payloads, customizations included."""
    choices = [
        {
            "item_id": "grand-opening-special",
            "customization": {
                "kind": "combo",
                "pizza_type": random.choice(PIZZA_TYPES),
                "sodas": [random.choice(SODAS), random.choice(SODAS)],
            },
        },
        {"item_id": "cheese-pizza"},
        {"item_id": "pepperoni-pizza", "special_instructions": "Well done"},
        {"item_id": "fettuccine-alfredo"},
        {"item_id": "soda", "customization": {"kind": "soda", "soda": random.choice(SODAS)}},
    ]
    items = []
    for _ in range(random.randint(1, 4)):
        item = dict(random.choice(choices))
        item["quantity"] = random.randint(1, 3)
        items.append(item)
    return items


# =============================================================================
# SHOPPER SIMULATION
# =============================================================================

async def run_shopper(shopper_num: int, deliverable: bool) -> dict[str, Any]:
    """One full visit in its own session."""
    start_time = time.time()

    # A client per shopper keeps each session cookie separate
    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0) as client:
        try:
            for item in generate_random_items():
                response = await client.post("/api/cart/items", json=item)
                response.raise_for_status()

            await client.post("/api/view/cart/open")
            response = await client.post("/api/view/checkout")
            response.raise_for_status()
            cart_total = response.json()["cart"]["total"]

            response = await client.post("/api/orders", json=generate_random_customer(deliverable))
            elapsed = round(time.time() - start_time, 3)

            if response.status_code == 400:
                return {
                    "shopper_num": shopper_num,
                    "success": False,
                    "rejected": True,
                    "error": response.json().get("detail", "")[:100],
                    "time": elapsed,
                }
            response.raise_for_status()

            order = response.json()["order"]
            statuses = [order["status"]]
            while not order["is_complete"]:
                await asyncio.sleep(STATUS_POLL_SECONDS)
                order = (await client.get("/api/orders/current")).json()
                if order["status"] != statuses[-1]:
                    statuses.append(order["status"])

            return {
                "shopper_num": shopper_num,
                "success": True,
                "order_id": order["order_id"],
                "total": Decimal(order["total"]),
                "cart_total": Decimal(cart_total),
                "statuses": statuses,
                "time": elapsed,
            }

        except httpx.HTTPError as e:
            return {
                "shopper_num": shopper_num,
                "success": False,
                "rejected": False,
                "error": str(e)[:100],
                "time": round(time.time() - start_time, 3),
            }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    num_shoppers: int = TOTAL_SHOPPERS,
    far_ratio: float = 0.2,
) -> dict[str, Any]:
    """
    Run the concurrent shopper simulation.

    Args:
        num_shoppers: Number of concurrent sessions
        far_ratio: Share of shoppers whose address is outside the delivery area
    """
    print("=" * 70)
    print("🍕 STOREFRONT SIMULATION - CONCURRENT SHOPPERS")
    print("=" * 70)
    print(f"📋 Shoppers: {num_shoppers}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"🗺️  Out-of-area share: {far_ratio:.0%}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    tasks = [
        run_shopper(i + 1, deliverable=random.random() >= far_ratio)
        for i in range(num_shoppers)
    ]
    results = await asyncio.gather(*tasks)
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    rejected = [r for r in results if r.get("rejected")]
    failed = [r for r in results if not r["success"] and not r.get("rejected")]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Delivered Orders: {len(successful)}/{num_shoppers}")
    print(f"🚫 Rejected at Checkout: {len(rejected)}/{num_shoppers}")
    print(f"❌ Errors: {len(failed)}/{num_shoppers}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum((r["total"] for r in successful), Decimal("0"))
        mismatched = [r for r in successful if r["total"] != r["cart_total"]]
        skipped = [r for r in successful if len(r["statuses"]) < 2]

        print("\n📈 Checkout Metrics:")
        print(f"   Average time to place: {avg_time}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")
        print(f"   Order total != cart total: {len(mismatched)}")
        print(f"   Orders seen only in one status: {len(skipped)}")

    if rejected:
        print(f"\n🚫 Rejection reason: {rejected[0]['error']}")

    if failed:
        print("\n⚠️  Error Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Shopper #{f['shopper_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_shoppers,
        "successful": len(successful),
        "rejected": len(rejected),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def test_single_flows() -> bool:
    """Check the individual endpoints before the concurrent run."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=API_BASE_URL) as client:
        # Test 1: Health check
        print("\n1️⃣ Health Check...")
        response = await client.get("/health")
        if response.status_code == 200:
            data = response.json()
            print(f"   ✅ Status: {data.get('status')}")
            print(f"   Geo: {data.get('geo_service')}")
            print(f"   Notifications: {data.get('notification_service')}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

        # Test 2: Menu
        print("\n2️⃣ Menu...")
        response = await client.get("/api/menu")
        if response.status_code == 200:
            items = response.json()["items"]
            print(f"   ✅ {len(items)} items")
            for item in items:
                print(f"      {item['id']}: ${item['price']}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

        # Test 3: Cart totals
        print("\n3️⃣ Cart Totals...")
        await client.post("/api/cart/items", json={"item_id": "cheese-pizza"})
        state = (await client.post(
            "/api/cart/items",
            json={"item_id": "soda", "customization": {"kind": "soda", "soda": "Coke"}},
        )).json()
        soda_id = state["cart"]["lines"][-1]["id"]
        cart = (await client.post(f"/api/cart/items/{soda_id}/increment")).json()["cart"]
        print(f"   Subtotal: ${cart['subtotal']} (expected $21.00)")
        print(f"   Total: ${cart['total']} (expected $31.00)")

        # Test 4: Out-of-area address is rejected
        print("\n4️⃣ Out-of-Area Checkout...")
        await client.post("/api/view/cart/open")
        await client.post("/api/view/checkout")
        response = await client.post("/api/orders", json=generate_random_customer(deliverable=False))
        if response.status_code == 400:
            print(f"   ✅ Rejected: {response.json().get('detail')}")
        else:
            print(f"   ⚠️ Response: {response.status_code} {response.text[:100]}")

        # Test 5: Valid checkout
        print("\n5️⃣ Valid Checkout...")
        response = await client.post("/api/orders", json=generate_random_customer())
        if response.status_code == 200:
            order = response.json()["order"]
            print(f"   ✅ Order #{order['order_id']} placed ({order['label']})")
            print(f"   Total: ${order['total']}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Storefront Simulation Script")
    parser.add_argument("--shoppers", type=int, default=TOTAL_SHOPPERS, help="Number of shoppers")
    parser.add_argument("--far-ratio", type=float, default=0.2, help="Share of out-of-area addresses")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    args = parser.parse_args()

    if not args.skip_tests:
        success = asyncio.run(test_single_flows())
        if not success:
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)

        print("\n✅ Pre-flight tests passed!")
        input("\nPress Enter to start the simulation...")

    asyncio.run(run_simulation(num_shoppers=args.shoppers, far_ratio=args.far_ratio))
