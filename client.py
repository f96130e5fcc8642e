import asyncio
import os

import httpx

CACHE_FQDN = os.getenv("CACHE_FQDN", "localhost:8088")


async def exercise_cache():
    async with httpx.AsyncClient(base_url=f"http://{CACHE_FQDN}") as client:
        # First call populates the cache, second is served from it
        for attempt in (1, 2):
            response = await client.get("/api/v1/products")
            response.raise_for_status()
            print(f"Attempt {attempt}: {len(response.json())} products")

        response = await client.get("/api/v1/products/search", params={"q": "Watch "})
        print(f"Search results: {response.json()}")

        # Tell the cache a product changed
        response = await client.post("/api/v1/cache/products/invalidate", json={"product_id": "1"})
        print(f"Invalidated: {response.json()}")

        response = await client.get("/ready")
        print(f"Readiness: {response.json()}")


asyncio.run(exercise_cache())
