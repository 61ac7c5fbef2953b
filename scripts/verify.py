import httpx
import asyncio
import sys

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

async def run_verification():
    print(f"🚀  Starting Verification against {BASE_URL}...\n")

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /health...")
        try:
            resp = await client.get("/health")
            if resp.status_code == 200 and resp.json() == {"status": "ok"}:
                print("   ✅  Health Check Passed")
            else:
                print(f"   ❌  Health Check Failed: {resp.text}")
                return
        except httpx.HTTPError as e:
            print(f"   ❌  Connection Error: {e}")
            return

        # 2. Create Record
        print("\n2. [API] Creating Record...")
        short = "verify-test"
        payload = {"short": short, "full": "https://www.example.com"}

        # Cleanup first if exists
        resp = await client.get(f"/v1/records/short/{short}")
        if resp.status_code == 200:
            await client.delete(f"/v1/records/{resp.json()['id']}")

        resp = await client.post("/v1/records", json=payload)
        if resp.status_code == 200:
            record = resp.json()
            print(f"   ✅  Created: {record['id']} {record['short']} -> {record['full']}")
        else:
            print(f"   ❌  Create Failed: {resp.status_code} {resp.text}")
            return

        # 3. Duplicate short
        print("\n3. [API] Verifying Short Uniqueness...")
        resp = await client.post("/v1/records", json=payload)
        if resp.status_code == 409:
            print(f"   ✅  Duplicate rejected: {resp.json()['error']}")
        else:
            print(f"   ❌  Duplicate Not Rejected: {resp.status_code} {resp.text}")

        # 4. Lookups
        print("\n4. [API] Verifying Lookups...")
        for path in (
            f"/v1/records/id/{record['id']}",
            f"/v1/records/short/{short}",
            f"/v1/records/full/{payload['full']}",
        ):
            resp = await client.get(path)
            if resp.status_code == 200 and resp.json()["id"] == record["id"]:
                print(f"   ✅  {path}")
            else:
                print(f"   ❌  {path}: {resp.status_code} {resp.text}")

        # 5. Listing
        print("\n5. [API] Verifying Pagination...")
        resp = await client.get("/v1/records", params={"page": "abc", "pagin": "5"})
        if resp.status_code == 200 and resp.json()["page_config"]["page"] == 1:
            print(f"   ✅  Page config: {resp.json()['page_config']}")
        else:
            print(f"   ❌  Listing Failed: {resp.status_code} {resp.text}")

        resp = await client.get("/v1/records/len")
        print(f"   ℹ️  Total records: {resp.json().get('len')}")

        # 6. Delete
        print("\n6. [API] Verifying Delete...")
        first = await client.delete(f"/v1/records/{record['id']}")
        second = await client.delete(f"/v1/records/{record['id']}")
        if first.status_code == 200 and second.status_code == 404:
            print("   ✅  Delete Passed (200 then 404)")
        else:
            print(f"   ❌  Delete Failed: {first.status_code} / {second.status_code}")

        # 7. Metrics
        print("\n7. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "http_requests_total" in resp.text:
            print("   ✅  Metrics Endpoint Exposed")
        else:
            print(f"   ❌  Metrics Failed: {resp.status_code}")

    print("\n✨ Verification Complete!")

if __name__ == "__main__":
    asyncio.run(run_verification())
