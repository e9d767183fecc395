#!/usr/bin/env python3
"""
Demo script for the TTS cache.

Sends the same synthesis request twice to a running server and shows the
second one being served from cache, then prints the status report.

Usage:
    AZURE_KEY=... AZURE_REGION=westeurope python scripts/demo.py [base_url]
"""

import os
import sys
import time

import httpx


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def synthesize(client: httpx.Client, payload: dict) -> None:
    start = time.perf_counter()
    response = client.post("/tts", json=payload)
    elapsed = time.perf_counter() - start

    if response.status_code != 200:
        print(f"  ✗ {response.status_code}: {response.json().get('detail')}")
        return

    print(f"  X-Cache: {response.headers.get('X-Cache')}")
    print(f"  Content-Type: {response.headers.get('Content-Type')}")
    print(f"  Bytes: {len(response.content)}")
    print(f"  Time: {elapsed * 1000:.1f}ms")


def demo_tiers(client: httpx.Client, key: str, region: str) -> None:
    """Demonstrate the durable and temporary tiers."""
    base = {
        "language": "en-US",
        "gender": "Female",
        "name": "en-US-JennyNeural",
        "azureKey": key,
        "azureRegion": region,
    }

    print_section("Durable tier")
    durable = {**base, "text": "Welcome to the station.", "shouldCache": True}
    for attempt in (1, 2):
        print(f"\n🔊 Request {attempt}")
        synthesize(client, durable)

    print_section("Temporary tier")
    temporary = {**base, "text": f"The time is {time.strftime('%H:%M')}."}
    for attempt in (1, 2):
        print(f"\n🔊 Request {attempt}")
        synthesize(client, temporary)


def demo_status(client: httpx.Client) -> None:
    """Print the status report."""
    print_section("Status")
    data = client.get("/status").json()
    print(f"  Durable items: {data['itemsCount']}")
    print(f"  Durable memory: {data['cacheMemory']}")
    print(f"  Temporary items: {data['temporaryItemsCount']}")
    print(f"  Process RSS: {data['processAllocBytes'] / 1024 / 1024:.1f} MB")
    print(f"  GC cycles: {data['gcCycles']}")
    perf = data["performance"]
    print(f"  Hit rate: {perf['hit_rate']:.2%} over {perf['total_queries']} queries")


def main() -> None:
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"
    key = os.getenv("AZURE_KEY")
    region = os.getenv("AZURE_REGION", "westeurope")
    if not key:
        print("AZURE_KEY is not set")
        sys.exit(1)

    with httpx.Client(base_url=base_url, timeout=60) as client:
        demo_tiers(client, key, region)
        demo_status(client)


if __name__ == "__main__":
    main()
