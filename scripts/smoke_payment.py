"""Post sandbox payments against a running relay and summarize the outcomes.

Square's sandbox accepts the test nonce `cnon:card-nonce-ok`; use
`cnon:card-nonce-declined` to exercise the processor-failure path.
"""

import argparse
import asyncio
import statistics
import time
from uuid import uuid4

import httpx


async def send_one(client: httpx.AsyncClient, base_url: str, source_id: str, amount: str, idx: int):
    """Send one payment request and return (status_code, latency_ms, body)."""

    started = time.perf_counter()
    payload = {
        "sourceId": source_id,
        "amount": amount,
        "customerName": f"Smoke Tester {idx}",
        "customerEmail": f"smoke+{idx}@example.com",
    }
    try:
        resp = await client.post(
            f"{base_url}/create-payment",
            json=payload,
            headers={"x-correlation-id": str(uuid4())},
        )
        latency = (time.perf_counter() - started) * 1000
        return resp.status_code, latency, resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        latency = (time.perf_counter() - started) * 1000
        return 599, latency, {"error": str(exc)}


def error_messages(results) -> list[str]:
    """Distinct error texts from failed responses, ignoring bodies without one."""

    messages = set()
    for code, _, body in results:
        if code < 300 or not isinstance(body, dict):
            continue
        message = body.get("details") or body.get("error")
        if message:
            messages.add(str(message))
    return sorted(messages)


async def run(total: int, concurrency: int, base_url: str, source_id: str, amount: str) -> None:
    """Execute a bounded-concurrency run and print summary stats."""

    sem = asyncio.Semaphore(concurrency)
    results = []

    async with httpx.AsyncClient(timeout=30.0) as client:
        async def worker(i: int):
            async with sem:
                return await send_one(client, base_url, source_id, amount, i)

        tasks = [asyncio.create_task(worker(i)) for i in range(total)]
        for task in asyncio.as_completed(tasks):
            results.append(await task)

    codes = [code for code, _, _ in results]
    lats = [latency for _, latency, _ in results]
    success = sum(1 for c in codes if 200 <= c < 300)
    errors = error_messages(results)

    print(f"total={total}")
    print(f"success={success}")
    print(f"failed={total - success}")
    print(f"avg_ms={statistics.mean(lats):.2f}")
    for error in errors:
        print(f"error={error}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-test POST /create-payment against a sandbox relay.")
    parser.add_argument("--total", type=int, default=5)
    parser.add_argument("--concurrency", type=int, default=5)
    parser.add_argument("--base-url", default="http://localhost:3001")
    parser.add_argument("--source-id", default="cnon:card-nonce-ok")
    parser.add_argument("--amount", default="1.00")
    args = parser.parse_args()
    asyncio.run(run(args.total, args.concurrency, args.base_url, args.source_id, args.amount))
