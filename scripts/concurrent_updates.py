#!/usr/bin/env python3
"""
Check versioned updates under concurrency: send N PATCH requests in parallel
to the same query and verify every one landed in the version history.

On PostgreSQL the update locks the row (SELECT ... FOR UPDATE), so the
history must end up with exactly N more entries. SQLite ignores the lock and
may lose updates.

Usage:
  python scripts/concurrent_updates.py --query-id UUID [--url URL] [--concurrent N]
  Or set env: QUERYSTORE_URL, QUERY_ID, CONCURRENT
"""

import argparse
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed

import httpx


def do_update(base: str, query_id: str, index: int) -> tuple[int, int]:
    """Send one PATCH with a distinct label; return (index, status_code)."""
    try:
        r = httpx.patch(
            f"{base}/queries/{query_id}",
            json={"label": f"concurrent-{index}"},
            timeout=30,
        )
        return (index, r.status_code)
    except httpx.HTTPError:
        return (index, -1)  # -1 = error


def history_length(base: str, query_id: str) -> int:
    r = httpx.get(
        f"{base}/queries/{query_id}", params={"include_history": True}, timeout=30
    )
    r.raise_for_status()
    return len(r.json()["version_history"])


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Send N parallel versioned updates to one query."
    )
    parser.add_argument(
        "--url",
        default=os.environ.get("QUERYSTORE_URL", "http://localhost:8000/api/v1"),
        help="API base URL including the /api/v1 prefix",
    )
    parser.add_argument(
        "--query-id",
        default=os.environ.get("QUERY_ID", ""),
        help="Id of an existing query (or set QUERY_ID env)",
    )
    parser.add_argument(
        "--concurrent",
        type=int,
        default=int(os.environ.get("CONCURRENT", "20")),
        help="Number of concurrent requests (default 20)",
    )
    args = parser.parse_args()

    if not args.query_id:
        print("Error: --query-id or QUERY_ID env required", file=sys.stderr)
        sys.exit(1)

    before = history_length(args.url, args.query_id)
    print(f"Sending {args.concurrent} concurrent PATCH requests to {args.query_id}")
    print("---")

    results: list[tuple[int, int]] = []
    with ThreadPoolExecutor(max_workers=args.concurrent) as executor:
        futures = {
            executor.submit(do_update, args.url, args.query_id, i): i
            for i in range(1, args.concurrent + 1)
        }
        for fut in as_completed(futures):
            idx, code = fut.result()
            results.append((idx, code))
            code_str = str(code) if code >= 0 else "ERR"
            print(f"{idx} HTTP {code_str}")

    ok = sum(1 for _, c in results if c == 200)
    err = sum(1 for _, c in results if c != 200)
    added = history_length(args.url, args.query_id) - before
    print("---")
    print(f"Done. 200={ok} failed={err} history +{added}")
    if added != ok:
        print(f"Lost updates: {ok - added}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
