#!/usr/bin/env python3
"""
simulate-traffic.py - Send synthetic page views to a Minilytics instance.

Drives the Python tracking client against a running API so the dashboard
has something to show. Each simulated visitor lands on a page, browses a
few more with client-side navigation, and may fire a custom event.

Usage:
    python scripts/simulate-traffic.py --site-id <uuid>
    python scripts/simulate-traffic.py --site-id <uuid> --visitors 50
    python scripts/simulate-traffic.py --site-id <uuid> --api-url http://localhost:8787 --domain blog.local
"""

import argparse
import random
import sys

from minilytics.tracker import (
    KeepAliveTransport,
    PageContext,
    Tracker,
    TrackerOptions,
)


# ANSI color codes
class C:
    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"


PATHS = [
    "/",
    "/pricing",
    "/blog",
    "/blog/launch",
    "/blog/privacy-first-analytics",
    "/docs",
    "/docs/install",
    "/about",
]

REFERRERS = [
    "",
    "",
    "https://news.ycombinator.com/",
    "https://www.google.com/",
    "https://duckduckgo.com/",
    "https://twitter.com/",
]

EVENTS = ["signup", "download", "newsletter"]


def simulate_visitor(
    api_url: str,
    site_id: str,
    domain: str,
    transport: KeepAliveTransport,
    rng: random.Random,
) -> int:
    """Simulate one visit and return how many events it reported."""
    sent = 0

    class Counting:
        def send(self, url: str, payload: dict) -> None:
            nonlocal sent
            sent += 1
            transport.send(url, payload)

    context = PageContext.with_history(
        f"https://{domain}{rng.choice(PATHS)}",
        title="Minilytics demo",
        referrer=rng.choice(REFERRERS),
        navigator_do_not_track="1" if rng.random() < 0.1 else None,
    )
    tracker = Tracker(
        TrackerOptions(site_id=site_id, api_url=api_url),
        context=context,
        transport=Counting(),
    )
    tracker.init()

    for _ in range(rng.randint(0, 4)):
        context.history.push_state(None, "", rng.choice(PATHS))
    if len(context.history) > 1 and rng.random() < 0.3:
        context.history.back()
    if rng.random() < 0.2:
        tracker.track_event(rng.choice(EVENTS), {"variant": rng.choice(["a", "b"])})

    return sent


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Send synthetic page views to a Minilytics instance"
    )
    parser.add_argument(
        "--site-id",
        type=str,
        required=True,
        help="Public site id to attribute traffic to",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default="http://localhost:8787",
        help="API base URL (default: http://localhost:8787)",
    )
    parser.add_argument(
        "--domain",
        type=str,
        default="localhost",
        help="Domain the simulated pages live on (default: localhost)",
    )
    parser.add_argument(
        "--visitors",
        type=int,
        default=20,
        help="Number of visitors to simulate (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible traffic",
    )
    args = parser.parse_args()

    if args.visitors < 1:
        print(f"{C.RED}--visitors must be at least 1{C.RESET}")
        sys.exit(1)

    endpoint = f"{args.api_url.rstrip('/')}/api/track"
    rng = random.Random(args.seed)
    transport = KeepAliveTransport()

    print(f"\n{C.BOLD}Minilytics Traffic Simulator{C.RESET}")
    print(f"{C.DIM}{'=' * 60}{C.RESET}")
    print(f"  {C.BOLD}Endpoint:{C.RESET}  {C.CYAN}{endpoint}{C.RESET}")
    print(f"  {C.BOLD}Site:{C.RESET}      {args.site_id}")
    print(f"  {C.BOLD}Visitors:{C.RESET}  {args.visitors}\n")

    total = 0
    for i in range(args.visitors):
        sent = simulate_visitor(endpoint, args.site_id, args.domain, transport, rng)
        total += sent
        marker = f"{C.GREEN}{sent} sent{C.RESET}" if sent else f"{C.DIM}DNT, skipped{C.RESET}"
        print(f"  visitor {i + 1:>3}: {marker}")

    transport.flush(timeout=30)
    transport.close()

    print(f"\n  {C.BOLD}Done.{C.RESET} {total} events queued for {args.domain}\n")


if __name__ == "__main__":
    main()
