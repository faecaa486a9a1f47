#!/usr/bin/env python3
"""
issue-dev-token.py - Mint a dashboard access token for local development.

Signs a short-lived HS256 token with JWT_SECRET, the same way the identity
provider does, so the dashboard API can be exercised without one. Optionally
registers a site for that user and prints the embed snippet.

Usage:
    python scripts/issue-dev-token.py
    python scripts/issue-dev-token.py --user dev-user --hours 24
    python scripts/issue-dev-token.py --domain example.com --api-url http://localhost:8787
"""

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from jose import jwt

from minilytics.config import get_settings
from minilytics.dependencies import ALGORITHM


# ANSI color codes
class C:
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"


def issue_token(user_id: str, hours: float) -> str:
    """Sign an access token for ``user_id`` valid for ``hours``."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def register_site(api_url: str, token: str, domain: str) -> tuple[bool, dict | str]:
    """Register ``domain`` through POST /api/sites."""
    url = f"{api_url.rstrip('/')}/api/sites"
    req = Request(
        url,
        data=json.dumps({"domain": domain}).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        },
        method="POST",
    )

    try:
        with urlopen(req, timeout=10) as resp:
            return True, json.loads(resp.read().decode("utf-8"))["site"]
    except HTTPError as e:
        body = e.read().decode("utf-8", errors="replace")[:200]
        return False, f"HTTP {e.code}: {body}"
    except URLError as e:
        return False, f"Connection error: {e.reason}"


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Mint a Minilytics dashboard token for local development"
    )
    parser.add_argument(
        "--user",
        type=str,
        default="dev-user",
        help="User id to put in the token subject (default: dev-user)",
    )
    parser.add_argument(
        "--hours",
        type=float,
        default=12,
        help="Token lifetime in hours (default: 12)",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="API base URL to register a site with (e.g., http://localhost:8787)",
    )
    parser.add_argument(
        "--domain",
        type=str,
        default="localhost",
        help="Domain to register when --api-url is given (default: localhost)",
    )
    args = parser.parse_args()

    settings = get_settings()
    if settings.jwt_secret in settings.INSECURE_SECRETS:
        print(f"\n  {C.YELLOW}JWT_SECRET is a development default.{C.RESET}")

    token = issue_token(args.user, args.hours)

    print(f"\n{C.BOLD}Minilytics Dev Token{C.RESET}")
    print(f"{C.DIM}{'=' * 60}{C.RESET}\n")
    print(f"  {C.BOLD}User:{C.RESET}      {args.user}")
    print(f"  {C.BOLD}Expires:{C.RESET}   in {args.hours:g}h")
    print(f"  {C.BOLD}Token:{C.RESET}\n  {C.CYAN}{token}{C.RESET}\n")

    print(f"  {C.BOLD}Try it:{C.RESET}")
    base = args.api_url or settings.public_base_url
    print(f'  {C.DIM}curl -H "Authorization: Bearer $TOKEN" {base}/api/stats{C.RESET}\n')

    if not args.api_url:
        return

    print(f"  {C.BOLD}Registering {args.domain}...{C.RESET}")
    ok, result = register_site(args.api_url, token, args.domain)
    if not ok:
        print(f"  {C.RED}Registration failed{C.RESET} {C.DIM}{result}{C.RESET}")
        sys.exit(1)

    print(f"  {C.GREEN}Registered{C.RESET} site_id {C.CYAN}{result['site_id']}{C.RESET}\n")
    print(f"  {C.BOLD}Embed snippet:{C.RESET}")
    print(f"  {C.DIM}<script defer")
    print(f'    src="{args.api_url.rstrip("/")}/tracker.js"')
    print(f'    data-site-id="{result["site_id"]}"')
    print(f"  ></script>{C.RESET}\n")


if __name__ == "__main__":
    main()
