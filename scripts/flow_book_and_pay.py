#!/usr/bin/env python3
"""
Request, approve and start paying for a rental through the API.

This script only orchestrates API calls. All rules live in the backend.

Tokens come from the auth provider; pass them with --renter-token and
--owner-token or the RENTER_TOKEN / OWNER_TOKEN environment variables.

Usage:
    python scripts/flow_book_and_pay.py --item-id <UUID> --start 2026-11-01 --end 2026-11-03

Flow:
    1. Quote the price
    2. Request the booking (renter)
    3. Approve it (owner)
    4. Start checkout (renter) and print the payment URL
    5. Optionally wait for the webhook to mark it paid
"""

import argparse
import json
import os
import sys
import time

import httpx

BASE_URL = os.environ.get("RENTSHARE_API_URL", "http://localhost:8000")


def api_request(token: str | None, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make an API request, authenticated when a token is given."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = httpx.request(
        method,
        f"{BASE_URL}/api/v1{endpoint}",
        headers=headers,
        json=data if method != "GET" else None,
        timeout=10.0,
        follow_redirects=True,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None) -> bool:
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    data = result["data"]
    if fields:
        data = {k: data.get(k) for k in fields if k in data}
    print(json.dumps(data, indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Booking and payment flow")
    parser.add_argument("--item-id", required=True, help="Item UUID")
    parser.add_argument("--start", required=True, help="First rental day (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="Last rental day (YYYY-MM-DD)")
    parser.add_argument("--renter-token", default=os.environ.get("RENTER_TOKEN"))
    parser.add_argument("--owner-token", default=os.environ.get("OWNER_TOKEN"))
    parser.add_argument("--wait", type=int, default=0, help="Seconds to poll for the paid status")
    args = parser.parse_args()

    if not args.renter_token or not args.owner_token:
        print("ERROR: renter and owner tokens are required")
        sys.exit(1)

    dates = {"item_id": args.item_id, "start_date": args.start, "end_date": args.end}

    print_step(1, "Quote price")
    quote = api_request(None, "POST", "/bookings/quote", dates)
    if not print_result(quote):
        sys.exit(1)
    if not quote["data"].get("available"):
        print("ERROR: Dates are already taken")
        sys.exit(1)

    print_step(2, "Request booking")
    booking = api_request(args.renter_token, "POST", "/bookings", dates)
    if not print_result(booking, ["id", "status", "days", "total_price"]):
        sys.exit(1)
    booking_id = booking["data"]["id"]

    print_step(3, "Approve booking (as owner)")
    approval = api_request(args.owner_token, "POST", f"/bookings/{booking_id}/approve")
    if not print_result(approval):
        sys.exit(1)
    print(f"\nOther pending requests for these dates: {approval['data']['pending_overlaps']}")

    print_step(4, "Start checkout")
    checkout = api_request(args.renter_token, "POST", "/payments/checkout", {"booking_id": booking_id})
    if not print_result(checkout):
        sys.exit(1)
    print(f"\nPay here: {checkout['data']['url']}")

    if args.wait:
        print_step(5, "Wait for payment webhook")
        deadline = time.time() + args.wait
        while time.time() < deadline:
            current = api_request(args.renter_token, "GET", f"/bookings/{booking_id}")
            if current["data"].get("status") == "paid":
                print_result(current, ["id", "status", "paid_at", "payment_reference"])
                break
            time.sleep(3)
        else:
            print("Booking not paid yet")

    print("\n" + "="*60)
    print("FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
