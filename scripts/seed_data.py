#!/usr/bin/env python3
"""
Seed script: signs up a user and creates listings through the site's own forms (no direct DB).
Run: the app must be running.
  python scripts/seed_data.py
  python scripts/seed_data.py --listings 50 --base-url http://localhost:8080
"""

import argparse
import random

import httpx

BASE_URL = "http://localhost:8080"

TITLES = [
    "Cozy Beachfront Cottage", "Modern Loft in Downtown", "Mountain Retreat", "Historic Villa",
    "Secluded Treehouse", "Beachfront Paradise", "Rustic Cabin by the Lake", "Luxury Penthouse",
    "Ski-In/Ski-Out Chalet", "Safari Lodge", "Canal-side Apartment", "Desert Oasis",
]

PLACES = [
    ("Malibu", "United States"), ("New York City", "United States"), ("Aspen", "United States"),
    ("Florence", "Italy"), ("Portland", "United States"), ("Cancun", "Mexico"),
    ("Lake Tahoe", "United States"), ("Los Angeles", "United States"), ("Verbier", "Switzerland"),
    ("Serengeti National Park", "Tanzania"), ("Amsterdam", "Netherlands"), ("Dubai", "United Arab Emirates"),
]

DESCRIPTIONS = [
    "Escape to this charming spot for a relaxing getaway.",
    "Stay in the heart of the city in this stylish place.",
    "Unplug and unwind in this peaceful retreat.",
    "Wake up to stunning views every morning.",
    "Close to restaurants, shops and the best local sights.",
]


def random_listing() -> dict:
    location, country = random.choice(PLACES)
    fields = {
        "title": random.choice(TITLES),
        "description": random.choice(DESCRIPTIONS),
        "image": "",
        "price": random.choice([800, 1000, 1200, 1500, 2000, 2500, 3000, 4000]),
        "location": location,
        "country": country,
    }
    return {f"listing[{key}]": str(value) for key, value in fields.items()}


def main():
    ap = argparse.ArgumentParser(description="Seed listings via the site's forms")
    ap.add_argument("--listings", type=int, default=20, help="Number of listings to create")
    ap.add_argument("--username", default="seeder")
    ap.add_argument("--password", default="password123")
    ap.add_argument("--base-url", default=BASE_URL, help="Site base URL")
    args = ap.parse_args()

    created = 0
    errors = []

    # The session cookie is kept by the client between requests
    with httpx.Client(base_url=args.base_url, timeout=30.0, follow_redirects=False) as client:
        client.post(
            "/signup",
            data={"username": args.username, "email": f"{args.username}@example.com", "password": args.password},
        )
        r = client.post("/login", data={"username": args.username, "password": args.password})
        if r.status_code != 302 or r.headers.get("location") != "/listings":
            print(f"Login as {args.username} failed: {r.status_code}")
            return

        print(f"Creating {args.listings} listings...")
        for i in range(args.listings):
            try:
                r = client.post("/listings", data=random_listing())
                if r.status_code == 302:
                    created += 1
                else:
                    errors.append(f"Listing {i + 1}: {r.status_code}")
            except httpx.HTTPError as e:
                errors.append(f"Listing {i + 1}: {e}")
            if (i + 1) % 10 == 0:
                print(f"  ... {i + 1} listings")

    print(f"\nDone. Listings created: {created}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)


if __name__ == "__main__":
    main()
