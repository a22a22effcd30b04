"""Demo profile generator for local development and load testing.

Profiles are spread across regions by weight, get a name in one of three
formats, a city with real coordinates and 1-6 portrait URLs. A seeded
``random.Random`` makes runs reproducible.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Literal, Optional

from matchmaker.tools.interest_tools import utcnow
from matchmaker.tools.repositories import ProfileRepository
from matchmaker.utils.logging_config import logger

NameFormat = Literal["western", "eastern", "mononym"]

DEFAULT_WEIGHTS = {
    "Asia": 0.30,
    "Europe": 0.25,
    "Africa": 0.15,
    "Americas": 0.20,
    "Oceania": 0.10,
}

FIRST_NAMES_BY_REGION = {
    "Asia": ["Yumi", "Mei", "Hana", "Priya", "Aiko", "Sakura", "Nari", "Hina", "Yuna", "Akari"],
    "Europe": ["Sofia", "Emma", "Mia", "Emily", "Lea", "Anna", "Lena", "Clara", "Ella", "Nina"],
    "Africa": ["Amina", "Zainab", "Fatima", "Nia", "Amara", "Ada", "Imani", "Aisha", "Zuri", "Tia"],
    "Americas": ["Maria", "Sophia", "Isabella", "Olivia", "Emma", "Ava", "Mia", "Charlotte", "Amelia", "Harper"],
    "Oceania": ["Isla", "Evie", "Ava", "Aria", "Zoe", "Chloe", "Mia", "Ella", "Ruby", "Lily"],
}

NEUTRAL_FIRST_NAMES = ["Alice", "Grace", "Luna", "Ava", "Maya", "Zoe", "Chloe", "Leah"]

LAST_NAMES = ["Smith", "Garcia", "Kim", "Chen", "Singh", "Ivanov", "Dubois", "Nguyen", "Hernandez", "Brown"]

# (city, country, lat, lng)
CITIES_BY_REGION = {
    "Asia": [
        ("Tokyo", "Japan", 35.6762, 139.6503),
        ("Seoul", "South Korea", 37.5665, 126.9780),
        ("Shanghai", "China", 31.2304, 121.4737),
        ("Mumbai", "India", 19.0760, 72.8777),
        ("Bangkok", "Thailand", 13.7563, 100.5018),
    ],
    "Europe": [
        ("London", "United Kingdom", 51.5074, -0.1278),
        ("Berlin", "Germany", 52.5200, 13.4050),
        ("Paris", "France", 48.8566, 2.3522),
        ("Madrid", "Spain", 40.4168, -3.7038),
        ("Rome", "Italy", 41.9028, 12.4964),
    ],
    "Africa": [
        ("Lagos", "Nigeria", 6.5244, 3.3792),
        ("Cairo", "Egypt", 30.0444, 31.2357),
        ("Nairobi", "Kenya", -1.2921, 36.8219),
        ("Johannesburg", "South Africa", -26.2041, 28.0473),
        ("Accra", "Ghana", 5.6037, -0.1870),
    ],
    "Americas": [
        ("New York", "USA", 40.7128, -74.0060),
        ("Mexico City", "Mexico", 19.4326, -99.1332),
        ("São Paulo", "Brazil", -23.5558, -46.6396),
        ("Toronto", "Canada", 43.6532, -79.3832),
        ("Buenos Aires", "Argentina", -34.6037, -58.3816),
    ],
    "Oceania": [
        ("Sydney", "Australia", -33.8688, 151.2093),
        ("Melbourne", "Australia", -37.8136, 144.9631),
        ("Auckland", "New Zealand", -36.8485, 174.7633),
        ("Brisbane", "Australia", -27.4698, 153.0251),
        ("Perth", "Australia", -31.9523, 115.8613),
    ],
}

BIOS = [
    "Coffee lover and weekend hiker",
    "Tech enthusiast and foodie",
    "Photographer exploring new places",
    "Bookworm who loves sci-fi",
    "Music junkie and vinyl collector",
    "Runner, traveler, and brunch aficionado",
    "Home cook experimenting with world cuisines",
    "Art gallery regular and film buff",
]


def compute_region_counts(
    total: int,
    allowed: Optional[list[str]] = None,
    rng: Optional[random.Random] = None,
) -> dict[str, int]:
    """Split ``total`` across regions proportionally to DEFAULT_WEIGHTS.

    Floors each share, then hands the remainder out one at a time to random
    allowed regions. Regions not allowed always get 0.
    """

    rng = rng or random.Random()
    regions = allowed or list(DEFAULT_WEIGHTS)
    weight_sum = sum(DEFAULT_WEIGHTS[r] for r in regions)

    counts = {r: 0 for r in DEFAULT_WEIGHTS}
    assigned = 0
    for region in regions:
        # round first: the weights do not sum to exactly 1.0 in floating point
        share = int(round(DEFAULT_WEIGHTS[region] / weight_sum * total, 6))
        counts[region] = share
        assigned += share

    for _ in range(total - assigned):
        counts[rng.choice(regions)] += 1

    return counts


def make_pictures(count: int, seed: int) -> list[str]:
    base = seed % 100
    return [
        f"https://randomuser.me/api/portraits/women/{(base + i * 7) % 100}.jpg"
        for i in range(count)
    ]


def build_name(region: str, name_format: NameFormat, rng: random.Random) -> str:
    pool = FIRST_NAMES_BY_REGION.get(region) or [
        name for names in FIRST_NAMES_BY_REGION.values() for name in names
    ]
    first = rng.choice(NEUTRAL_FIRST_NAMES) if rng.randint(0, 4) == 0 else rng.choice(pool)
    last = rng.choice(LAST_NAMES)

    if name_format == "eastern":
        return f"{last} {first}"
    if name_format == "mononym":
        return first
    return f"{first} {last}"


def generate_profile(
    region: str,
    rng: random.Random,
    name_format: NameFormat = "western",
    pictures_per_profile: Optional[int] = None,
    include_bio: bool = True,
    owner_id: Optional[str] = None,
) -> dict:
    """Profile fields for one demo user located in a city of ``region``."""

    city, country, lat, lng = rng.choice(CITIES_BY_REGION[region])
    count = pictures_per_profile or rng.randint(1, 6)
    count = max(1, min(6, count))

    return {
        "ownerId": owner_id,
        "name": build_name(region, name_format, rng),
        "age": rng.randint(18, 60),
        "pictures": make_pictures(count, rng.randint(0, 5000)),
        "latitude": lat,
        "longitude": lng,
        "city": f"{city}, {country}",
        "bio": rng.choice(BIOS) if include_bio else None,
    }


def generate_profiles(
    total: int,
    seed: Optional[int] = None,
    regions: Optional[list[str]] = None,
    name_format: NameFormat = "western",
) -> list[dict]:
    """Profile fields for ``total`` demo users, owned by ``demo-user-<n>``."""

    rng = random.Random(seed)
    counts = compute_region_counts(total, regions, rng)

    profiles: list[dict] = []
    for region, count in counts.items():
        for _ in range(count):
            profiles.append(
                generate_profile(
                    region,
                    rng,
                    name_format=name_format,
                    owner_id=f"demo-user-{len(profiles) + 1}",
                )
            )
    return profiles


def seed_profiles(
    profiles: ProfileRepository,
    total: int,
    seed: Optional[int] = None,
    now: Optional[datetime] = None,
) -> list[dict]:
    """Insert ``total`` generated profiles into a store."""

    now = now or utcnow()
    created = [profiles.create_profile(fields, now) for fields in generate_profiles(total, seed)]
    logger.info("Seeded %s demo profiles", len(created))
    return created
