"""Unit tests for demo profile generation."""

import random

import pytest

from matchmaker.tools.profile_tools import validate_profile_fields
from matchmaker.tools.seed_tools import (
    CITIES_BY_REGION,
    DEFAULT_WEIGHTS,
    build_name,
    compute_region_counts,
    generate_profiles,
    make_pictures,
    seed_profiles,
)


class TestComputeRegionCounts:
    @pytest.mark.parametrize("total", [0, 1, 7, 100, 499])
    def test_counts_sum_to_total(self, total):
        assert sum(compute_region_counts(total, rng=random.Random(1)).values()) == total

    def test_proportional_split(self):
        counts = compute_region_counts(100, rng=random.Random(1))
        assert counts == {"Asia": 30, "Europe": 25, "Africa": 15, "Americas": 20, "Oceania": 10}

    def test_allowed_regions_only(self):
        counts = compute_region_counts(11, allowed=["Europe", "Oceania"], rng=random.Random(1))
        assert counts["Asia"] == counts["Africa"] == counts["Americas"] == 0
        assert counts["Europe"] + counts["Oceania"] == 11


class TestGenerators:
    def test_name_formats(self):
        rng = random.Random(3)
        assert len(build_name("Asia", "western", rng).split()) == 2
        assert len(build_name("Asia", "eastern", rng).split()) == 2
        assert len(build_name("Asia", "mononym", rng).split()) == 1

    def test_pictures_are_deterministic(self):
        assert make_pictures(3, 5) == [
            "https://randomuser.me/api/portraits/women/5.jpg",
            "https://randomuser.me/api/portraits/women/12.jpg",
            "https://randomuser.me/api/portraits/women/19.jpg",
        ]

    def test_generated_profiles_are_valid(self):
        profiles = generate_profiles(40, seed=7)
        known_cities = {
            f"{city}, {country}" for cities in CITIES_BY_REGION.values() for city, country, _, _ in cities
        }
        assert len(profiles) == 40
        for fields in profiles:
            validate_profile_fields(fields)
            assert 18 <= fields["age"] <= 60
            assert fields["city"] in known_cities
        assert len({p["ownerId"] for p in profiles}) == 40

    def test_same_seed_same_profiles(self):
        assert generate_profiles(10, seed=1) == generate_profiles(10, seed=1)

    def test_weights_cover_all_regions(self):
        assert set(DEFAULT_WEIGHTS) == set(CITIES_BY_REGION)


def test_seed_profiles_inserts(profile_repo):
    created = seed_profiles(profile_repo, 12, seed=3)
    assert len(created) == 12
    assert len(profile_repo.list_profiles()) == 12
