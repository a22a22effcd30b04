"""
Unit tests for deterministic scoring and ranking.

These tests validate the recommendation ordering:
  1. Age compatibility score (0-1, neutral 0.5 when unknown)
  2. Distance in km, or None for profiles without a location
  3. Distance-first ordering with unknown distances always last
  4. Origin resolution and pagination
"""

import pytest

from matchmaker.tools.scoring_tools import (
    CandidateRanker,
    calculate_compatibility_score,
    calculate_distance_km,
    ranking_key,
    resolve_origin,
    resolve_requester_age,
    score_candidates,
    sort_candidates,
)
from matchmaker.utils.errors import InvalidInputError, MissingOriginError


ORIGIN = {"latitude": 0.0, "longitude": 0.0}


class TestCompatibilityScore:
    """Test age compatibility."""

    @pytest.mark.parametrize("age", [18, 30, 120])
    def test_same_age_is_perfect(self, age):
        assert calculate_compatibility_score(age, age) == 1.0

    @pytest.mark.parametrize("a,b", [(18, 25), (30, 70), (18, 120), (44, 45)])
    def test_symmetric(self, a, b):
        assert calculate_compatibility_score(a, b) == calculate_compatibility_score(b, a)

    @pytest.mark.parametrize("a,b", [(18, 120), (20, 70), (18, 19), (30, 55)])
    def test_bounded(self, a, b):
        assert 0.0 <= calculate_compatibility_score(a, b) <= 1.0

    def test_linear_penalty(self):
        assert calculate_compatibility_score(30, 70) == pytest.approx(0.2)
        assert calculate_compatibility_score(30, 55) == pytest.approx(0.5)

    def test_gap_capped_at_fifty_years(self):
        assert calculate_compatibility_score(18, 68) == 0.0
        assert calculate_compatibility_score(18, 120) == 0.0

    def test_unknown_age_is_neutral(self):
        assert calculate_compatibility_score(None, 30) == 0.5
        assert calculate_compatibility_score(30, None) == 0.5


class TestDistance:
    def test_candidate_without_location_is_unknown(self):
        assert calculate_distance_km(ORIGIN, {"latitude": None, "longitude": None}) is None

    def test_same_location_is_zero(self):
        assert calculate_distance_km(ORIGIN, {"latitude": 0.0, "longitude": 0.0}) == 0.0


class TestResolveOrigin:
    def test_explicit_coordinates_win(self):
        saved = {"latitude": 10.0, "longitude": 20.0}
        assert resolve_origin(1.0, 2.0, saved) == {"latitude": 1.0, "longitude": 2.0}

    def test_falls_back_to_saved_location(self):
        saved = {"latitude": 10.0, "longitude": 20.0}
        assert resolve_origin(None, None, saved) == {"latitude": 10.0, "longitude": 20.0}

    def test_fills_single_missing_value_from_profile(self):
        saved = {"latitude": 10.0, "longitude": 20.0}
        assert resolve_origin(5.0, None, saved) == {"latitude": 5.0, "longitude": 20.0}

    def test_missing_everywhere_raises(self):
        with pytest.raises(MissingOriginError):
            resolve_origin(None, None, None)

    def test_profile_without_location_raises(self):
        with pytest.raises(MissingOriginError):
            resolve_origin(None, None, {"latitude": None, "longitude": None})

    def test_missing_origin_is_validation_error(self):
        assert issubclass(MissingOriginError, InvalidInputError)

    @pytest.mark.parametrize("lat,lng", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range(self, lat, lng):
        with pytest.raises(InvalidInputError):
            resolve_origin(lat, lng, None)


class TestResolveRequesterAge:
    def test_explicit_age_wins(self):
        assert resolve_requester_age(25, {"age": 40}) == 25

    def test_saved_age(self):
        assert resolve_requester_age(None, {"age": 40}) == 40

    def test_unknown(self):
        assert resolve_requester_age(None, None) is None

    def test_rejects_underage(self):
        with pytest.raises(InvalidInputError):
            resolve_requester_age(17, None)


class TestSortCandidates:
    """Test the ordering rule."""

    def test_unknown_distance_always_last(self):
        scored = [
            {"id": "far", "distance_km": 9000.0, "compatibility_score": 0.0},
            {"id": "nowhere", "distance_km": None, "compatibility_score": 1.0},
            {"id": "near", "distance_km": 1.0, "compatibility_score": 0.0},
        ]
        assert [c["id"] for c in sort_candidates(scored)] == ["near", "far", "nowhere"]

    def test_equal_distance_broken_by_compatibility(self):
        scored = [
            {"id": "low", "distance_km": 5.0, "compatibility_score": 0.1},
            {"id": "high", "distance_km": 5.0, "compatibility_score": 0.9},
        ]
        assert [c["id"] for c in sort_candidates(scored)] == ["high", "low"]

    def test_unknown_distances_ordered_by_compatibility(self):
        scored = [
            {"id": "a", "distance_km": None, "compatibility_score": 0.2},
            {"id": "b", "distance_km": None, "compatibility_score": 0.8},
        ]
        assert [c["id"] for c in sort_candidates(scored)] == ["b", "a"]

    def test_full_ties_keep_input_order(self):
        scored = [
            {"id": str(i), "distance_km": 1.0, "compatibility_score": 0.5}
            for i in range(5)
        ]
        assert [c["id"] for c in sort_candidates(scored)] == ["0", "1", "2", "3", "4"]

    def test_ranking_key_distance_dominates(self):
        near = {"distance_km": 1.0, "compatibility_score": 0.0}
        far = {"distance_km": 2.0, "compatibility_score": 1.0}
        assert ranking_key(near) < ranking_key(far)


class TestScoreCandidates:
    def test_pictures_never_null(self):
        scored = score_candidates(
            [{"id": "1", "age": 30, "pictures": None, "latitude": 0.0, "longitude": 0.0}],
            ORIGIN,
            30,
        )
        assert scored[0]["pictures"] == []


class TestCandidateRanker:
    """Test ranking against a stored candidate set."""

    def test_distance_beats_compatibility(self, make_profile, profile_repo):
        """A at (0,0); B at (0,0) age 30; C at (0,1) age 70 -> [B, C]."""
        a = make_profile(owner_id="a", age=30, latitude=0.0, longitude=0.0)
        b = make_profile(owner_id="b", age=30, latitude=0.0, longitude=0.0)
        c = make_profile(owner_id="c", age=70, latitude=0.0, longitude=1.0)

        ranker = CandidateRanker(profile_repo)
        items, total = ranker.rank(ORIGIN, 30, a["id"], page=1, page_size=10)

        assert [i["id"] for i in items] == [b["id"], c["id"]]
        assert total == 2
        assert items[0]["distance_km"] == 0.0
        assert items[0]["compatibility_score"] == 1.0
        assert items[1]["distance_km"] == pytest.approx(111.19, abs=0.01)
        assert items[1]["compatibility_score"] == pytest.approx(0.2)

    def test_profile_without_location_after_located_one(self, make_profile, profile_repo):
        d = make_profile(owner_id="d", age=30)
        e = make_profile(owner_id="e", age=80, latitude=0.0, longitude=0.45)

        items, _ = CandidateRanker(profile_repo).rank(ORIGIN, 30, None, 1, 10)

        assert items[0]["distance_km"] == pytest.approx(50, abs=1)
        assert [i["id"] for i in items] == [e["id"], d["id"]]
        assert items[1]["distance_km"] is None

    def test_repeated_calls_identical(self, make_profile, profile_repo):
        for i in range(12):
            make_profile(owner_id=f"u{i}", age=20 + i % 3, latitude=0.0, longitude=(i % 4) * 0.1)
        ranker = CandidateRanker(profile_repo)

        first = ranker.rank(ORIGIN, 21, None, 2, 5)
        second = ranker.rank(ORIGIN, 21, None, 2, 5)
        assert first == second

    def test_pages_cover_full_ordering(self, make_profile, profile_repo):
        for i in range(7):
            make_profile(owner_id=f"u{i}", latitude=0.0, longitude=i * 0.1)
        ranker = CandidateRanker(profile_repo)

        everything, total = ranker.rank(ORIGIN, None, None, 1, 100)
        paged = ranker.rank(ORIGIN, None, None, 1, 3)[0] + ranker.rank(
            ORIGIN, None, None, 2, 3
        )[0] + ranker.rank(ORIGIN, None, None, 3, 3)[0]

        assert total == 7
        assert [p["id"] for p in paged] == [p["id"] for p in everything]

    def test_unknown_requester_age_is_neutral(self, make_profile, profile_repo):
        make_profile(owner_id="x", age=99, latitude=0.0, longitude=0.0)
        items, _ = CandidateRanker(profile_repo).rank(ORIGIN, None, None, 1, 10)
        assert items[0]["compatibility_score"] == 0.5

    def test_rejects_page_size_above_max(self, profile_repo):
        with pytest.raises(InvalidInputError):
            CandidateRanker(profile_repo, max_page_size=100).rank(ORIGIN, None, None, 1, 101)
