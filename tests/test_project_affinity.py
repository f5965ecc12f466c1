"""Unit tests for the project affinity score."""

from decimal import Decimal

import pytest

from marketmatch.matching.models import ProjectProfile, ProjectType
from marketmatch.matching.scorers import project_affinity


def exhibition(**attributes) -> ProjectProfile:
    return ProjectProfile(project_type=ProjectType.EXHIBITION_SETUP, **attributes)


class TestBaseScore:
    """Tests for the project-type base score."""

    def test_neither_side_is_a_project(self):
        outcome = project_affinity(ProjectProfile(), ProjectProfile())

        assert outcome.value == Decimal("0.5")
        assert outcome.fallback_reason == "not_a_project"

    def test_explicit_not_project_marker(self):
        outcome = project_affinity(
            ProjectProfile(project_type=ProjectType.NOT_PROJECT), ProjectProfile()
        )

        assert outcome.fallback_reason == "not_a_project"

    def test_missing_profile(self):
        outcome = project_affinity(None, exhibition())

        assert outcome.value == Decimal("0.5")
        assert outcome.fallback_reason == "missing_profile"

    def test_same_type(self):
        assert project_affinity(exhibition(), exhibition()).value == Decimal("0.75")

    def test_different_types(self):
        renovation = ProjectProfile(project_type=ProjectType.RENOVATION)

        assert project_affinity(exhibition(), renovation).value == Decimal("0.4")

    def test_one_sided(self):
        """Test a typed profile against an untyped one gives 0.55."""
        assert project_affinity(exhibition(), ProjectProfile()).value == Decimal("0.55")
        assert project_affinity(ProjectProfile(), exhibition()).value == Decimal("0.55")

    def test_custom_metadata_type_is_a_project(self):
        custom = ProjectProfile(project_type="STAGE_RENTAL")

        assert project_affinity(custom, ProjectProfile(project_type="STAGE_RENTAL")).value == Decimal("0.75")


class TestAdjustments:
    """Tests for the additive attribute adjustments on top of 0.75."""

    @pytest.mark.parametrize(
        "other_area,expected",
        [("95", "0.85"), ("80", "0.82"), ("65", "0.79"), ("50", "0.70")],
    )
    def test_area_ratio(self, other_area, expected):
        outcome = project_affinity(
            exhibition(area_square=Decimal("100")), exhibition(area_square=Decimal(other_area))
        )

        assert outcome.value == Decimal(expected)

    def test_area_needs_both_sides(self):
        outcome = project_affinity(exhibition(area_square=Decimal("100")), exhibition())

        assert outcome.value == Decimal("0.75")

    @pytest.mark.parametrize(
        "other_budget,expected",
        [("220000", "0.83"), ("270000", "0.80"), ("310000", "0.77"), ("500000", "0.70")],
    )
    def test_budget_difference(self, other_budget, expected):
        """Test budget difference as a fraction of the average budget."""
        outcome = project_affinity(
            exhibition(budget_amount=Decimal("200000")),
            exhibition(budget_amount=Decimal(other_budget)),
        )

        assert outcome.value == Decimal(expected)

    @pytest.mark.parametrize("other_days,expected", [("20", "0.79"), ("25", "0.77"), ("30", "0.72")])
    def test_duration_difference(self, other_days, expected):
        outcome = project_affinity(
            exhibition(duration_days=Decimal("15")), exhibition(duration_days=Decimal(other_days))
        )

        assert outcome.value == Decimal(expected)

    @pytest.mark.parametrize(
        "hint_b,expected", [("上海", "0.83"), ("上海浦东", "0.79"), ("北京", "0.71")]
    )
    def test_location_hints(self, hint_b, expected):
        outcome = project_affinity(exhibition(location_hint="上海"), exhibition(location_hint=hint_b))

        assert outcome.value == Decimal(expected)

    def test_shared_style_and_material(self):
        profile_a = exhibition(style_tags=frozenset({"现代", "简约"}), material_tags=frozenset({"桁架"}))
        profile_b = exhibition(style_tags=frozenset({"现代"}), material_tags=frozenset({"桁架", "LED"}))

        assert project_affinity(profile_a, profile_b).value == Decimal("0.80")

    def test_clamped_to_one(self):
        """Test every bonus together cannot exceed 1."""
        attributes = dict(
            area_square=Decimal("100"),
            budget_amount=Decimal("200000"),
            duration_days=Decimal("15"),
            location_hint="上海",
            style_tags=frozenset({"现代"}),
            material_tags=frozenset({"桁架"}),
        )

        assert project_affinity(exhibition(**attributes), exhibition(**attributes)).value == Decimal("1")

    def test_penalties_accumulate(self):
        """Test different types with every penalty: 0.4 - 0.05 - 0.05 - 0.03 - 0.04."""
        profile_a = exhibition(
            area_square=Decimal("10"),
            budget_amount=Decimal("1000"),
            duration_days=Decimal("1"),
            location_hint="上海",
        )
        profile_b = ProjectProfile(
            project_type=ProjectType.ENGINEERING,
            area_square=Decimal("1000"),
            budget_amount=Decimal("900000"),
            duration_days=Decimal("365"),
            location_hint="广州",
        )

        assert project_affinity(profile_a, profile_b).value == Decimal("0.23")

    def test_symmetric(self):
        profile_a = exhibition(area_square=Decimal("120"), location_hint="上海")
        profile_b = exhibition(area_square=Decimal("100"), location_hint="上海浦东")

        assert project_affinity(profile_a, profile_b) == project_affinity(profile_b, profile_a)
