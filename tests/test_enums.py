#!/usr/bin/env python3
"""Tests for Category and Priority enums."""
import pytest
from minder import Category, Priority


class TestCategory:
    """Tests for Category parsing."""

    def test_parse_is_case_insensitive(self):
        assert Category.parse("Vehicle") == Category.VEHICLE
        assert Category.parse(" HOME ") == Category.HOME

    def test_legacy_car_spelling(self):
        assert Category.parse("car") == Category.VEHICLE

    def test_parse_passes_through_members(self):
        assert Category.parse(Category.APPLIANCE) == Category.APPLIANCE

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            Category.parse("boat")

    def test_label(self):
        assert Category.APPLIANCE.label == "Appliance"


class TestPriority:
    """Tests for Priority ordering."""

    def test_total_order(self):
        assert Priority.LOW < Priority.MEDIUM < Priority.HIGH < Priority.CRITICAL

    def test_sorting(self):
        shuffled = [Priority.HIGH, Priority.LOW, Priority.CRITICAL, Priority.MEDIUM]
        assert sorted(shuffled) == [
            Priority.LOW,
            Priority.MEDIUM,
            Priority.HIGH,
            Priority.CRITICAL,
        ]

    def test_rank(self):
        assert Priority.LOW.rank == 0
        assert Priority.CRITICAL.rank == 3

    def test_parse_is_case_insensitive(self):
        assert Priority.parse("High") == Priority.HIGH

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValueError):
            Priority.parse("urgent")
