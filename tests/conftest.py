"""Shared test fixtures."""

import pytest


@pytest.fixture
def serializable_schedule():
    """Fixture providing a schedule whose only conflict is T2 -> T1 on x."""
    return [
        ("T1", "R", "x"),
        ("T2", "R", "x"),
        ("T1", "W", "x"),
        ("T2", "C", ""),
        ("T1", "C", ""),
    ]


@pytest.fixture
def cyclic_schedule():
    """Fixture providing a schedule with conflicts in both directions."""
    return [
        ("T1", "R", "x"),
        ("T2", "W", "x"),
        ("T2", "R", "y"),
        ("T1", "W", "y"),
        ("T1", "C", ""),
        ("T2", "C", ""),
    ]


@pytest.fixture
def aborted_schedule():
    """Fixture providing a schedule where T1 aborts."""
    return [
        ("T1", "R", "x"),
        ("T2", "W", "x"),
        ("T1", "A", ""),
        ("T2", "C", ""),
    ]
