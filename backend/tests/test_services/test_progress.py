"""Tests for the progress calculator."""

import pytest

from app.models.project import ProjectMetadata
from app.services.progress import calculate_progress


@pytest.mark.parametrize(
    "total,completed,expected",
    [
        (0, 0, 0),
        (10, 7, 70),
        (5, 5, 100),
        (3, 2, 67),
        (3, 1, 33),
        (8, 1, 13),
        (200, 1, 1),
    ],
)
def test_calculate_progress(total, completed, expected):
    metadata = ProjectMetadata(total_tasks=total, completed_tasks=completed)
    assert calculate_progress(metadata) == expected


def test_progress_is_bounded():
    for total in range(1, 30):
        for completed in range(total + 1):
            value = calculate_progress(ProjectMetadata(total_tasks=total, completed_tasks=completed))
            assert 0 <= value <= 100
