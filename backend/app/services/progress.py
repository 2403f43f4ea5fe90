"""
Progress Calculator

Derives a project's completion percentage from the task counters maintained
by the task service. Recomputed on every read, never stored.
"""

from app.models.project import ProjectMetadata


def calculate_progress(metadata: ProjectMetadata) -> int:
    """
    Percentage of completed tasks, rounded half up.

    Returns 0 for a project without tasks. Integer arithmetic keeps the
    rounding exact: 2/3 -> 67, 1/8 -> 13 (12.5 rounds up).
    """
    total = metadata.total_tasks
    if total <= 0:
        return 0

    completed = min(max(metadata.completed_tasks, 0), total)
    return (completed * 200 + total) // (total * 2)
