"""Helper submodules for the Prakriti planner.

This package groups the assessment engine (``modules.assessment``), the
configuration layer, persistence (SQLAlchemy engine and repository) and the
progress-tracking collaborator that sits next to the plan builder.
"""

__all__: list[str] = [
    "assessment",
    "config",
    "db",
    "progress",
    "repo",
]
