"""Git operations.

Usage:
    from pubgate.git import Repository

    repo = Repository(Path("/path/to/package"))
    repo.add_all()
    repo.commit("1.2.3")
"""

from pubgate.git.repository import (
    GitError,
    Repository,
    VersionControl,
)

__all__ = [
    "GitError",
    "Repository",
    "VersionControl",
]
