"""Result codes returned by user-facing operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class OperationResult:
    code: str
    message: Optional[str] = None
    hint: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.code.startswith("2")


CREATED = OperationResult(code="201")
CHANGED = OperationResult(code="204")

REPO_ALREADY_IN_DB = OperationResult(message="This repo is already in the database.", code="409")
REPO_NOT_FOUND = OperationResult(message="This repo could not be found on GitHub.", code="404")
INVALID_GITHUB_URL = OperationResult(
    message="This is not a valid GitHub repository url.",
    code="400",
    hint="Expected https://github.com/<owner>/<repo>",
)
BAD_USER = OperationResult(
    message="The graphQL resolver did not receive a valid user.",
    code="400",
    hint="Are you loggedIn?",
)
BOOKMARK_ALREADY_EXISTS = OperationResult(message="This bookmark is already in the database.", code="409")
BOOKMARK_DOES_NOT_EXIST = OperationResult(message="This bookmark does not exist on the database.", code="409")
PROJECT_DOES_NOT_EXIST = OperationResult(message="This project does not exist on the database.", code="404")
CATEGORY_DOES_NOT_EXIST = OperationResult(message="This bookmark category does not exist.", code="404")


def database_error(error: Exception) -> OperationResult:
    return OperationResult(message=f"Database error: {error.__class__.__name__}", code="500")
