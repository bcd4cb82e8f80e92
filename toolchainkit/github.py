"""GitHub API access with a simple call-rate guard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

import requests

GITHUB_API_CALL_DELAY = timedelta(minutes=1)


@dataclass(frozen=True)
class GitHubRepository:
    org: str
    name: str
    branch: str
    deployed_commit_sha: str


def new_github_session(access_token: str) -> requests.Session:
    """Return an HTTP session authenticated against the GitHub API."""
    session = requests.Session()
    session.headers.update(
        {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
    )
    return session


def can_issue_github_request(last_call: datetime | None) -> bool:
    """True when no call was made yet or the delay since the last call has passed."""
    if last_call is None:
        return True
    return datetime.now(last_call.tzinfo) > last_call + GITHUB_API_CALL_DELAY