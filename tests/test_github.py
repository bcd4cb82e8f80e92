from datetime import datetime, timedelta, timezone

from toolchainkit.github import (
    GitHubRepository,
    can_issue_github_request,
    new_github_session,
)


def test_delay_threshold_not_expired_yet():
    last_call = datetime.now() - timedelta(seconds=29)
    assert can_issue_github_request(last_call) is False


def test_delay_threshold_expired():
    last_call = datetime.now() - timedelta(minutes=1)
    assert can_issue_github_request(last_call) is True


def test_delay_threshold_with_aware_time():
    recent = datetime.now(timezone.utc) - timedelta(seconds=10)
    old = datetime.now(timezone.utc) - timedelta(minutes=5)
    assert can_issue_github_request(recent) is False
    assert can_issue_github_request(old) is True


def test_first_call():
    assert can_issue_github_request(None) is True


def test_session_carries_token():
    session = new_github_session("token")
    assert session.headers["Authorization"] == "Bearer token"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_repository_fields():
    repo = GitHubRepository("org", "name", "main", "abc123")
    assert (repo.org, repo.name, repo.branch, repo.deployed_commit_sha) == (
        "org", "name", "main", "abc123",
    )