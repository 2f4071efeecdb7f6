"""Issue key extraction."""

from .tickets import IssueKeyExtractor, extract_issue, extract_issues, resolve_issue_keys

__all__ = ["IssueKeyExtractor", "extract_issue", "extract_issues", "resolve_issue_keys"]
