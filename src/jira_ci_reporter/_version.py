"""Version information for jira-ci-reporter."""

__version__ = "1.0.0"
