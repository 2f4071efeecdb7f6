"""Allow ``python -m jira_ci_reporter``."""

from .cli import main

if __name__ == "__main__":
    main()
