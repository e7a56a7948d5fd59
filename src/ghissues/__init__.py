"""gh-issues - create GitHub issues from a structured input file.

High-level public API:

from ghissues import IssuesClient, IssuesClientConfig, Dispatcher, load_issues

client = IssuesClient(IssuesClientConfig(repo='owner/repo', dry_run=True))
summary = Dispatcher(client).run(load_issues('issues.csv', 'csv'))
print(summary.totals)

The ``gh-issues`` console script delegates to this library; every record
becomes one ``gh issue create`` invocation, run sequentially in input
order.
"""

from __future__ import annotations

# Version constant (sync manually with pyproject)
__version__ = "0.2.0"

from .config import FailurePolicy, RunConfig  # noqa: E402
from .dispatch import Dispatcher, DispatchSummary  # noqa: E402
from .errors import (  # noqa: E402
    DispatchFailure,
    FileError,
    GhIssuesError,
    ParseError,
    UnsupportedFormat,
)
from .gh import DispatchResult, IssuesClient, IssuesClientConfig  # noqa: E402
from .loaders import get_loader, load_issues  # noqa: E402
from .models import Issue  # noqa: E402

__all__ = [
    "Issue",
    "load_issues",
    "get_loader",
    "IssuesClient",
    "IssuesClientConfig",
    "DispatchResult",
    "Dispatcher",
    "DispatchSummary",
    "FailurePolicy",
    "RunConfig",
    "GhIssuesError",
    "FileError",
    "ParseError",
    "UnsupportedFormat",
    "DispatchFailure",
    "__version__",
]
