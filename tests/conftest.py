"""Shared test fixtures — sample diffs and recorded analysis streams."""

from __future__ import annotations

import json
import textwrap

import pytest


@pytest.fixture
def sample_diff() -> str:
    """A two-file diff with every line kind."""
    return textwrap.dedent("""\
        diff --git a/app/auth.py b/app/auth.py
        index 1234567..abcdef0 100644
        --- a/app/auth.py
        +++ b/app/auth.py
        @@ -1,4 +1,5 @@
         import os
        -SECRET = os.environ["SECRET"]
        +SECRET = "hunter2"
        +DEBUG = True

         def login(user):
        diff --git a/web/index.js b/web/index.js
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/web/index.js
        @@ -0,0 +1,2 @@
        +el.innerHTML = location.hash;
        +console.log("ready");
        \\ No newline at end of file
    """)


@pytest.fixture
def analysis_doc() -> dict:
    """A complete analysis object as the generator would send it."""
    return {
        "summary": "Hardcoded secret and a DOM XSS sink.",
        "overallRisk": "high",
        "issues": [
            {
                "severity": "high",
                "category": "Secrets",
                "description": "Hardcoded credential.",
                "lineNumber": 8,
                "filePath": "app/auth.py",
                "recommendation": "Load the secret from the environment.",
            },
            {
                "severity": "medium",
                "category": "XSS",
                "description": "Untrusted data written to innerHTML.",
                "lineNumber": None,
                "filePath": "web/index.js",
                "recommendation": "Use textContent.",
            },
            {
                "severity": "low",
                "category": "Config",
                "description": "Debug flag enabled.",
                "lineNumber": 9,
                "filePath": None,
                "recommendation": "Disable debug in production.",
            },
        ],
        "statistics": {"totalIssues": 3, "highRisk": 1, "mediumRisk": 1, "lowRisk": 1},
    }


@pytest.fixture
def analysis_stream(analysis_doc) -> str:
    """The analysis wrapped in prose and a fenced block, as models often reply."""
    body = json.dumps(analysis_doc, indent=2, ensure_ascii=False)
    return f"Here is the report:\n```json\n{body}\n```\nLet me know if you need more.\n"
