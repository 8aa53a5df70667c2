"""Starter .diffaudit.toml template."""

DEFAULT_TOML = """\
# diffaudit configuration
version = "1.0"

[generator]
endpoint = ""                  # URL of the streaming analysis endpoint
# api_key = ""                 # prefer DIFFAUDIT_GENERATOR_KEY in the environment
model = "gemini-1.5-flash-8b"
max_diff_chars = 30000         # diff is truncated to this many characters
timeout = 120.0

[github]
# token = ""                   # prefer DIFFAUDIT_GITHUB_TOKEN in the environment
api_base = "https://api.github.com"
web_base = "https://github.com"

[stream]
chunk_size = 256               # chunk size used by --replay
repair_partial = false         # show partial results before the object closes

[output]
format = "terminal"            # terminal | json
show_added = true
show_removed = true
show_context = true
live = true
"""
