"""Global pytest configuration."""

import os

# Tests run against in-memory stores and the stub provider unless a suite opts in
os.environ.pop("DATABASE_URL", None)
os.environ["OPENAI_API_KEY"] = ""
