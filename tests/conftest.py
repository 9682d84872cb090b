"""Pytest configuration shared by all test suites"""

import os
import sys
from pathlib import Path

# Set env vars BEFORE any test module imports src.config
# (config reads the environment once, at import time)
os.environ.setdefault("LOG_FILE", "")  # No log files from test runs

# Add project root to path for src imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
