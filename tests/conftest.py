import os

# Keep config loading on built-in defaults unless a test points elsewhere
os.environ.setdefault("DEPLOYLOG_CONFIG", "tests/does-not-exist.yaml")

from tests.fixtures import *  # noqa: F401,F403
