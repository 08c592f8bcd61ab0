import os

import pytest


ISOLATED_ENV_VARS = ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITHUB_API_URL")


@pytest.fixture(scope="session", autouse=True)
def isolate_github_environment():
    """Temporarily remove GitHub settings from the environment.

    CI runners export GITHUB_TOKEN and friends, and several tests expect
    the configuration defaults. The variables are restored afterwards.
    """
    saved = {name: os.environ.pop(name) for name in ISOLATED_ENV_VARS if name in os.environ}
    try:
        yield
    finally:
        os.environ.update(saved)
