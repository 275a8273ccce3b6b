from unittest.mock import MagicMock

import pytest


@pytest.fixture
def logger():
    """RequestLogger double recording log_forward / log_error calls."""
    return MagicMock(spec=["log_forward", "log_error"])
