"""Basic package tests."""

import hbjob


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    assert hasattr(hbjob, "__version__")
    assert hbjob.__version__ == "0.1.0"


def test_package_exports_exceptions() -> None:
    """Test that the error hierarchy is importable from the package."""
    from hbjob.exceptions import (
        CancellationError,
        ConfigurationError,
        HBJobError,
        NoVideoStreamError,
        ProbeError,
        ToolNotFoundError,
        WorkerError,
    )

    for exc in (
        CancellationError,
        ConfigurationError,
        NoVideoStreamError,
        ProbeError,
        ToolNotFoundError,
        WorkerError,
    ):
        assert issubclass(exc, HBJobError)
    assert issubclass(NoVideoStreamError, ProbeError)
    assert issubclass(ToolNotFoundError, ConfigurationError)
