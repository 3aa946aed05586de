"""Test basic functionality of gridio."""

import gridio


def test_version():
    """Test that version is defined."""
    assert hasattr(gridio, "__version__")
    assert isinstance(gridio.__version__, str)


def test_author():
    """Test that author is defined."""
    assert hasattr(gridio, "__author__")
    assert isinstance(gridio.__author__, str)


def test_email():
    """Test that email is defined."""
    assert hasattr(gridio, "__email__")
    assert isinstance(gridio.__email__, str)


def test_public_api():
    """Test that the reader entry points are exported."""
    for name in gridio.__all__:
        assert hasattr(gridio, name)
