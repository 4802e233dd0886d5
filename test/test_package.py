"""
Tests for the civ_anim package surface.
"""

import pytest
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


class TestPackage:
    """Test suite for the top-level package."""

    def test_import(self):
        """Test that the decoder can be imported."""
        from civ_anim import AnimationDecoder
        assert AnimationDecoder is not None

    def test_version(self):
        """Test that version is defined."""
        from civ_anim import __version__
        assert __version__ is not None
        assert isinstance(__version__, str)

    def test_codec_exports(self):
        """Test the names exported by the codec package."""
        import civ_anim.codec as codec
        for name in codec.__all__:
            assert hasattr(codec, name)
