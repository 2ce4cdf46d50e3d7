"""Simple version check for the package.

Verifies that the ``__version__`` attribute matches the expected release
string and that the public call surface is re-exported."""

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

circle_of_fifths = importlib.import_module("circle_of_fifths")


def test_version_matches():
    """Ensure ``circle_of_fifths.__version__`` exposes the release version."""
    assert circle_of_fifths.__version__ == "0.1.0"


def test_public_surface():
    """The five interface calls are reachable from the package root."""
    for name in (
        "scale_notes",
        "key_signature",
        "related_keys",
        "chord_notes_for_degree",
        "optimize",
    ):
        assert callable(getattr(circle_of_fifths, name))
    assert circle_of_fifths.optimize is circle_of_fifths.optimize_voicing
