"""Test utilities for sprig applications::

    from sprig.testing import TestClient
"""

from sprig.testing.client import TestClient

__all__ = ["TestClient"]
