"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core logic and adapters to be
tested without external dependencies:

- FakeNotificationPort: Captured notifications for assertion
- FakeLogBatchPort: Captured batches for receiver tests
"""

from .batch import FakeLogBatchPort
from .notification import FakeNotificationPort

__all__ = [
    "FakeLogBatchPort",
    "FakeNotificationPort",
]
