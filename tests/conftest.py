"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

# The committee size is fixed when the containers are defined, so the preset
# must be chosen before the package is imported.
os.environ.setdefault("LIGHT_CLIENT_PRESET", "minimal")

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
