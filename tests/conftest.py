"""
Pytest configuration for graphrepr tests.

Provides:
- Hypothesis configuration for deterministic fuzzing
- Shared test utilities (rebuild: render then evaluate)
"""

import os

from graphrepr import to_source

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# - print_blob=True makes failures easy to reproduce
# - derandomize=True in the ci profile keeps CI runs repeatable

try:
    from hypothesis import settings

    settings.register_profile(
        "default",
        print_blob=True,
        derandomize=False,
    )

    settings.register_profile(
        "ci",
        print_blob=True,
        derandomize=True,
        max_examples=300,
    )

    profile = os.environ.get("HYPOTHESIS_PROFILE", "default")
    settings.load_profile(profile)

except ImportError:
    pass  # hypothesis not installed, skip configuration


# =============================================================================
# Shared Test Utilities
# =============================================================================

def rebuild(value, **kwargs):
    """
    Render *value* and evaluate the result in a fresh namespace.

    The evaluation host is plain eval(); the emitted expression imports
    whatever it needs itself.
    """
    source = to_source(value, **kwargs)
    return eval(source, {})
