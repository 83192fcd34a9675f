"""Pytest configuration for the diagderive test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 500 examples (thorough property testing)
- ci: GitHub Actions with 50 examples (fast CI feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- CI=true environment variable -> "ci" profile (GitHub Actions sets this)
- HYPOTHESIS_PROFILE env var -> explicit override
- Otherwise -> "dev" profile (local development)

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/
"""

import os

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from diagderive import DeriveSession, DiagCtxt, MessageCatalog

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

# Generated dataclasses are compiled per example, which is slower than the
# default deadline allows on cold caches.
_SUPPRESSED = [HealthCheck.too_slow]

settings.register_profile(
    "dev",
    max_examples=500,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    deadline=None,
    suppress_health_check=_SUPPRESSED,
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
    deadline=None,
    suppress_health_check=_SUPPRESSED,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
    deadline=None,
    suppress_health_check=_SUPPRESSED,
)


# =============================================================================
# AUTO-DETECT EXECUTION CONTEXT
# =============================================================================


def _detect_profile() -> str:
    """Detect appropriate Hypothesis profile based on execution context.

    Priority:
    1. HYPOTHESIS_PROFILE env var (explicit override)
    2. CI=true env var (GitHub Actions auto-detection)
    3. Default to "dev" (local development)
    """
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# SHARED FIXTURES
# =============================================================================

# Catalog shared by the derive tests. Keys mirror the borrow checker and
# trait selection messages the declarations in the tests model.
CATALOG_FTL = """
borrowck_move = cannot move out of `{ $name }` because it is borrowed
    .label = borrow of `{ $name }` occurs here
    .note = move occurs because the value has a non-copy type
    .help = consider cloning the value
    .suggestion = clone the value

borrowck_two_labels = conflicting borrows
    .label = first borrow here
    .label_second = second borrow here

trait_impl_conflict = found both positive and negative implementation of trait `{ $trait_desc }`
    .positive = positive implementation here
    .negative = negative implementation here

lifetime_mismatch = lifetime mismatch
    .label = this parameter
    .suggestion = consider adjusting the signature so it borrows its { $len ->
        [one] argument
       *[other] arguments
    }

closure_kind_mismatch = expected a closure that implements `{ $expected }`, found `{ $found }`
    .label = this closure implements `{ $found }`, not `{ $expected }`

closure_fnonce_captured = closure is `FnOnce` because it moves `{ $place }` out of its environment
closure_fnmut_captured = closure is `FnMut` because it mutates `{ $place }`
move_hint = value moved here
move_in_loop = value moved here, in previous iteration of loop
borrow_suggestion = consider borrowing here
borrow_adjust = consider adjusting the borrow
use_of_moved = use of moved value: `{ $name }`
unused_variable = unused variable: `{ $name }`
    .suggestion = if this is intentional, prefix it with an underscore
    .help = remove the variable
"""


@pytest.fixture
def catalog() -> MessageCatalog:
    return MessageCatalog.from_source(CATALOG_FTL)


@pytest.fixture
def session(catalog: MessageCatalog) -> DeriveSession:
    return DeriveSession(catalog)


@pytest.fixture
def ctxt(catalog: MessageCatalog) -> DiagCtxt:
    return DiagCtxt(catalog)
