import pytest
from ratrecon import BACKEND_PRIORITY, avail_backends, get_ring

# Run every ring-dependent test with each installed integer backend
backends = [b for b in BACKEND_PRIORITY if b in avail_backends]


@pytest.fixture(params=backends, scope="session")
def curr_backend(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized backend names."""
    return request.param


@pytest.fixture(scope="session")
def Z(curr_backend):
    """Provide session-level fixture for the integer ring of the current backend."""
    return get_ring(curr_backend)
