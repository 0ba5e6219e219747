import pytest

from storage_distribution.matrices import matrices


@pytest.fixture(autouse=True)
def reset_matrices():
    """
    Tests may register decision matrices on the global registry with
    matrices.load(...). Drop those after every test so the next one starts
    from the packaged profiles only.
    """
    yield
    matrices.reset()
