"""
Fixtures for integration tests.
"""
import pytest
import pathlib
import sys

# Add project root to path
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def real_orders_fixture():
    """
    Provides an orders export from the golden test inputs.
    Returns (path, filename) tuple.
    """
    golden_inputs = PROJECT_ROOT / "tests" / "golden" / "inputs"
    csv_files = sorted(golden_inputs.glob("orders*.csv"))

    if not csv_files:
        pytest.skip("No orders CSV files found in golden/inputs")

    csv_path = csv_files[0]
    return str(csv_path), csv_path.name


@pytest.fixture
def real_shipping_fixture():
    """
    Provides a shipping charges export from the golden test inputs.
    Returns (path, filename) tuple.
    """
    golden_inputs = PROJECT_ROOT / "tests" / "golden" / "inputs"
    csv_files = sorted(golden_inputs.glob("shipping*.csv"))

    if not csv_files:
        pytest.skip("No shipping CSV files found in golden/inputs")

    csv_path = csv_files[0]
    return str(csv_path), csv_path.name
