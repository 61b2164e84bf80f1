"""
Root conftest.py to set up Python path for pytest.

This runs before test collection, ensuring imports work correctly.
"""
import sys
import os
import tempfile

# Add backend directory to Python path FIRST
backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Keep log files out of the source tree (read when config.paths is imported)
os.environ.setdefault('DEPLOYER_DATA_DIR', tempfile.mkdtemp(prefix='deployer-tests-'))

# Pre-import modules that might conflict with test directory names
# (tests/unit/deployment_tests) before pytest imports the test modules
import deployment
