"""
Centralized path configuration for the deployer
Ensures all modules use consistent, volume-mounted paths
"""

import os

# Base paths - the /app/data directory is mounted as a volume in Docker
DATA_DIR = os.getenv('DEPLOYER_DATA_DIR', '/app/data')

# Rotating application logs
LOG_DIR = os.path.join(DATA_DIR, 'logs')


def ensure_data_dirs():
    """Create data directories if they don't exist"""
    for directory in [DATA_DIR, LOG_DIR]:
        os.makedirs(directory, exist_ok=True)
        try:
            os.chmod(directory, 0o700)
        except OSError:
            pass  # May not have permission in some environments


# For development/testing outside Docker
if not os.path.exists('/app') and 'DEPLOYER_DATA_DIR' not in os.environ:
    DATA_DIR = './data'
    LOG_DIR = os.path.join(DATA_DIR, 'logs')
