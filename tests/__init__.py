"""
Nyay Sahayak - Test Suite
=========================
Unit and integration tests for the Nyay Sahayak backend.
Run with: pytest tests/ -v
"""
import sys
import os
import tempfile

# Keep logs and client storage out of the source tree
os.environ.setdefault('NYAY_SAHAYAK_APP_DIR', tempfile.mkdtemp(prefix='nyay_sahayak_tests_'))
os.environ.setdefault('VERBOSE_DEBUG', 'false')

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
