#!/usr/bin/env python3
"""VCL Preprocessor Runner Script

This script sets up the Python path and runs the VCL preprocessor.

Usage:
    python vcl_preprocess.py <input> [output] [-j] [-v]
"""

import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / 'src'))

from vclpp.main import main

if __name__ == '__main__':
    sys.exit(main())
