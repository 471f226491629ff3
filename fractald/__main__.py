"""
Allow running the package directly: python -m fractald
"""
import sys

from .cli import main

sys.exit(main())
