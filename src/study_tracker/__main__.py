#!/usr/bin/env python3
"""
Main entry point for the study tracker module.
This allows running the module with: python -m study_tracker
"""

from .core import main

if __name__ == "__main__":
    main()
