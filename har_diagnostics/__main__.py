#!/usr/bin/env python3
"""
Entry point for running the HAR diagnostics CLI as a module.

Usage:
    python -m har_diagnostics analyze trace.har
"""

from .main import main

if __name__ == '__main__':
    main()
