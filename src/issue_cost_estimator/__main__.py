"""
Main entry point when running as a module: python -m issue_cost_estimator
"""

from __future__ import annotations

from .cli.app import main

if __name__ == "__main__":
    main()
