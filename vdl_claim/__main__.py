"""
Entry point for running the claim CLI as a module.

Usage:
    python -m vdl_claim
"""

from vdl_claim.cli import main

if __name__ == "__main__":
    main()
