"""Allow ``python -m claim_workers``."""

from .main import main

main()
