"""Main entry point for the MTG Card Designer."""

import sys

from mtg_card_designer.cli import main

if __name__ == "__main__":
    sys.exit(main())
