"""Entry point for building the documentation site from a checkout."""

import sys

from docbuilder.build_docs import main

if __name__ == "__main__":
    sys.exit(main())
