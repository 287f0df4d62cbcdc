"""Allow running the package as a module: python -m retail_core"""

import sys

from retail_core.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
