import sys

from allocation_system.cli import main


if __name__ == "__main__":
    sys.exit(main())
