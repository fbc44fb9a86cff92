"""Allows `python -m poolpumpsizing`."""
import sys

from poolpumpsizing.main import main

if __name__ == "__main__":
    sys.exit(main())
