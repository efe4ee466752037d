import sys

from graphinator.runner import main

if __name__ == "__main__":
    sys.exit(main())
