import sys

from unified_replication.cli import main

if __name__ == '__main__':
    sys.exit(main())
