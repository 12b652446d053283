import sys

from scrollsplit.cli import main

sys.exit(main())
