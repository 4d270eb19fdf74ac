import sys

from bfmemo.cli import main

sys.exit(main())
