import sys

from pybattmon.cli import main

sys.exit(main())
