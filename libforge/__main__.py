import sys

from libforge.cli import main

sys.exit(main())
