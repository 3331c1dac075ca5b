import sys

from wt.cli.main import main

sys.exit(main())
