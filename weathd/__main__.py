import sys

from weathd.cli import main

sys.exit(main())
