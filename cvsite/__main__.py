import sys

from cvsite.cli import main

raise SystemExit(main(sys.argv[1:]))
