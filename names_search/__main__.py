import sys

from names_search.cli import main

sys.exit(main())
