import sys

from annotation_search.cli import main

sys.exit(main())
