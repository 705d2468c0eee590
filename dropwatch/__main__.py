import sys

from dropwatch.main import main

sys.exit(main())
