import sys

from crossbench.main import main

sys.exit(main())
