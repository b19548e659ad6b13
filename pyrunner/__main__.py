import sys

from pyrunner.main import main

sys.exit(main())
