import sys

from aitest_devops.cli import main

sys.exit(main())
