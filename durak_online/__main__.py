import sys

from durak_online.cli import main

sys.exit(main())
