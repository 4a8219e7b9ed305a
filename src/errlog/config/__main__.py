import sys

from errlog.config.config import _cli_main

sys.exit(_cli_main())
