import sys

from spc_outlook.cli import main

sys.exit(main())
