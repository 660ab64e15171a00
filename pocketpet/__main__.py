import sys

from pocketpet.main import main

sys.exit(main())
