import sys

from vcenter_inventory.cli import main

sys.exit(main())
