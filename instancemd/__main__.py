# This file is part of instancemd. See LICENSE file for license information.

import sys

from instancemd.cmd.main import main

sys.exit(main())
