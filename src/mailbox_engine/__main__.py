# =============================================================================
# mailbox-engine Entry Point for `python -m mailbox_engine`
# =============================================================================
# This module allows the CLI to be run as a Python module:
#
#   python -m mailbox_engine
#
# This is equivalent to running the 'mailbox-engine' command after installation.
# =============================================================================

import sys

from mailbox_engine.app import main

if __name__ == "__main__":
    sys.exit(main())
