# =============================================================================
# spam-protection Entry Point for `python -m spam_protection`
# =============================================================================
# This module allows spam-protection to be run as a Python module:
#
#   python -m spam_protection ip 8.8.8.8
#
# This is equivalent to running the 'spam-protection' command after installation.
# =============================================================================

import sys

from spam_protection.cli import main

if __name__ == "__main__":
    sys.exit(main())
