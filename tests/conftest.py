import os
import sys

# The modules live at the repository root; make them importable when pytest
# is started from another directory.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)
