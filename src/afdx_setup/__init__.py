"""Org setup automation for the AFDX Pro-Code Testdrive project.

Runs the Salesforce CLI commands that deploy the project, create the
agent user and assign its permissions, either in an existing org or in a
new scratch org. The commands run through a small sequential task
pipeline (:mod:`afdx_setup.pipeline`).
"""

from afdx_setup.exceptions import AfdxSetupError
from afdx_setup.meta import __version__

__all__ = [
    "AfdxSetupError",
    "__version__",
]
