"""Build scripts that set up an org for the AFDX Testdrive project.

- build_org_env: configure an existing org (Developer Edition, sandbox)
- build_scratch_env: create and configure a new scratch org
"""

from afdx_setup.builds.org_env import assemble_org_env, build_org_env
from afdx_setup.builds.scratch_env import assemble_scratch_env, build_scratch_env
from afdx_setup.builds.settings import SetupSettings

__all__ = [
    "SetupSettings",
    "assemble_org_env",
    "assemble_scratch_env",
    "build_org_env",
    "build_scratch_env",
]
