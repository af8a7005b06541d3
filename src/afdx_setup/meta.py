"""Package metadata for afdx_setup."""

__app_name__ = "afdx-setup"
__version__ = "1.0.0"
__description__ = "Org setup automation for the AFDX Pro-Code Testdrive project."
__author__ = "AFDX Testdrive contributors"
__license_type__ = "BSD-3-Clause"

__all__ = [
    "__app_name__",
    "__author__",
    "__description__",
    "__license_type__",
    "__version__",
]
