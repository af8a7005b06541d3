"""Allow ``python -m afdx_setup``."""

from afdx_setup.cli.app import main

if __name__ == "__main__":
    main()
