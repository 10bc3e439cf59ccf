"""Allow running the provisioner with ``python -m kinde_provisioner``."""

from kinde_provisioner.cli import main

if __name__ == "__main__":
    main()
