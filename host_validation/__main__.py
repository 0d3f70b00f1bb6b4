"""Allow running the harness with `python -m host_validation`."""

from host_validation.cli import main

main()
