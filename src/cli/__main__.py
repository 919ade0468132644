"""Allow ``python -m src.cli`` execution; delegates to the concerts CLI."""

from src.cli.concerts import main

main()
