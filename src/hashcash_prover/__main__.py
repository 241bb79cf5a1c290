"""Main entry point for the hashcash_prover package."""
from hashcash_prover.cli import cli, ENVVAR_PREFIX


def main():
    """Main entry point function."""
    cli(auto_envvar_prefix=ENVVAR_PREFIX)


if __name__ == "__main__":
    main()
