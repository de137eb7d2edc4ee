from migration_checker.cli import cli

if __name__ == "__main__":
    cli()
