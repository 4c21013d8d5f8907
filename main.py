from flowform.cli import run as run_cli


if __name__ == "__main__":
    run_cli()
