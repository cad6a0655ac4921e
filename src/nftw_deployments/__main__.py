"""Allow running as `python -m nftw_deployments`."""

from .cli import run

if __name__ == "__main__":
    run()
