"""Development script: format, lint and test the project."""

import argparse
import subprocess
import sys

CHECKS = [
    (["uv", "run", "ruff", "check", "docbuilder", "tests"], "Ruff Linting"),
    (
        ["uv", "run", "pytest", "--cov=docbuilder", "--cov-report=term-missing"],
        "Tests",
    ),
]


def run_command(command: list[str], step_name: str) -> None:
    """Run one step and stop at the first failure."""
    print(f"\n--- Running Step: {step_name} ---")
    print(f"$ {' '.join(command)}")
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError:
        print(f"\nFailed: {step_name}")
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run development checks.")
    parser.add_argument(
        "--ci", action="store_true", help="Only verify, never rewrite source files"
    )
    args = parser.parse_args()

    if not args.ci:
        run_command(["uv", "run", "ruff", "format", "docbuilder", "tests"], "Ruff Formatting")
        run_command(
            ["uv", "run", "ruff", "check", "--fix", "docbuilder", "tests"],
            "Ruff Fixes",
        )

    for command, step_name in CHECKS:
        run_command(command, step_name)

    print("\nAll development checks passed.")


if __name__ == "__main__":
    main()
