from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
SIZE_ARGS = ["160", "160"]


@dataclass
class Example:
    name: str
    filename: str
    args: list[str]

    @property
    def path(self) -> Path:
        return EXAMPLES_ROOT / self.name / self.filename

    def full_args(self, path: Path | None = None) -> list[str]:
        target = path if path is not None else self.path
        return [sys.executable, "mandelbrot.py", str(target), *self.args]


EXAMPLES: list[Example] = [
    Example(name="defaults", filename="mandelbrot.png", args=[*SIZE_ARGS]),
    Example(name="iterations", filename="high-iterations.png", args=[*SIZE_ARGS, "500"]),
    Example(name="exponent", filename="cubic.png", args=[*SIZE_ARGS, "100", "3"]),
    Example(name="exponent-zero", filename="degenerate.png", args=[*SIZE_ARGS, "100", "0"]),
    Example(name="wide", filename="wide-resolution.png", args=["240", "160"]),
    Example(
        name="window",
        filename="seahorse-valley.png",
        args=[*SIZE_ARGS, "300", "--xmin", "-0.8", "--xmax", "-0.7", "--ymin", "0.05", "--ymax", "0.15"],
    ),
    Example(name="radius", filename="large-radius.png", args=[*SIZE_ARGS, "--radius", "8"]),
    Example(name="interior-color", filename="green-interior.png", args=[*SIZE_ARGS, "--interior-color", "#00c000"]),
    Example(name="workers", filename="single-worker.png", args=[*SIZE_ARGS, "--workers", "1"]),
    Example(name="verbose", filename="diagnostic.png", args=[*SIZE_ARGS, "--verbose"]),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    _ensure_clean([example.path.parent])
    example.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    if not example.path.is_file():
        raise RuntimeError(f"Expected file {example.path} was not created")

    # A second render of the same options must be pixel-identical.
    repeat = example.path.with_name(f"repeat-{example.filename}")
    subprocess.run(example.full_args(repeat), check=True, stdout=subprocess.DEVNULL)
    completed = subprocess.run([sys.executable, "imgdiff.py", str(example.path), str(repeat)])
    repeat.unlink()
    if completed.returncode != 0:
        raise RuntimeError(f"Example {example.name} is not reproducible")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
