"""
Where benchmark names come from.

Benchmarks are found by scanning the source tree rather than loading classes,
so a module that was renamed or dropped from the build shows up as a load
failure instead of silently disappearing from the run.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

BENCHMARK_PREFIX = "Benchmark"
SOURCE_SUFFIX = ".java"
BENCHMARK_SOURCE_DIR = Path("benchmarks") / "src"


class BenchmarkProvider(ABC):

    @abstractmethod
    def list_available_measurements(self) -> List[str]:
        pass


class StaticBenchmarkProvider(BenchmarkProvider):
    """A fixed list of benchmark names, e.g. the ones given on the command line."""

    def __init__(self, names: Iterable[str]):
        self.names = list(names)

    def list_available_measurements(self) -> List[str]:
        return list(self.names)


class SourceTreeBenchmarkProvider(BenchmarkProvider):
    """Finds Benchmark* classes under <module>/benchmarks/src for every module in main_dir."""

    def __init__(self, main_dir: Path, blacklist_modules: Optional[Iterable[str]] = None):
        self.main_dir = Path(main_dir)
        self.blacklist_modules = set(blacklist_modules or [])

    def list_available_measurements(self) -> List[str]:
        if not self.main_dir.is_dir():
            raise FileNotFoundError(f"Path does not exist: {self.main_dir}")

        names = []
        for module in sorted(self.main_dir.iterdir()):
            if not module.is_dir() or module.name in self.blacklist_modules:
                continue
            source_root = module / BENCHMARK_SOURCE_DIR
            if not source_root.is_dir():
                continue
            names.extend(self._find_benchmarks(source_root))
        logger.info(f"Found {len(names)} benchmark classes in {self.main_dir}")
        return names

    @staticmethod
    def _find_benchmarks(source_root: Path) -> List[str]:
        found = []
        for f in sorted(source_root.rglob(f"{BENCHMARK_PREFIX}*{SOURCE_SUFFIX}")):
            if not f.is_file():
                continue
            relative = f.relative_to(source_root).with_suffix("")
            found.append(".".join(relative.parts))
        return found
