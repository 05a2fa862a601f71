from dataclasses import dataclass, field
from typing import List, Optional

from runtime_regression.consts.Defaults import (
    BASELINE_DIR,
    BENCHMARK_RESULTS_DIR,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TIMEOUT_MIN,
    DEFAULT_TOLERANCE,
    JMH_DIR,
)


@dataclass
class RegressionConfig:
    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    timeout_min: float = DEFAULT_TIMEOUT_MIN
    results_path: str = BENCHMARK_RESULTS_DIR
    baseline_dir_name: str = BASELINE_DIR
    jmh_dir_name: str = JMH_DIR
    randomized_order: bool = True
    shuffle_seed: Optional[int] = None
    java_cmd: str = "java"
    benchmark_jar: str = "benchmarks.jar"
    main_path: str = "main"
    blacklist_modules: List[str] = field(default_factory=list)
    email_path: str = "email_login.txt"
    # Explicit subset of benchmarks; empty means discover all of them
    benchmark_names: List[str] = field(default_factory=list)
    summary_only: bool = False
    minimum_only: bool = False
