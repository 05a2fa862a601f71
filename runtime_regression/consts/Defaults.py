DEFAULT_TOLERANCE = 0.4
DEFAULT_MAX_ITERATIONS = 10
DEFAULT_TIMEOUT_MIN = 3

BENCHMARK_RESULTS_DIR = "runtime_regression"
BASELINE_DIR = "baseline"
JMH_DIR = "jmh"
MINIMUM_DIR = "minimum"

SUMMARY_FILE = "summary.txt"
RESULTS_FILE = "results.csv"
ERRORS_FILE = "errors.txt"
EXCEPTIONS_FILE = "exceptions.txt"
RUNTIME_FILE = "runtime.txt"
STDERR_FILE = "stderr.txt"

IDENTIFIER_SEPARATOR = ":"
