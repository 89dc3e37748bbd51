"""site-grader: deterministic website quality scoring."""

__version__ = "0.1.0"
