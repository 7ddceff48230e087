__version__ = "0.1.0"

__all__ = [
    "__version__",
    "adapters",
    "checks",
    "cli",
    "code_library",
    "config",
    "contracts",
    "core",
    "environment",
    "errors",
    "exit_codes",
    "layout",
    "library",
    "logging",
    "scripts",
]
