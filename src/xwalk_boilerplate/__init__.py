__version__ = "0.1.0"

__all__ = [
    "__version__",
    "actions",
    "classifier",
    "cli",
    "config",
    "core",
    "errors",
    "exit_codes",
    "manifest",
    "pipeline",
    "repackager",
    "rewriter",
    "source",
]
