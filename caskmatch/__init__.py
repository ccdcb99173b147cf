"""caskmatch — match installed macOS apps to Homebrew casks."""

__version__ = "0.1.0"
