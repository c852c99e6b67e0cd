__version__ = "0.1.0"
openassets_version = f"openassets {__version__}"
