"""notesite: render a directory of interlinked markdown notes as a static site."""

__version__ = "0.1.0"
