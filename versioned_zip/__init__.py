"""versioned-zip - package a directory, zip or tar.gz into a versioned zip."""

__version__ = "0.9.0"
