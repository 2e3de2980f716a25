"""In-toto SLSA provenance statements and SPDX helpers for build artifacts."""

__version__ = "0.1.0"

__all__ = ["config", "docref", "filetypes", "hashing", "provenance"]