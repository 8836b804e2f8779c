"""skillswap: skill listings, discovery and connection requests between members."""

__version__ = "0.1.0"
