"""patch-lag: days behind the latest Windows cumulative update."""

__version__ = "1.0.0"
