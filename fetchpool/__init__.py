"""
fetchpool: fetch batches of URLs to disk with a bounded pool of workers.
"""

__version__ = "0.1.0"
