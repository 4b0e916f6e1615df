"""
gemfeed: hidden-gem discovery feeds over the YouTube Data API.
"""
__version__ = "0.1.0"
