"""
Roast Share — optimize roast memes and post them to X.
"""

__version__ = "0.1.0"
