"""
Hifz revision tracker: spaced-repetition scheduling for memorized surahs.
"""

__version__ = "0.1.0"
