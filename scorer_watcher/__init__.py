"""
Scorer Watcher - Automated top-scorer announcement pipeline.

This package provides functionality to:
- Fetch the ranked scorer list and an independent scorer list
- Cross-check both lists by last name
- Select the joint leaders
- Announce them on Twitter/X with their pictures
"""

__version__ = "1.0.0"
__author__ = "Scorer Watcher Team"
