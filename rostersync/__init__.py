"""
rostersync - Roster spreadsheet to static site pages

Reads a Google Sheets roster (one row per student), writes one HTML page
per student and one dashboard per teacher into a git working tree, and
commits and pushes the result on a schedule.
"""

__version__ = "1.0.0"
__author__ = "Dale Chapman"
