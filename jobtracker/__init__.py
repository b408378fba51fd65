# JobTracker - Job Application Tracker
"""
JobTracker - Track the companies, positions and statuses of the jobs you
have applied to.
"""

__version__ = "0.1.0"
__description__ = "Job application tracking service"
