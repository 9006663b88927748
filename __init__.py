"""
Device Triage Planner
=====================
A training engine for home and small-office network hygiene. Trainees place
simulated devices into trust zones and toggle security controls; a declarative
rule set turns that state into a risk score with an explanation trail.

NOTE: All scenario data is fictional. The score is a teaching aid, not a
      security assessment.
"""

__version__ = "1.0.0"
__author__ = "Device Triage Planner"
