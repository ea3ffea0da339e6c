"""
Panamerican Gymnastics Tournament Registration

Backend for country delegations registering choreographies, coaches,
judges and support staff to Pan-American aerobic gymnastics tournaments,
with country-scoped access control and a registration status workflow.
"""

__version__ = "1.0.0"
__author__ = "Panamerican Gymnastics Team"
__license__ = "MIT"
