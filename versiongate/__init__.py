"""
                Version Gate

Client-side API version negotiation, schema compatibility gating and
build-time migration compatibility checking for the restaurant ordering
platform (web, customer and business clients).

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
